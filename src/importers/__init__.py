"""Ledger sources for exchange transaction exports."""
