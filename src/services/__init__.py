"""Clients for third-party price and explorer APIs."""
