"""Render sinks that place report rows into a spreadsheet."""

__all__ = [
    "console",
    "formatting",
    "google_sheets",
    "report_writer",
]
