"""Transaction classification and report row projection.

Pure, I/O free models for turning crypto.com ledger records into spreadsheet
rows. Readers, price lookups and the spreadsheet itself live in
``importers``, ``services`` and ``sheets``.
"""

__all__ = [
    "errors",
    "pricing",
    "rows",
    "transactions",
    "walker",
]
