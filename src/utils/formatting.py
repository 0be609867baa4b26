from __future__ import annotations

from decimal import Decimal


def format_formula_number(value: Decimal | float) -> str:
    # Spreadsheet formulas embed the price with six decimals, e.g. 0.150000.
    return f"{value:.6f}"
