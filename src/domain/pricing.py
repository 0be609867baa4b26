from __future__ import annotations

from decimal import Decimal
from typing import Protocol


class PriceOracle(Protocol):
    """Current unit price of the tracked asset in the configured fiat."""

    def current_price(self) -> Decimal: ...
