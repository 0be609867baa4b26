from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import StrEnum
from typing import Iterable, Iterator

from .errors import OracleUnavailableError
from .pricing import PriceOracle
from .rows import DerivedRow, ReportRow, build_footer, build_header, project
from .transactions import RawRecord, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowCursor:
    start_row: int
    current_row: int

    @classmethod
    def at(cls, start_row: int) -> RowCursor:
        if start_row < 1:
            msg = f"start_row must be >= 1, got {start_row}"
            raise ValueError(msg)
        return cls(start_row=start_row, current_row=start_row)

    def advance(self) -> RowCursor:
        return replace(self, current_row=self.current_row + 1)

    @property
    def first_data_row(self) -> int:
        return self.start_row + 1

    @property
    def last_data_row(self) -> int:
        return self.current_row - 1


class WalkState(StrEnum):
    AWAITING_HEADER = "AWAITING_HEADER"
    STREAMING = "STREAMING"
    FINALIZING = "FINALIZING"
    DONE = "DONE"


class LedgerWalk(Iterator[ReportRow]):
    """Lazy header, data rows, footer sequence for one pass over a ledger.

    Every emitted row advances the cursor by exactly one. Reward and
    unrecognised records are consumed without taking a row number.
    """

    def __init__(
        self,
        records: Iterable[RawRecord],
        *,
        market_price: Decimal,
        fiat_symbol: str,
        start_row: int = 1,
    ) -> None:
        self._records = enumerate(records)
        self._market_price = market_price
        self._fiat_symbol = fiat_symbol
        self.cursor = RowCursor.at(start_row)
        self.state = WalkState.AWAITING_HEADER
        self.purchase_count = 0
        self.reward_count = 0
        self.ignored_count = 0

    def __iter__(self) -> LedgerWalk:
        return self

    def __next__(self) -> ReportRow:
        if self.state == WalkState.AWAITING_HEADER:
            header = build_header(self.cursor.current_row, self._fiat_symbol)
            self.cursor = self.cursor.advance()
            self.state = WalkState.STREAMING
            return header

        if self.state == WalkState.STREAMING:
            row = self._next_purchase_row()
            if row is not None:
                return row
            self.state = WalkState.FINALIZING

        if self.state == WalkState.FINALIZING:
            footer = build_footer(
                self.cursor.current_row,
                first_data_row=self.cursor.first_data_row,
                last_data_row=self.cursor.last_data_row,
            )
            self.cursor = self.cursor.advance()
            self.state = WalkState.DONE
            logger.info(
                "Ledger walk finished: %d purchases, %d rewards skipped, %d records ignored",
                self.purchase_count,
                self.reward_count,
                self.ignored_count,
            )
            return footer

        raise StopIteration

    def _next_purchase_row(self) -> DerivedRow | None:
        for record_index, record in self._records:
            kind = classify(record)
            if kind is None:
                self.ignored_count += 1
                continue
            if not kind.is_purchase:
                # TODO: report sign-up bonuses and Crypto Earn interest in their own section.
                self.reward_count += 1
                logger.debug("Skipping reward record %d kind=%s", record_index, kind.value)
                continue

            row = project(record, self.cursor.current_row, self._market_price, record_index=record_index)
            if row is None:
                continue
            self.cursor = self.cursor.advance()
            self.purchase_count += 1
            return row
        return None


class LedgerWalker:
    def __init__(self, *, fiat_symbol: str, start_row: int = 1) -> None:
        if not fiat_symbol:
            msg = "fiat_symbol must be provided"
            raise ValueError(msg)
        RowCursor.at(start_row)
        self.fiat_symbol = fiat_symbol
        self.start_row = start_row

    def walk(self, records: Iterable[RawRecord], price_oracle: PriceOracle) -> LedgerWalk:
        """Fetch the market price once, then return the lazy row sequence."""
        market_price = self._resolve_price(price_oracle)
        return self.walk_at_price(records, market_price)

    def walk_at_price(self, records: Iterable[RawRecord], market_price: Decimal) -> LedgerWalk:
        if market_price <= 0:
            msg = f"Market price must be positive, got {market_price}"
            raise OracleUnavailableError(msg)
        return LedgerWalk(
            records,
            market_price=market_price,
            fiat_symbol=self.fiat_symbol,
            start_row=self.start_row,
        )

    @staticmethod
    def _resolve_price(price_oracle: PriceOracle) -> Decimal:
        price = price_oracle.current_price()
        logger.info("Using market price %s for percent change formulas", price)
        return price


__all__ = ["LedgerWalk", "LedgerWalker", "RowCursor", "WalkState"]
