from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import ClassVar, TypeAlias

from utils.formatting import format_formula_number

from .transactions import CryptoComRecord, RawRecord, TransactionKind, classify

FIAT_COLUMN = "A"
CRO_COLUMN = "B"
PRICE_COLUMN = "C"
PERCENT_COLUMN = "D"
FIAT_CHANGE_COLUMN = "E"
COLUMN_COUNT = 5

CRO_SYMBOL = "CRO"


class RowRole(StrEnum):
    HEADER = "HEADER"
    DATA = "DATA"
    FOOTER = "FOOTER"


@dataclass(frozen=True)
class HeaderRow:
    role: ClassVar[RowRole] = RowRole.HEADER

    row_number: int
    fiat_symbol: str

    def cells(self) -> list[str]:
        return [
            self.fiat_symbol,
            CRO_SYMBOL,
            f"{CRO_SYMBOL} Price",
            "Percent Change",
            f"{self.fiat_symbol} Change",
        ]


@dataclass(frozen=True)
class DerivedRow:
    """One purchase projected onto a report row; amounts are the literal strings from the ledger."""

    role: ClassVar[RowRole] = RowRole.DATA

    row_number: int
    kind: TransactionKind
    fiat_amount: str
    cro_amount: str
    purchase_price_formula: str
    percent_change_formula: str
    fiat_change_formula: str

    def cells(self) -> list[str]:
        return [
            self.fiat_amount,
            self.cro_amount,
            self.purchase_price_formula,
            self.percent_change_formula,
            self.fiat_change_formula,
        ]


@dataclass(frozen=True)
class FooterRow:
    role: ClassVar[RowRole] = RowRole.FOOTER

    row_number: int
    first_data_row: int
    last_data_row: int
    fiat_total_formula: str
    cro_total_formula: str
    average_price_formula: str
    percent_change_formula: str
    fiat_change_formula: str

    @property
    def data_row_count(self) -> int:
        return max(0, self.last_data_row - self.first_data_row + 1)

    def cells(self) -> list[str]:
        return [
            self.fiat_total_formula,
            self.cro_total_formula,
            self.average_price_formula,
            self.percent_change_formula,
            self.fiat_change_formula,
        ]


ReportRow: TypeAlias = HeaderRow | DerivedRow | FooterRow


def purchase_price_formula(row_number: int) -> str:
    return f"=(DIVIDE({FIAT_COLUMN}{row_number},{CRO_COLUMN}{row_number}))"


def percent_change_formula(row_number: int, market_price: Decimal | float) -> str:
    price = format_formula_number(market_price)
    return f"=(DIVIDE(MINUS({price},{PRICE_COLUMN}{row_number}),{price}))"


def fiat_change_formula(row_number: int) -> str:
    return f"=MULTIPLY({FIAT_COLUMN}{row_number},{PERCENT_COLUMN}{row_number})"


def _cell_range(column: str, first_row: int, last_row: int) -> str:
    return f"{column}{first_row}:{column}{last_row}"


def build_header(row_number: int, fiat_symbol: str) -> HeaderRow:
    return HeaderRow(row_number=row_number, fiat_symbol=fiat_symbol)


def build_footer(row_number: int, *, first_data_row: int, last_data_row: int) -> FooterRow:
    """Aggregate formulas over the closed data range ``first_data_row..last_data_row``.

    The percent change cell combines this footer's own fiat total and fiat change
    cells rather than averaging column D. Without data rows the totals are a
    literal zero and the average is left blank, so no range wraps onto the
    footer row.
    """
    if last_data_row < first_data_row:
        fiat_total = cro_total = fiat_change = "=0"
        average_price = ""
    else:
        fiat_total = f"=SUM({_cell_range(FIAT_COLUMN, first_data_row, last_data_row)})"
        cro_total = f"=SUM({_cell_range(CRO_COLUMN, first_data_row, last_data_row)})"
        average_price = f"=AVERAGE({_cell_range(PRICE_COLUMN, first_data_row, last_data_row)})"
        fiat_change = f"=SUM({_cell_range(FIAT_CHANGE_COLUMN, first_data_row, last_data_row)})"
    return FooterRow(
        row_number=row_number,
        first_data_row=first_data_row,
        last_data_row=last_data_row,
        fiat_total_formula=fiat_total,
        cro_total_formula=cro_total,
        average_price_formula=average_price,
        percent_change_formula=(
            f"=MINUS(DIVIDE(SUM({FIAT_COLUMN}{row_number},{FIAT_CHANGE_COLUMN}{row_number}), "
            f"ABS({FIAT_COLUMN}{row_number})),1)"
        ),
        fiat_change_formula=fiat_change,
    )


def project(
    record: RawRecord,
    row_number: int,
    market_price: Decimal | float,
    *,
    record_index: int | None = None,
) -> DerivedRow | None:
    """Project a purchase record onto ``row_number``.

    Reward and unrecognised records produce ``None``; the caller must not
    reserve a row for them. Missing or malformed amounts raise
    :class:`~domain.errors.FieldExtractionError`.
    """
    if market_price <= 0:
        msg = f"market_price must be > 0, got {market_price}"
        raise ValueError(msg)

    kind = classify(record)
    if kind is None or not kind.is_purchase:
        return None

    decoded = CryptoComRecord.from_raw(record, record_index=record_index)
    fiat_amount, cro_amount = decoded.purchase_amounts(kind, record_index=record_index)
    return DerivedRow(
        row_number=row_number,
        kind=kind,
        fiat_amount=fiat_amount,
        cro_amount=cro_amount,
        purchase_price_formula=purchase_price_formula(row_number),
        percent_change_formula=percent_change_formula(row_number, market_price),
        fiat_change_formula=fiat_change_formula(row_number),
    )


__all__ = [
    "COLUMN_COUNT",
    "DerivedRow",
    "FooterRow",
    "HeaderRow",
    "ReportRow",
    "RowRole",
    "build_footer",
    "build_header",
    "fiat_change_formula",
    "percent_change_formula",
    "project",
    "purchase_price_formula",
]
