from __future__ import annotations

from decimal import Decimal

import pytest

from domain.errors import FieldExtractionError, OracleUnavailableError
from domain.rows import DerivedRow, FooterRow, HeaderRow
from domain.walker import LedgerWalker, RowCursor, WalkState
from services.price_oracle import FixedPriceOracle
from tests.constants import BUY_CRO, CARD_CASHBACK, CRYPTO_EARN, CSV_HEADER, EUR_TO_CRO, RECURRING_BUY, SIGNUP_BONUS, USD_TO_CRO


class _CountingOracle:
    def __init__(self, price: Decimal) -> None:
        self.price = price
        self.calls = 0

    def current_price(self) -> Decimal:
        self.calls += 1
        return self.price


class _FailingOracle:
    def current_price(self) -> Decimal:
        raise OracleUnavailableError("price feed down")


def test_reference_scenario(walker: LedgerWalker, price_oracle: FixedPriceOracle) -> None:
    records = [
        ["t1", "Sign-up Bonus Unlocked", "CRO", "25", "", "", "USD", "3.75", "3.75", "referral_gift"],
        ["t2", "Recurring Buy", "", "50.00", "", "20.0", "", "", "", ""],
    ]

    header, row, footer = list(walker.walk(records, price_oracle))

    assert isinstance(header, HeaderRow)
    assert header.row_number == 1
    assert header.cells() == ["USD", "CRO", "CRO Price", "Percent Change", "USD Change"]

    assert isinstance(row, DerivedRow)
    assert row.row_number == 2
    assert row.cells() == [
        "50.00",
        "20.0",
        "=(DIVIDE(A2,B2))",
        "=(DIVIDE(MINUS(0.150000,C2),0.150000))",
        "=MULTIPLY(A2,D2)",
    ]

    assert isinstance(footer, FooterRow)
    assert footer.row_number == 3
    assert (footer.first_data_row, footer.last_data_row) == (2, 2)
    assert footer.cells() == [
        "=SUM(A2:A2)",
        "=SUM(B2:B2)",
        "=AVERAGE(C2:C2)",
        "=MINUS(DIVIDE(SUM(A3,E3), ABS(A3)),1)",
        "=SUM(E2:E2)",
    ]


def test_rows_are_gapless_and_skip_non_purchases(walker: LedgerWalker, price_oracle: FixedPriceOracle) -> None:
    records = [
        CSV_HEADER,
        RECURRING_BUY,
        SIGNUP_BONUS,
        CARD_CASHBACK,
        USD_TO_CRO,
        CRYPTO_EARN,
        EUR_TO_CRO,
        BUY_CRO,
    ]

    walk = walker.walk(records, price_oracle)
    rows = list(walk)

    data_rows = [row for row in rows if isinstance(row, DerivedRow)]
    assert [row.row_number for row in data_rows] == [2, 3, 4, 5]
    assert [row.kind.value for row in data_rows] == ["Recurring Buy", "USD -> CRO", "EUR -> CRO", "Buy CRO"]
    assert [row.row_number for row in rows] == [1, 2, 3, 4, 5, 6]
    assert walk.purchase_count == 4
    assert walk.reward_count == 2
    assert walk.ignored_count == 2


@pytest.mark.parametrize("purchases", [0, 1, 3, 10])
def test_footer_range_excludes_header(price_oracle: FixedPriceOracle, purchases: int) -> None:
    start_row = 4
    walker = LedgerWalker(fiat_symbol="EUR", start_row=start_row)

    rows = list(walker.walk([RECURRING_BUY] * purchases, price_oracle))

    footer = rows[-1]
    assert isinstance(footer, FooterRow)
    assert footer.first_data_row == start_row + 1
    assert footer.last_data_row == start_row + purchases
    assert footer.row_number == start_row + purchases + 1
    assert footer.data_row_count == purchases
    if purchases:
        assert footer.fiat_total_formula == f"=SUM(A{start_row + 1}:A{start_row + purchases})"
    else:
        assert footer.fiat_total_formula == "=0"


def test_reward_only_ledger_footer_has_no_ranges(walker: LedgerWalker, price_oracle: FixedPriceOracle) -> None:
    rows = list(walker.walk([CSV_HEADER, SIGNUP_BONUS], price_oracle))

    assert [row.row_number for row in rows] == [1, 2]
    footer = rows[-1]
    assert isinstance(footer, FooterRow)
    assert footer.cells()[:3] == ["=0", "=0", ""]
    assert footer.fiat_change_formula == "=0"


def test_walk_is_idempotent(walker: LedgerWalker, price_oracle: FixedPriceOracle) -> None:
    records = [RECURRING_BUY, SIGNUP_BONUS, BUY_CRO]

    first = [row.cells() for row in walker.walk(records, price_oracle)]
    second = [row.cells() for row in walker.walk(records, price_oracle)]

    assert first == second


def test_price_is_fetched_once_before_streaming(walker: LedgerWalker) -> None:
    oracle = _CountingOracle(Decimal("0.2"))

    walk = walker.walk([RECURRING_BUY, USD_TO_CRO, BUY_CRO], oracle)
    assert oracle.calls == 1
    assert walk.state == WalkState.AWAITING_HEADER

    list(walk)
    assert oracle.calls == 1


def test_oracle_failure_aborts_before_any_row(walker: LedgerWalker) -> None:
    with pytest.raises(OracleUnavailableError):
        walker.walk([RECURRING_BUY], _FailingOracle())


def test_non_positive_price_is_rejected(walker: LedgerWalker) -> None:
    with pytest.raises(OracleUnavailableError):
        walker.walk_at_price([RECURRING_BUY], Decimal("0"))


def test_state_machine_reaches_done(walker: LedgerWalker, market_price: Decimal) -> None:
    walk = walker.walk_at_price([RECURRING_BUY], market_price)

    next(walk)
    assert walk.state == WalkState.STREAMING
    next(walk)
    assert walk.state == WalkState.STREAMING
    next(walk)
    assert walk.state == WalkState.DONE
    assert walk.cursor == RowCursor(start_row=1, current_row=4)

    with pytest.raises(StopIteration):
        next(walk)
    with pytest.raises(StopIteration):
        next(walk)


def test_records_are_consumed_lazily(walker: LedgerWalker, market_price: Decimal) -> None:
    consumed: list[int] = []

    def records():
        for index, record in enumerate([RECURRING_BUY, USD_TO_CRO, BUY_CRO]):
            consumed.append(index)
            yield record

    walk = walker.walk_at_price(records(), market_price)
    next(walk)
    next(walk)

    assert consumed == [0]


def test_malformed_purchase_aborts_with_context(walker: LedgerWalker, market_price: Decimal) -> None:
    broken = ["t", "EUR -> CRO", "EUR", "-80.00", "CRO", "450.25", "EUR", "", "", ""]
    walk = walker.walk_at_price([RECURRING_BUY, SIGNUP_BONUS, broken], market_price)

    next(walk)
    next(walk)
    with pytest.raises(FieldExtractionError) as exc_info:
        next(walk)

    assert exc_info.value.record_index == 2
    assert exc_info.value.kind == "EUR -> CRO"
    assert exc_info.value.field == "native_amount"


def test_cursor_requires_positive_start_row() -> None:
    with pytest.raises(ValueError):
        RowCursor.at(0)
    with pytest.raises(ValueError):
        LedgerWalker(fiat_symbol="USD", start_row=0)


def test_cursor_advance_returns_new_value() -> None:
    cursor = RowCursor.at(3)
    advanced = cursor.advance()

    assert cursor.current_row == 3
    assert advanced.current_row == 4
    assert advanced.start_row == 3
    assert advanced.first_data_row == 4
    assert advanced.last_data_row == 3
