from decimal import Decimal

import pytest

from domain.walker import LedgerWalker
from services.price_oracle import FixedPriceOracle
from tests.constants import MARKET_PRICE
from tests.helpers.recording_sink import RecordingSink


@pytest.fixture(scope="function")
def market_price() -> Decimal:
    return MARKET_PRICE


@pytest.fixture(scope="function")
def price_oracle(market_price: Decimal) -> FixedPriceOracle:
    return FixedPriceOracle(market_price)


@pytest.fixture(scope="function")
def walker() -> LedgerWalker:
    return LedgerWalker(fiat_symbol="USD", start_row=1)


@pytest.fixture(scope="function")
def recording_sink() -> RecordingSink:
    return RecordingSink()
