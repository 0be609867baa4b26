from __future__ import annotations

import logging
from decimal import Decimal

from domain.errors import OracleUnavailableError
from domain.pricing import PriceOracle

from .coingecko_client import CoinGeckoAPIError, CoinGeckoClient

logger = logging.getLogger(__name__)

CRO_COINGECKO_ID = "crypto-com-chain"


class CoinGeckoPriceOracle(PriceOracle):
    def __init__(
        self,
        *,
        fiat: str,
        asset_id: str = CRO_COINGECKO_ID,
        client: CoinGeckoClient | None = None,
    ) -> None:
        self.fiat = fiat.lower()
        self.asset_id = asset_id.lower()
        self.client = client or CoinGeckoClient()

    def current_price(self) -> Decimal:
        try:
            prices = self.client.get_simple_price(ids=[self.asset_id], vs_currencies=[self.fiat])
        except CoinGeckoAPIError as exc:
            msg = f"Unable to fetch {self.asset_id} price in {self.fiat.upper()}: {exc}"
            raise OracleUnavailableError(msg) from exc

        price = prices.get(self.asset_id, {}).get(self.fiat)
        if price is None:
            msg = f"CoinGecko returned no {self.fiat.upper()} price for {self.asset_id}"
            raise OracleUnavailableError(msg)
        if price <= 0:
            msg = f"CoinGecko returned non-positive price {price} for {self.asset_id}"
            raise OracleUnavailableError(msg)

        logger.info("Fetched %s price %s %s", self.asset_id, price, self.fiat.upper())
        return price


class FixedPriceOracle(PriceOracle):
    def __init__(self, price: Decimal) -> None:
        if price <= 0:
            msg = f"price must be > 0, got {price}"
            raise ValueError(msg)
        self.price = price

    def current_price(self) -> Decimal:
        return self.price


__all__ = ["CRO_COINGECKO_ID", "CoinGeckoPriceOracle", "FixedPriceOracle"]
