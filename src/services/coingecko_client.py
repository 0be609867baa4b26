from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

# API docs: https://docs.coingecko.com/reference/simple-price


class CoinGeckoAPIError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class CoinGeckoClient:
    """Minimal CoinGecko public API client covering the simple price endpoint."""

    def __init__(
        self,
        *,
        base_url: str = "https://api.coingecko.com/api/v3",
        timeout: float = 10.0,
        session: requests.Session | None = None,
        retry_attempts: int = 3,
        retry_backoff_seconds: float = 1,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

        # The public endpoint rate limits aggressively; only 429s are retried.
        retries = Retry(
            total=retry_attempts,
            backoff_factor=retry_backoff_seconds,
            status_forcelist=[429],
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retries)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    def get_simple_price(self, *, ids: Iterable[str], vs_currencies: Iterable[str]) -> dict[str, dict[str, Decimal]]:
        coin_ids = [coin_id.strip().lower() for coin_id in ids if coin_id.strip()]
        currencies = [currency.strip().lower() for currency in vs_currencies if currency.strip()]
        if not coin_ids:
            msg = "ids must contain at least one coin id"
            raise ValueError(msg)
        if not currencies:
            msg = "vs_currencies must contain at least one currency"
            raise ValueError(msg)

        params = {"ids": ",".join(coin_ids), "vs_currencies": ",".join(currencies)}
        payload = self._request("GET", "/simple/price", params=params)

        prices: dict[str, dict[str, Decimal]] = {}
        for coin_id, quotes in payload.items():
            if not isinstance(quotes, dict):
                raise CoinGeckoAPIError(f"CoinGecko quotes for {coin_id} are not an object", payload=payload)
            prices[coin_id] = {currency.lower(): self._to_decimal(value, payload) for currency, value in quotes.items()}
        return prices

    def _request(self, method: str, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            message, error_payload = self._extract_error(resp)
            raise CoinGeckoAPIError(message, status_code=status_code, payload=error_payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise CoinGeckoAPIError("CoinGecko request failed", status_code=status_code) from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise CoinGeckoAPIError("CoinGecko returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise CoinGeckoAPIError("CoinGecko returned unexpected payload type", payload=payload_raw)

        status = payload_raw.get("status")
        if isinstance(status, dict) and status.get("error_message"):
            raise CoinGeckoAPIError(status["error_message"], status_code=status.get("error_code"), payload=payload_raw)

        return payload_raw

    @staticmethod
    def _extract_error(response: Response | None) -> tuple[str, Any | None]:
        message = "CoinGecko request failed"
        payload: Any | None = None
        if response is None:
            return message, payload

        try:
            payload = response.json()
            if isinstance(payload, dict):
                status = payload.get("status")
                if isinstance(status, dict) and status.get("error_message"):
                    message = status["error_message"]
                elif payload.get("error"):
                    message = str(payload["error"])
        except ValueError:
            payload = response.text
        return message, payload

    @staticmethod
    def _to_decimal(value: Any, payload: Any) -> Decimal:
        try:
            return Decimal(str(value))
        except InvalidOperation as exc:
            raise CoinGeckoAPIError(f"CoinGecko returned non-numeric price {value!r}", payload=payload) from exc


__all__ = ["CoinGeckoAPIError", "CoinGeckoClient"]
