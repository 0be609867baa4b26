from __future__ import annotations

from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from services.coingecko_client import CoinGeckoAPIError, CoinGeckoClient


def _mock_response(payload: object, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = "payload"
    response.raise_for_status.return_value = None
    return response


def test_get_simple_price_parses_response() -> None:
    session = Mock()
    session.request.return_value = _mock_response({"crypto-com-chain": {"usd": 0.1523}})

    client = CoinGeckoClient(session=session)
    prices = client.get_simple_price(ids=["crypto-com-chain"], vs_currencies=["USD"])

    assert prices == {"crypto-com-chain": {"usd": Decimal("0.1523")}}
    session.request.assert_called_once()
    args, kwargs = session.request.call_args
    assert args == ("GET", "https://api.coingecko.com/api/v3/simple/price")
    assert kwargs["params"] == {"ids": "crypto-com-chain", "vs_currencies": "usd"}
    assert kwargs["timeout"] == 10.0


def test_client_mounts_retry_adapter() -> None:
    session = Mock()

    CoinGeckoClient(session=session, base_url="https://example.com/api/v3/")

    mounted = [call.args[0] for call in session.mount.call_args_list]
    assert mounted == ["https://", "http://"]


def test_get_simple_price_requires_ids() -> None:
    client = CoinGeckoClient(session=Mock())

    with pytest.raises(ValueError):
        client.get_simple_price(ids=[" "], vs_currencies=["usd"])
    with pytest.raises(ValueError):
        client.get_simple_price(ids=["crypto-com-chain"], vs_currencies=[])


def test_request_wraps_http_errors() -> None:
    session = Mock()
    response = _mock_response({"status": {"error_code": 429, "error_message": "Rate limit exceeded"}}, status_code=429)
    response.raise_for_status.side_effect = requests.HTTPError(response=response)
    session.request.return_value = response

    client = CoinGeckoClient(session=session)

    with pytest.raises(CoinGeckoAPIError) as exc_info:
        client.get_simple_price(ids=["crypto-com-chain"], vs_currencies=["usd"])

    assert exc_info.value.status_code == 429
    assert str(exc_info.value) == "Rate limit exceeded"


def test_request_wraps_transport_errors() -> None:
    session = Mock()
    session.request.side_effect = requests.ConnectionError("boom")

    client = CoinGeckoClient(session=session)

    with pytest.raises(CoinGeckoAPIError):
        client.get_simple_price(ids=["crypto-com-chain"], vs_currencies=["usd"])


def test_invalid_json_is_reported() -> None:
    session = Mock()
    response = _mock_response(None)
    response.json.side_effect = ValueError("not json")
    session.request.return_value = response

    client = CoinGeckoClient(session=session)

    with pytest.raises(CoinGeckoAPIError) as exc_info:
        client.get_simple_price(ids=["crypto-com-chain"], vs_currencies=["usd"])

    assert exc_info.value.payload == "payload"


def test_non_numeric_price_is_reported() -> None:
    session = Mock()
    session.request.return_value = _mock_response({"crypto-com-chain": {"usd": "n/a"}})

    client = CoinGeckoClient(session=session)

    with pytest.raises(CoinGeckoAPIError):
        client.get_simple_price(ids=["crypto-com-chain"], vs_currencies=["usd"])
