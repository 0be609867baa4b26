from __future__ import annotations

from datetime import datetime
from typing import Any
from urllib.parse import urljoin

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# API docs: https://crypto.org/explorer/api/v1/


class ExplorerAPIError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class _ExplorerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CoinAmount(_ExplorerModel):
    denom: str
    amount: str


class AccountResult(_ExplorerModel):
    type: str = ""
    name: str = ""
    address: str
    balance: list[CoinAmount] = Field(default_factory=list)
    bonded_balance: list[CoinAmount] = Field(default_factory=list, alias="bondedBalance")
    redelegating_balance: list[Any] = Field(default_factory=list, alias="redelegatingBalance")
    unbonding_balance: list[Any] = Field(default_factory=list, alias="unbondingBalance")
    total_rewards: list[CoinAmount] = Field(default_factory=list, alias="totalRewards")
    commissions: list[Any] = Field(default_factory=list)
    total_balance: list[CoinAmount] = Field(default_factory=list, alias="totalBalance")


class AccountResponse(_ExplorerModel):
    result: AccountResult


class MessageContent(_ExplorerModel):
    name: str = ""
    uuid: str = ""
    height: int = 0
    msg_name: str = Field(default="", alias="msgName")
    msg_index: int = Field(default=0, alias="msgIndex")
    delegator_address: str = Field(default="", alias="delegatorAddress")
    recipient_address: str = Field(default="", alias="recipientAddress")
    validator_address: str = Field(default="", alias="validatorAddress")
    amount: list[CoinAmount] = Field(default_factory=list)
    tx_hash: str = Field(default="", alias="txHash")
    version: int = 0


class TransactionMessage(_ExplorerModel):
    type: str
    content: MessageContent | None = None


class TransactionResult(_ExplorerModel):
    account: str
    block_height: int = Field(alias="blockHeight")
    block_hash: str = Field(default="", alias="blockHash")
    block_time: datetime = Field(alias="blockTime")
    hash: str
    message_types: list[str] = Field(default_factory=list, alias="messageTypes")
    success: bool
    code: int = 0
    log: str = ""
    fee: list[CoinAmount] = Field(default_factory=list)
    fee_payer: str = Field(default="", alias="feePayer")
    fee_granter: str = Field(default="", alias="feeGranter")
    gas_wanted: int = Field(default=0, alias="gasWanted")
    gas_used: int = Field(default=0, alias="gasUsed")
    memo: str = ""
    timeout_height: int = Field(default=0, alias="timeoutHeight")
    messages: list[TransactionMessage] = Field(default_factory=list)


class Pagination(_ExplorerModel):
    total_record: int
    total_page: int
    current_page: int
    limit: int


class AccountTransactionsResponse(_ExplorerModel):
    result: list[TransactionResult]
    pagination: Pagination


class ExplorerClient:
    """Read-only client for the crypto.org chain explorer."""

    DEFAULT_SERVER = "https://crypto.org/explorer/api/v1/"

    def __init__(
        self,
        server: str = DEFAULT_SERVER,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        # urljoin drops the last path segment unless the base ends with a slash.
        self.server = server if server.endswith("/") else f"{server}/"
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_account(self, account_id: str) -> AccountResponse:
        if not account_id:
            msg = "account_id must be provided"
            raise ValueError(msg)
        payload = self._request("GET", f"accounts/{account_id}")
        return self._parse(AccountResponse, payload)

    def get_account_transactions(
        self,
        account_id: str,
        *,
        page: int = 1,
        limit: int = 20,
        order: str = "height.desc",
    ) -> AccountTransactionsResponse:
        if not account_id:
            msg = "account_id must be provided"
            raise ValueError(msg)
        if page <= 0:
            msg = "page must be > 0"
            raise ValueError(msg)
        if limit <= 0:
            msg = "limit must be > 0"
            raise ValueError(msg)

        params = {"page": page, "limit": limit, "order": order}
        payload = self._request("GET", f"accounts/{account_id}/transactions", params=params)
        return self._parse(AccountTransactionsResponse, payload)

    def _request(self, method: str, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = urljoin(self.server, path.lstrip("/"))
        try:
            response = self._session.request(method, url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            payload: Any | None = None
            if resp is not None:
                try:
                    payload = resp.json()
                except ValueError:
                    payload = resp.text
            raise ExplorerAPIError("Explorer request failed", status_code=status_code, payload=payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise ExplorerAPIError("Explorer request failed", status_code=status_code) from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise ExplorerAPIError("Explorer returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise ExplorerAPIError("Explorer returned unexpected payload type", payload=payload_raw)
        return payload_raw

    @staticmethod
    def _parse(model: type[_ExplorerModel], payload: dict[str, Any]) -> Any:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ExplorerAPIError(f"Explorer payload did not match {model.__name__}", payload=payload) from exc


def first_amount(amounts: list[CoinAmount]) -> str:
    return amounts[0].amount if amounts else "0"


__all__ = [
    "AccountResponse",
    "AccountResult",
    "AccountTransactionsResponse",
    "CoinAmount",
    "ExplorerAPIError",
    "ExplorerClient",
    "Pagination",
    "TransactionResult",
    "first_amount",
]
