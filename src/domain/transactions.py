"""Transaction taxonomy and record decoding for crypto.com app exports.

The export is a fixed ten column CSV::

    Timestamp (UTC), Transaction Description, Currency, Amount, To Currency,
    To Amount, Native Currency, Native Amount, Native Amount (in USD),
    Transaction Kind

Records travel through the tool as raw positional string sequences and are
decoded into :class:`CryptoComRecord` once, when a purchase needs its amounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Sequence, TypeAlias

from pydantic import BaseModel, ConfigDict

from .errors import FieldExtractionError

RawRecord: TypeAlias = Sequence[str]

KIND_LABEL_INDEX = 1


class EventCategory(StrEnum):
    PURCHASE = "PURCHASE"
    REWARD = "REWARD"


@dataclass(frozen=True)
class AmountFields:
    """Names of the :class:`CryptoComRecord` fields holding the fiat spent and crypto received."""

    fiat: str
    crypto: str


class TransactionKind(StrEnum):
    RECURRING_BUY = "Recurring Buy"
    USD_TO_CRO = "USD -> CRO"
    EUR_TO_CRO = "EUR -> CRO"
    BUY_CRO = "Buy CRO"
    SIGNUP_BONUS = "Sign-up Bonus Unlocked"
    CRYPTO_EARN = "Crypto Earn"

    @property
    def amount_fields(self) -> AmountFields | None:
        return _PURCHASE_AMOUNT_FIELDS.get(self)

    @property
    def category(self) -> EventCategory:
        if self in _PURCHASE_AMOUNT_FIELDS:
            return EventCategory.PURCHASE
        return EventCategory.REWARD

    @property
    def is_purchase(self) -> bool:
        return self.category == EventCategory.PURCHASE


_PURCHASE_AMOUNT_FIELDS: dict[TransactionKind, AmountFields] = {
    TransactionKind.RECURRING_BUY: AmountFields(fiat="amount", crypto="to_amount"),
    TransactionKind.USD_TO_CRO: AmountFields(fiat="native_amount", crypto="to_amount"),
    TransactionKind.EUR_TO_CRO: AmountFields(fiat="native_amount", crypto="to_amount"),
    TransactionKind.BUY_CRO: AmountFields(fiat="native_amount", crypto="amount"),
}

PURCHASE_KINDS = frozenset(_PURCHASE_AMOUNT_FIELDS)
REWARD_KINDS = frozenset(kind for kind in TransactionKind if kind not in _PURCHASE_AMOUNT_FIELDS)


def classify(record: RawRecord) -> TransactionKind | None:
    """Return the kind for a raw record, or ``None`` when the label is not recognised."""
    if len(record) <= KIND_LABEL_INDEX:
        return None
    try:
        return TransactionKind(record[KIND_LABEL_INDEX])
    except ValueError:
        return None


class CryptoComRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    description: str
    currency: str
    amount: str
    to_currency: str
    to_amount: str
    native_currency: str
    native_amount: str
    native_amount_usd: str
    transaction_kind: str

    @classmethod
    def from_raw(cls, record: RawRecord, *, record_index: int | None = None) -> CryptoComRecord:
        names = list(cls.model_fields)
        if len(record) < len(names):
            missing = names[len(record)]
            raise FieldExtractionError(
                f"Record has {len(record)} fields, expected {len(names)}",
                record_index=record_index,
                kind=record[KIND_LABEL_INDEX] if len(record) > KIND_LABEL_INDEX else "",
                field=missing,
            )
        return cls(**dict(zip(names, record)))

    def purchase_amounts(self, kind: TransactionKind, *, record_index: int | None = None) -> tuple[str, str]:
        """Pick the literal (fiat, crypto) amount strings for a purchase kind."""
        fields = kind.amount_fields
        if fields is None:
            msg = f"{kind.value!r} is not a purchase kind"
            raise ValueError(msg)
        return (
            self._amount(fields.fiat, kind, record_index),
            self._amount(fields.crypto, kind, record_index),
        )

    def _amount(self, field: str, kind: TransactionKind, record_index: int | None) -> str:
        value: str = getattr(self, field)
        if not value.strip():
            raise FieldExtractionError("Missing amount", record_index=record_index, kind=kind.value, field=field)
        try:
            parsed = Decimal(value)
        except InvalidOperation as exc:
            raise FieldExtractionError(
                f"Malformed amount {value!r}", record_index=record_index, kind=kind.value, field=field
            ) from exc
        if not parsed.is_finite():
            raise FieldExtractionError(
                f"Malformed amount {value!r}", record_index=record_index, kind=kind.value, field=field
            )
        return value


__all__ = [
    "AmountFields",
    "CryptoComRecord",
    "EventCategory",
    "PURCHASE_KINDS",
    "REWARD_KINDS",
    "RawRecord",
    "TransactionKind",
    "classify",
]
