from __future__ import annotations

from functools import cache
from pathlib import Path
from typing import Any

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.errors import ConfigurationError

SUPPORTED_FIATS = ("USD", "EUR")


class AppSettings(BaseSettings):
    spreadsheet_id: str = ""
    sheet_name: str = "ROI"
    transactions_file: Path = Path("crypto_transactions.csv")
    fiat: str = "USD"
    start_row: int = 1

    credentials_file: Path = Path("credentials.json")
    authorized_user_file: Path = Path("token.json")

    account_id: str | None = None
    explorer_url: str = "https://crypto.org/explorer/api/v1/"

    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_asset_id: str = "crypto-com-chain"

    model_config = SettingsConfigDict(
        env_prefix="CRYPTO_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("fiat", mode="before")
    @classmethod
    def _normalize_fiat(cls, value: str) -> str:
        code = str(value).strip().upper()
        if code not in SUPPORTED_FIATS:
            msg = f"fiat must be one of {', '.join(SUPPORTED_FIATS)}, got {value!r}"
            raise ValueError(msg)
        return code

    @field_validator("start_row")
    @classmethod
    def _validate_start_row(cls, value: int) -> int:
        if value < 1:
            msg = "start_row must be >= 1"
            raise ValueError(msg)
        return value

    def validate_for_import(self) -> None:
        if not self.spreadsheet_id:
            raise ConfigurationError("Missing spreadsheet-id")


@cache
def config() -> AppSettings:
    return AppSettings()  # type: ignore[call-arg]


def load_settings(env_file: Path | None = None, **overrides: Any) -> AppSettings:
    """Settings from the environment and .env file, with command line overrides on top.

    Overrides set to ``None`` are treated as not given.
    """
    if env_file is not None and not env_file.exists():
        msg = f"Config file not found: {env_file}"
        raise ConfigurationError(msg)

    kwargs: dict[str, Any] = {key: value for key, value in overrides.items() if value is not None}
    try:
        if env_file is None:
            if not kwargs:
                return config()
            return AppSettings(**kwargs)
        return AppSettings(_env_file=env_file, **kwargs)  # type: ignore[call-arg]
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
