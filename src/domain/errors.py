from __future__ import annotations

from typing import Any


class TrackerError(Exception):
    """Base class for errors that abort a tracker run."""


class ConfigurationError(TrackerError):
    pass


class LedgerReadError(TrackerError):
    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number


class FieldExtractionError(TrackerError):
    def __init__(self, message: str, *, record_index: int | None, kind: str, field: str) -> None:
        location = f"record={record_index} " if record_index is not None else ""
        super().__init__(f"{message} ({location}kind={kind!r} field={field})")
        self.record_index = record_index
        self.kind = kind
        self.field = field


class OracleUnavailableError(TrackerError):
    pass


class SinkWriteError(TrackerError):
    def __init__(self, message: str, *, row_number: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.row_number = row_number
        self.payload = payload


__all__ = [
    "ConfigurationError",
    "FieldExtractionError",
    "LedgerReadError",
    "OracleUnavailableError",
    "SinkWriteError",
    "TrackerError",
]
