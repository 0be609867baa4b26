from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterator, TextIO

from domain.errors import LedgerReadError
from domain.transactions import RawRecord

logger = logging.getLogger(__name__)


class CryptoComCsvSource:
    """Streams raw records from a crypto.com app transaction export.

    Rows are yielded positionally and in file order. The export's column
    header line is yielded too; its label is not a transaction kind, so it
    is ignored downstream like any other unknown entry.
    """

    def __init__(self, source_path: str | Path) -> None:
        self._source_path = Path(source_path)

    @property
    def source_path(self) -> Path:
        return self._source_path

    def records(self) -> Iterator[RawRecord]:
        """Open the export now and stream its records lazily.

        A missing or unreadable file fails here, before any record is consumed.
        """
        try:
            handle = self._source_path.open(encoding="utf-8", newline="")
        except OSError as exc:
            msg = f"Unable to read transactions file {self._source_path}: {exc}"
            raise LedgerReadError(msg) from exc
        return self._read(handle)

    def _read(self, handle: TextIO) -> Iterator[RawRecord]:
        line_number = 0
        try:
            with handle:
                reader = csv.reader(handle)
                for row in reader:
                    line_number = reader.line_num
                    yield row
        except csv.Error as exc:
            msg = f"Malformed CSV in {self._source_path} near line {line_number + 1}: {exc}"
            raise LedgerReadError(msg, line_number=line_number + 1) from exc
        except OSError as exc:
            msg = f"Unable to read transactions file {self._source_path}: {exc}"
            raise LedgerReadError(msg) from exc
        logger.info("Read %d lines from %s", line_number, self._source_path)

    def __iter__(self) -> Iterator[RawRecord]:
        return self.records()


__all__ = ["CryptoComCsvSource"]
