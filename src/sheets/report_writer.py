from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

from domain.rows import DerivedRow, FooterRow, HeaderRow, ReportRow

from .formatting import ReportLayout

logger = logging.getLogger(__name__)


class RenderSink(Protocol):
    def write_row(self, row_number: int, cells: Sequence[str]) -> None: ...

    def apply_formatting(self, layout: ReportLayout) -> None: ...


@dataclass(frozen=True)
class ReportSummary:
    layout: ReportLayout
    data_rows: int


class ReportWriter:
    """Pushes a header/data/footer row stream into a sink, in order, then formats it.

    A failed write aborts the report; rows already written stay in place.
    """

    def __init__(self, sink: RenderSink, *, apply_formatting: bool = True) -> None:
        self._sink = sink
        self._apply_formatting = apply_formatting

    def write(self, rows: Iterable[ReportRow]) -> ReportSummary:
        header: HeaderRow | None = None
        footer: FooterRow | None = None
        data_rows = 0

        for row in rows:
            self._sink.write_row(row.row_number, row.cells())
            if isinstance(row, HeaderRow):
                header = row
            elif isinstance(row, DerivedRow):
                data_rows += 1
                logger.info(
                    "Wrote row %d: %s fiat=%s cro=%s",
                    row.row_number,
                    row.kind.value,
                    row.fiat_amount,
                    row.cro_amount,
                )
            else:
                footer = row

        if header is None or footer is None:
            msg = "Report stream must start with a header and end with a footer"
            raise ValueError(msg)

        layout = ReportLayout(header_row=header.row_number, footer_row=footer.row_number)
        if self._apply_formatting:
            self._sink.apply_formatting(layout)
        logger.info("Report written to rows %d-%d with %d purchases", layout.header_row, layout.footer_row, data_rows)
        return ReportSummary(layout=layout, data_rows=data_rows)


__all__ = ["RenderSink", "ReportSummary", "ReportWriter"]
