from __future__ import annotations

from typing import Sequence, TextIO

from .formatting import ReportLayout
from .report_writer import RenderSink


class ConsoleSink(RenderSink):
    """Prints rows instead of writing them; used for dry runs."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def write_row(self, row_number: int, cells: Sequence[str]) -> None:
        self._stream.write(f"{row_number:>4}  " + "\t".join(cells) + "\n")

    def apply_formatting(self, layout: ReportLayout) -> None:
        return None
