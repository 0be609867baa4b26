from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import gspread
import requests
from gspread.utils import ValueInputOption

from domain.errors import SinkWriteError

from .formatting import ReportLayout, build_format_requests
from .report_writer import RenderSink

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def authorize(*, credentials_file: Path, authorized_user_file: Path) -> gspread.Client:
    """OAuth desktop flow; the first run opens a browser and caches the token."""
    if not credentials_file.exists():
        msg = f"Unable to read client secret file: {credentials_file}"
        raise SinkWriteError(msg)
    return gspread.oauth(
        scopes=SCOPES,
        credentials_filename=str(credentials_file),
        authorized_user_filename=str(authorized_user_file),
    )


def open_worksheet(client: gspread.Client, *, spreadsheet_id: str, sheet_name: str) -> gspread.Worksheet:
    try:
        spreadsheet = client.open_by_key(spreadsheet_id)
    except (gspread.exceptions.APIError, gspread.exceptions.SpreadsheetNotFound) as exc:
        msg = f"Unable to open spreadsheet {spreadsheet_id}: {exc}"
        raise SinkWriteError(msg) from exc

    try:
        return spreadsheet.worksheet(sheet_name)
    except gspread.exceptions.WorksheetNotFound:
        logger.info("Creating worksheet %s in spreadsheet %s", sheet_name, spreadsheet_id)
    try:
        return spreadsheet.add_worksheet(title=sheet_name, rows=1000, cols=20)
    except gspread.exceptions.APIError as exc:
        msg = f"Unable to create worksheet {sheet_name}: {exc}"
        raise SinkWriteError(msg) from exc


class GoogleSheetsSink(RenderSink):
    def __init__(self, worksheet: gspread.Worksheet, *, start_column: str = "A") -> None:
        self._worksheet = worksheet
        self._start_column = start_column.upper()

    def write_row(self, row_number: int, cells: Sequence[str]) -> None:
        range_name = f"{self._start_column}{row_number}"
        try:
            self._worksheet.update(
                range_name=range_name,
                values=[list(cells)],
                value_input_option=ValueInputOption.user_entered,
            )
        except (gspread.exceptions.APIError, requests.RequestException) as exc:
            msg = f"Failed to write row {row_number} to {self._worksheet.title}!{range_name}"
            raise SinkWriteError(msg, row_number=row_number, payload=cells) from exc

    def apply_formatting(self, layout: ReportLayout) -> None:
        body = {"requests": build_format_requests(layout, sheet_id=self._worksheet.id)}
        try:
            self._worksheet.spreadsheet.batch_update(body)
        except (gspread.exceptions.APIError, requests.RequestException) as exc:
            msg = f"Failed to format report rows {layout.header_row}-{layout.footer_row}"
            raise SinkWriteError(msg, payload=body) from exc


__all__ = ["GoogleSheetsSink", "authorize", "open_worksheet"]
