"""Presentation requests for a written report.

Builds the ``spreadsheets.batchUpdate`` request bodies that make the report
readable: number formats per column, font, header/footer borders, a bold
summary row and green/red backgrounds for gains and losses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from domain.rows import COLUMN_COUNT

FIAT_COLUMN_INDEX = 0
CRO_COLUMN_INDEX = 1
PRICE_COLUMN_INDEX = 2
PERCENT_COLUMN_INDEX = 3
FIAT_CHANGE_COLUMN_INDEX = 4

FONT_FAMILY = "Inconsolata"
FONT_SIZE = 11

_BLACK = {"red": 0, "green": 0, "blue": 0}
_GAIN_BACKGROUND = {"red": 0.850, "green": 0.917, "blue": 0.827}
_LOSS_BACKGROUND = {"red": 0.956, "green": 0.8, "blue": 0.8}


@dataclass(frozen=True)
class ReportLayout:
    """1-based rows occupied by a written report."""

    header_row: int
    footer_row: int
    column_offset: int = 0

    def __post_init__(self) -> None:
        if self.header_row < 1:
            msg = "header_row must be >= 1"
            raise ValueError(msg)
        if self.footer_row <= self.header_row:
            msg = "footer_row must be below header_row"
            raise ValueError(msg)


def _grid_range(
    layout: ReportLayout,
    sheet_id: int,
    *,
    first_column: int,
    last_column: int,
    first_row: int | None = None,
    last_row: int | None = None,
) -> dict[str, int]:
    # GridRange indexes are 0-based with exclusive ends; rows here are 1-based and inclusive.
    start_row = layout.header_row if first_row is None else first_row
    end_row = layout.footer_row if last_row is None else last_row
    return {
        "sheetId": sheet_id,
        "startRowIndex": start_row - 1,
        "endRowIndex": end_row,
        "startColumnIndex": layout.column_offset + first_column,
        "endColumnIndex": layout.column_offset + last_column + 1,
    }


def _repeat_cell(grid_range: dict[str, int], user_entered_format: dict[str, Any], fields: str) -> dict[str, Any]:
    return {
        "repeatCell": {
            "range": grid_range,
            "cell": {"userEnteredFormat": user_entered_format},
            "fields": fields,
        }
    }


def _number_format(layout: ReportLayout, sheet_id: int, column: int, number_format: dict[str, str]) -> dict[str, Any]:
    return _repeat_cell(
        _grid_range(layout, sheet_id, first_column=column, last_column=column),
        {"numberFormat": number_format},
        "userEnteredFormat.numberFormat",
    )


def _conditional_background(
    layout: ReportLayout, sheet_id: int, condition_type: str, background: dict[str, float]
) -> dict[str, Any]:
    return {
        "addConditionalFormatRule": {
            "index": 0,
            "rule": {
                "ranges": [
                    _grid_range(
                        layout,
                        sheet_id,
                        first_column=PERCENT_COLUMN_INDEX,
                        last_column=FIAT_CHANGE_COLUMN_INDEX,
                    )
                ],
                "booleanRule": {
                    "condition": {"type": condition_type, "values": [{"userEnteredValue": "0"}]},
                    "format": {"backgroundColor": background},
                },
            },
        }
    }


def build_format_requests(layout: ReportLayout, *, sheet_id: int) -> list[dict[str, Any]]:
    last_column = COLUMN_COUNT - 1
    no_border = {"style": "NONE"}
    solid_border = {"style": "SOLID", "color": _BLACK}

    return [
        _number_format(layout, sheet_id, FIAT_COLUMN_INDEX, {"type": "CURRENCY"}),
        _number_format(layout, sheet_id, FIAT_CHANGE_COLUMN_INDEX, {"type": "CURRENCY"}),
        _number_format(layout, sheet_id, PRICE_COLUMN_INDEX, {"type": "CURRENCY"}),
        _number_format(layout, sheet_id, CRO_COLUMN_INDEX, {"type": "NUMBER", "pattern": "#,##0.00"}),
        _number_format(layout, sheet_id, PERCENT_COLUMN_INDEX, {"type": "PERCENT", "pattern": "#.0#%"}),
        _repeat_cell(
            _grid_range(layout, sheet_id, first_column=0, last_column=last_column),
            {"textFormat": {"fontFamily": FONT_FAMILY, "fontSize": FONT_SIZE}},
            "userEnteredFormat.textFormat",
        ),
        {
            "updateBorders": {
                "range": _grid_range(layout, sheet_id, first_column=0, last_column=last_column),
                "top": no_border,
                "bottom": no_border,
                "left": no_border,
                "right": no_border,
                "innerHorizontal": no_border,
                "innerVertical": no_border,
            }
        },
        {
            "updateBorders": {
                "range": _grid_range(
                    layout,
                    sheet_id,
                    first_column=0,
                    last_column=last_column,
                    first_row=layout.footer_row,
                    last_row=layout.footer_row,
                ),
                "top": solid_border,
            }
        },
        {
            "updateBorders": {
                "range": _grid_range(
                    layout,
                    sheet_id,
                    first_column=0,
                    last_column=last_column,
                    first_row=layout.header_row,
                    last_row=layout.header_row,
                ),
                "bottom": solid_border,
            }
        },
        _repeat_cell(
            _grid_range(
                layout,
                sheet_id,
                first_column=0,
                last_column=last_column,
                first_row=layout.footer_row,
                last_row=layout.footer_row,
            ),
            {"textFormat": {"bold": True}},
            "userEnteredFormat.textFormat.bold",
        ),
        _conditional_background(layout, sheet_id, "NUMBER_GREATER", _GAIN_BACKGROUND),
        _conditional_background(layout, sheet_id, "NUMBER_LESS_THAN_EQ", _LOSS_BACKGROUND),
    ]


__all__ = ["ReportLayout", "build_format_requests"]
