"""
Spreadsheet client layer.

The detector never authenticates or talks HTTP itself.  It is handed a
*client* that can list a spreadsheet's tabs together with the text of their
leading rows.  Anything with a matching ``fetch_tabs`` method works; this
module ships the adapter for an already-authorized Google Sheets v4 service
(``googleapiclient.discovery.build("sheets", "v4", credentials=...)``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

from sheet_structure.errors import DetectionError
from sheet_structure.logging_setup import get_logger
from sheet_structure.normalizer import cell_text
from sheet_structure.ranges import quote_tab_title
from sheet_structure.schema import TabGrid, TabInfo

logger = get_logger("sheet_client")


class SheetsClient(Protocol):
    """Anything that can return the leading rows of every tab."""

    def fetch_tabs(self, spreadsheet_id: str, max_rows: int) -> List[TabGrid]:
        """All tabs in sheet order, each with up to *max_rows* rows of text."""
        ...


def trim_row(row: List[str]) -> List[str]:
    """Drop trailing blank cells."""
    end = len(row)
    while end and not row[end - 1].strip():
        end -= 1
    return row[:end]


class GoogleSheetsClient:
    """``SheetsClient`` over a Google Sheets API v4 service object.

    Two requests per detection: one for tab properties, one ``batchGet``
    for the leading rows of every tab.

    Parameters
    ----------
    service:
        An authorized Sheets v4 ``Resource``.
    """

    PROPERTIES_FIELDS = "sheets.properties(sheetId,title,index)"

    def __init__(self, service: Any) -> None:
        self._service = service

    def fetch_tabs(self, spreadsheet_id: str, max_rows: int) -> List[TabGrid]:
        spreadsheets = self._service.spreadsheets()

        meta = spreadsheets.get(
            spreadsheetId=spreadsheet_id,
            fields=self.PROPERTIES_FIELDS,
        ).execute()
        infos = self._parse_properties(spreadsheet_id, meta)
        if not infos:
            return []

        ranges = [f"{quote_tab_title(info.title)}!1:{max_rows}" for info in infos]
        response = spreadsheets.values().batchGet(
            spreadsheetId=spreadsheet_id,
            ranges=ranges,
            valueRenderOption="FORMATTED_VALUE",
            majorDimension="ROWS",
        ).execute()

        value_ranges = response.get("valueRanges") if isinstance(response, dict) else None
        if not isinstance(value_ranges, list) or len(value_ranges) != len(infos):
            raise DetectionError(
                f"Malformed batchGet response for {spreadsheet_id}: expected "
                f"{len(infos)} value ranges",
                spreadsheet_id,
            )

        grids = []
        for info, value_range in zip(infos, value_ranges):
            raw_rows = value_range.get("values", []) if isinstance(value_range, dict) else []
            rows = [trim_row([cell_text(c) for c in row]) for row in raw_rows[:max_rows]]
            grids.append(TabGrid(info=info, rows=rows))

        logger.info(
            "Fetched %d tabs (%d leading rows each) from %s",
            len(grids),
            max_rows,
            spreadsheet_id,
        )
        return grids

    @staticmethod
    def _parse_properties(spreadsheet_id: str, meta: Any) -> List[TabInfo]:
        if not isinstance(meta, dict) or not isinstance(meta.get("sheets", []), list):
            raise DetectionError(
                f"Malformed spreadsheet metadata for {spreadsheet_id}",
                spreadsheet_id,
            )

        infos = []
        for position, sheet in enumerate(meta.get("sheets", [])):
            props: Dict[str, Any] = sheet.get("properties", {}) if isinstance(sheet, dict) else {}
            infos.append(
                TabInfo(
                    title=props.get("title") or f"Sheet{position + 1}",
                    sheet_id=int(props.get("sheetId", position)),
                    tab_index=int(props.get("index", position)),
                )
            )
        return infos
