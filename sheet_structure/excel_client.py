"""
Excel Workbook Client.

A ``SheetsClient`` backed by a local ``.xlsx`` file, so exported or
downloaded copies of a spreadsheet can be run through the same detector as
the live one.

* Every worksheet becomes one tab; chart sheets are skipped.
* Cached formula results are read (``data_only=True``), not formulas.
* Openpyxl has no stable sheet id, so the worksheet position is used.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

import openpyxl
from openpyxl.worksheet.worksheet import Worksheet

from sheet_structure.logging_setup import get_logger
from sheet_structure.normalizer import cell_text
from sheet_structure.schema import TabGrid, TabInfo
from sheet_structure.sheet_client import trim_row

logger = get_logger("excel_client")


def _read_leading_rows(ws: Worksheet, max_rows: int) -> List[List[str]]:
    rows: List[List[str]] = []
    for row in ws.iter_rows(min_row=1, max_row=max_rows, values_only=True):
        rows.append(trim_row([cell_text(v) for v in row]))
    return rows


class WorkbookClient:
    """``SheetsClient`` over an ``.xlsx`` workbook on disk.

    The ``spreadsheet_id`` passed to ``fetch_tabs`` is only used for
    logging and caching; the workbook read is always *source*.

    Parameters
    ----------
    source:
        Path to the workbook.
    """

    def __init__(self, source: Union[str, Path]) -> None:
        self._path = Path(source)

    @property
    def path(self) -> Path:
        return self._path

    def fetch_tabs(self, spreadsheet_id: str, max_rows: int) -> List[TabGrid]:
        logger.info("Opening workbook %s for %s", self._path.name, spreadsheet_id)
        wb = openpyxl.load_workbook(self._path, read_only=True, data_only=True)
        try:
            grids = []
            for position, ws in enumerate(wb.worksheets):
                info = TabInfo(title=ws.title, sheet_id=position, tab_index=position)
                grids.append(TabGrid(info=info, rows=_read_leading_rows(ws, max_rows)))
                logger.debug("Read %d rows from sheet %r", len(grids[-1].rows), ws.title)
        finally:
            wb.close()

        logger.info("Workbook %s has %d worksheets", self._path.name, len(grids))
        return grids
