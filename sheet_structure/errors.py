"""Exceptions raised by the sheet structure detector."""

from __future__ import annotations

from typing import Optional


class DetectionError(RuntimeError):
    """Structure detection could not run at all.

    Raised when the spreadsheet client fails, returns malformed data, or
    returns no tabs. Missing *individual* tab types are never an error; they
    are reported as warnings on the resulting metadata.
    """

    def __init__(self, message: str, spreadsheet_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.spreadsheet_id = spreadsheet_id
