"""
Sheet Structure — header-signature tab detection for finance spreadsheets.

Given a spreadsheet whose tabs come in any order and whose headers drift
between deployments, works out which tab is the accounts list, the
transactions log, the ledger and the balance summary, and returns a verified
column map for each.

Detection never fails silently and never fails hard on a missing tab:
absent or ambiguous roles are reported as warnings on the result.
"""

__version__ = "1.0.0"
__author__ = "Sheet Structure Team"

from sheet_structure.detector import TabDetector  # noqa: F401
from sheet_structure.errors import DetectionError  # noqa: F401
from sheet_structure.schema import SheetMetadata, SignatureType  # noqa: F401
