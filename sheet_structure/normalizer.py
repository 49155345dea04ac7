"""
Header Normalization Layer.

Transforms raw header cells into comparison keys so that the signature
matcher is insensitive to case, spacing and punctuation:

    "Opening Balance", "opening_balance", " OpeningBalance "  →  "openingbalance"

Also converts raw cell values coming out of spreadsheet clients into the
display text that headers are read from.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

from sheet_structure.logging_setup import get_logger

logger = get_logger("normalizer")

# Everything that is not a lowercase letter or digit is dropped
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize_header(header: Optional[str]) -> str:
    """Return the comparison key for a raw header string.

    Total over all strings (``None`` counts as empty) and idempotent.
    """
    if not header:
        return ""
    return _NON_ALNUM_RE.sub("", header.strip().lower())


def cell_text(value: Any) -> str:
    """Render a raw cell value the way a spreadsheet displays it."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class HeaderNormalizer:
    """Stateless header normaliser.  All methods are pure functions."""

    def normalize(self, header: Optional[str]) -> str:
        """Canonical-comparable form of a single header."""
        key = normalize_header(header)
        logger.debug("normalize: %r → %r", header, key)
        return key

    def normalize_row(self, headers: Sequence[Optional[str]]) -> List[str]:
        """Normalise a full header row, keeping positions intact."""
        return [normalize_header(h) for h in headers]
