"""
Detection result cache.

Structural scans cost a remote round trip, so results are kept per
spreadsheet id for a fixed time.  The clock is injectable so expiry can be
tested without sleeping.

Entries are never evicted in the background: an expired entry is simply
ignored on read and replaced by the next successful detection.  Concurrent
writers for the same id are last-write-wins.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from sheet_structure.logging_setup import get_logger
from sheet_structure.schema import SheetMetadata

logger = get_logger("cache")


@dataclass(frozen=True)
class CacheEntry:
    metadata: SheetMetadata
    expires_at: float


class MetadataCache:
    """Spreadsheet id → ``SheetMetadata`` with a fixed time-to-live.

    Parameters
    ----------
    ttl_seconds:
        How long a stored result stays fresh.
    clock:
        Zero-argument callable returning seconds; defaults to
        ``time.monotonic``.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self._ttl = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: Dict[str, CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, spreadsheet_id: str) -> Optional[SheetMetadata]:
        """Fresh metadata for *spreadsheet_id*, or ``None``."""
        entry = self._entries.get(spreadsheet_id)
        if entry is None:
            return None

        now = self._clock()
        if now >= entry.expires_at:
            logger.debug("Cache entry for %s expired", spreadsheet_id)
            return None

        logger.info(
            "Using cached metadata for %s (expires in %d seconds)",
            spreadsheet_id,
            round(entry.expires_at - now),
        )
        return entry.metadata

    def put(self, spreadsheet_id: str, metadata: SheetMetadata) -> None:
        self._entries[spreadsheet_id] = CacheEntry(
            metadata=metadata,
            expires_at=self._clock() + self._ttl,
        )
        logger.debug("Cached metadata for %s (ttl=%ss)", spreadsheet_id, self._ttl)

    def invalidate(self, spreadsheet_id: Optional[str] = None) -> None:
        """Drop one entry, or every entry when no id is given."""
        if spreadsheet_id is None:
            self._entries.clear()
        else:
            self._entries.pop(spreadsheet_id, None)

    def __contains__(self, spreadsheet_id: object) -> bool:
        entry = self._entries.get(spreadsheet_id)  # type: ignore[arg-type]
        return entry is not None and self._clock() < entry.expires_at

    def __len__(self) -> int:
        return len(self._entries)
