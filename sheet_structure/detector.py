"""
Tab Detector.

The central entry point that wires together every layer:

    Cache  →  Client fetch  →  Normalizer  →  Signature Matcher (per tab,
    per header-row candidate, per signature)  →  best candidate per type
    →  month selector lookup  →  SheetMetadata  →  Cache

Usage
-----
>>> from sheet_structure.detector import TabDetector
>>> from sheet_structure.excel_client import WorkbookClient
>>>
>>> detector = TabDetector()
>>> meta = detector.detect("finance-2024", WorkbookClient("finance.xlsx"))
>>> meta.get("accounts").column_map["openingBalance"]
1
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, Dict, List, Optional, Sequence

from sheet_structure.cache import MetadataCache
from sheet_structure.config import DetectorConfig
from sheet_structure.errors import DetectionError
from sheet_structure.logging_setup import configure_logging, get_logger
from sheet_structure.normalizer import HeaderNormalizer
from sheet_structure.ranges import col_index_to_letter
from sheet_structure.schema import (
    DetectedTab,
    MatchResult,
    SheetMetadata,
    TabGrid,
    TabSignature,
)
from sheet_structure.sheet_client import SheetsClient
from sheet_structure.signature_matcher import SignatureMatcher
from sheet_structure.signatures import SignatureRegistry
from sheet_structure.suggester import HeaderSuggester

logger = get_logger("detector")


@dataclass
class _Candidate:
    grid: TabGrid
    header_row_index: int
    match: MatchResult


class TabDetector:
    """Detects which tab plays which role in a spreadsheet.

    Parameters
    ----------
    config:
        All tuneable knobs.  Defaults match the deployed spreadsheets.
    registry:
        Signatures to scan for.  Defaults to the four built-ins plus
        ``config.custom_signature_path`` when set.
    cache:
        Result cache.  Defaults to a private ``MetadataCache`` with
        ``config.cache.ttl_seconds``.
    clock:
        Returns the ``detected_at`` timestamp; UTC ``now`` by default.
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        registry: Optional[SignatureRegistry] = None,
        cache: Optional[MetadataCache] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._config = config or DetectorConfig()

        # Bootstrap logging before anything else
        configure_logging(level=self._config.log_level)

        self._normalizer = HeaderNormalizer()
        self._matcher = SignatureMatcher(
            normalizer=self._normalizer,
            scoring=self._config.scoring,
        )
        self._suggester = HeaderSuggester(
            config=self._config.suggestions,
            normalizer=self._normalizer,
        )
        self._registry = registry if registry is not None else SignatureRegistry()
        self._cache = (
            cache if cache is not None
            else MetadataCache(ttl_seconds=self._config.cache.ttl_seconds)
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        if self._config.custom_signature_path:
            self._registry.load_custom_signatures(self._config.custom_signature_path)

        logger.info(
            "Detector initialised — signatures=%s, header_rows=%d, cache_ttl=%ss",
            self._registry.names(),
            self._config.scan.header_scan_rows,
            self._cache.ttl_seconds,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def cache(self) -> MetadataCache:
        return self._cache

    @property
    def registry(self) -> SignatureRegistry:
        return self._registry

    def detect(self, spreadsheet_id: str, client: SheetsClient) -> SheetMetadata:
        """Return the structure of *spreadsheet_id*, from cache when fresh.

        Raises
        ------
        DetectionError
            If the client fails, returns malformed data, or returns no tabs.
            Nothing is cached in that case.
        """
        cached = self._cache.get(spreadsheet_id)
        if cached is not None:
            return cached

        logger.info("Cache miss for %s — scanning tab structure", spreadsheet_id)
        grids = self._fetch(spreadsheet_id, client)
        metadata = self._analyse(spreadsheet_id, grids)
        self._cache.put(spreadsheet_id, metadata)
        return metadata

    def invalidate(self, spreadsheet_id: Optional[str] = None) -> None:
        """Forget cached structure for one spreadsheet, or all of them."""
        self._cache.invalidate(spreadsheet_id)

    # ------------------------------------------------------------------ #
    # Core detection logic
    # ------------------------------------------------------------------ #

    def _fetch(self, spreadsheet_id: str, client: SheetsClient) -> List[TabGrid]:
        max_rows = self._config.scan.fetch_rows
        try:
            grids = client.fetch_tabs(spreadsheet_id, max_rows)
        except DetectionError:
            raise
        except Exception as exc:
            raise DetectionError(
                f"Failed to detect sheet structure for {spreadsheet_id}: {exc}",
                spreadsheet_id,
            ) from exc

        if grids is None or not isinstance(grids, Sequence):
            raise DetectionError(
                f"Client returned malformed tab data for {spreadsheet_id}",
                spreadsheet_id,
            )
        if len(grids) == 0:
            raise DetectionError(
                f"Spreadsheet {spreadsheet_id} has no tabs", spreadsheet_id
            )
        for grid in grids:
            if not isinstance(grid, TabGrid):
                raise DetectionError(
                    f"Client returned malformed tab data for {spreadsheet_id}: "
                    f"{type(grid).__name__}",
                    spreadsheet_id,
                )
        return list(grids)

    def _analyse(self, spreadsheet_id: str, grids: List[TabGrid]) -> SheetMetadata:
        warnings: List[str] = []
        suggestions: List[str] = []
        detected: Dict[str, DetectedTab] = {}
        candidates = self._collect_candidates(grids)

        for signature in self._registry:
            tab_type = signature.name
            found = candidates[tab_type]

            if not found:
                msg = f"No tab found matching '{tab_type}' signature"
                warnings.append(msg)
                logger.warning(msg)
                suggestions.extend(self._suggest(signature, grids))
                continue

            best = found[0]
            for candidate in found[1:]:
                if candidate.match.score > best.match.score:
                    best = candidate

            month_cell = None
            if tab_type in self._config.scan.month_selector_types:
                month_cell = self._find_month_selector(best.grid)

            detected[tab_type] = DetectedTab(
                title=best.grid.info.title,
                sheet_id=best.grid.info.sheet_id,
                tab_index=best.grid.info.tab_index,
                header_row_index=best.header_row_index,
                column_map=best.match.column_map,
                matched_field_names=best.match.matched_field_names,
                match_score=best.match.score,
                month_selector_cell_ref=month_cell,
            )
            logger.info(
                "DETECTED: '%s' → %r (header row %d, score=%.1f)",
                tab_type,
                best.grid.info.title,
                best.header_row_index + 1,
                best.match.score,
            )

            if len(found) > 1:
                others = []
                for candidate in found:
                    if candidate is not best and candidate.grid.info.title not in others:
                        others.append(candidate.grid.info.title)
                msg = (
                    f"Multiple tabs match '{tab_type}' signature. "
                    f"Using '{best.grid.info.title}' (score: {best.match.score:.1f}). "
                    f"Alternatives: {', '.join(others)}"
                )
                warnings.append(msg)
                logger.warning(msg)

        metadata = SheetMetadata(
            spreadsheet_id=spreadsheet_id,
            detected_tabs=MappingProxyType(detected),
            all_tabs=tuple(g.info for g in grids),
            warnings=tuple(warnings),
            suggestions=tuple(suggestions),
            detected_at=self._clock(),
        )

        logger.info(
            "Detection complete for %s — tabs=%d, detected=%d/%d, warnings=%d",
            spreadsheet_id,
            len(grids),
            len(detected),
            len(self._registry),
            len(warnings),
        )
        return metadata

    def _collect_candidates(self, grids: List[TabGrid]) -> Dict[str, List[_Candidate]]:
        """Score every (tab, header row, signature) combination."""
        candidates: Dict[str, List[_Candidate]] = {s.name: [] for s in self._registry}
        rows_to_check = self._config.scan.header_scan_rows

        for grid in grids:
            for row_index, headers in enumerate(grid.rows[:rows_to_check]):
                if not any(h and h.strip() for h in headers):
                    continue

                for signature in self._registry:
                    match = self._matcher.score(headers, signature)
                    if not match.is_match:
                        continue
                    logger.debug(
                        "Candidate for '%s': %r row %d score=%.1f",
                        signature.name,
                        grid.info.title,
                        row_index + 1,
                        match.score,
                    )
                    candidates[signature.name].append(
                        _Candidate(grid=grid, header_row_index=row_index, match=match)
                    )
        return candidates

    def _suggest(self, signature: TabSignature, grids: List[TabGrid]) -> List[str]:
        if not self._suggester.enabled:
            return []

        found: List[str] = []
        for grid in grids:
            for row_index, headers in enumerate(grid.rows[: self._config.scan.header_scan_rows]):
                for suggestion in self._suggester.suggest(
                    signature, grid.info.title, row_index, headers
                ):
                    found.append(suggestion.describe())
        return found

    def _find_month_selector(self, grid: TabGrid) -> Optional[str]:
        """A1 reference of the cell right of a "Month Filter" label."""
        scan = self._config.scan
        for row_index, row in enumerate(grid.rows[: scan.month_selector_scan_rows]):
            for col_index, value in enumerate(row):
                label = self._normalizer.normalize(value)
                if not all(k in label for k in scan.month_selector_keywords):
                    continue
                adjacent = (row[col_index + 1] if col_index + 1 < len(row) else "") or ""
                if adjacent.strip():
                    ref = f"{col_index_to_letter(col_index + 1)}{row_index + 1}"
                    logger.info(
                        "Month selector on %r at %s (value=%r)",
                        grid.info.title,
                        ref,
                        adjacent,
                    )
                    return ref
        logger.debug("No month selector label on %r", grid.info.title)
        return None
