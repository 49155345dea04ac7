"""
Configuration module for the sheet structure detector.

All tuneable parameters (scoring weights, scan depths, cache lifetime,
suggestion thresholds) live here. Nothing is hard-coded in the matching or
orchestration modules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class ScoringConfig:
    """Weights used by the signature matcher."""

    # Points awarded for every required field found in a header row
    required_points: float = 10.0

    # Position bonus = (position_origin - column_index) * position_decay.
    # Favours headers near the left edge; goes negative past the origin.
    position_origin: int = 100
    position_decay: float = 0.1

    # Flat bonus for every optional field found
    optional_points: float = 2.0


@dataclass(frozen=True)
class ScanConfig:
    """Controls how much of every tab is inspected."""

    # Physical rows tried as header rows (tolerates title rows above headers)
    header_scan_rows: int = 3

    # Rows searched for the month selector label
    month_selector_scan_rows: int = 5

    # Signature types that carry a month selector cell
    month_selector_types: Tuple[str, ...] = ("balanceSummary",)

    # Substrings that must all appear in the normalised label cell
    month_selector_keywords: Tuple[str, ...] = ("month", "filter")

    @property
    def fetch_rows(self) -> int:
        """Leading rows a client must return for one detection pass."""
        return max(self.header_scan_rows, self.month_selector_scan_rows)


@dataclass(frozen=True)
class CacheConfig:
    """Lifetime of cached detection results."""

    ttl_seconds: float = 300.0


@dataclass(frozen=True)
class SuggestionConfig:
    """Controls near-miss header suggestions for undetected tab types."""

    enabled: bool = True

    # Minimum rapidfuzz similarity (0–100) for a header to be suggested
    fuzzy_threshold: float = 80.0


@dataclass(frozen=True)
class DetectorConfig:
    """Top-level configuration aggregating all sub-configs."""

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    suggestions: SuggestionConfig = field(default_factory=SuggestionConfig)

    # Logging level for the detection audit trail
    log_level: int = logging.INFO

    # Optional path to a JSON file of extra tab signatures that is *merged*
    # with the built-in set.
    custom_signature_path: Optional[Path] = None
