"""
Signature Matching Layer.

Scores one header row against one tab signature.  Scoring:

* every required field found adds ``required_points`` plus a position bonus
  ``(position_origin - column_index) * position_decay`` that favours headers
  near the left edge (a tie-breaker, not a correctness signal);
* every optional field found adds a flat ``optional_points``;
* a single missing required field disqualifies the row (score 0, empty map).

Lookups are exact on normalised text; the first spelling of an
alternative-set that occurs in the row wins, at its lowest column index.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Optional, Sequence, Set

from sheet_structure.config import ScoringConfig
from sheet_structure.logging_setup import get_logger
from sheet_structure.normalizer import HeaderNormalizer
from sheet_structure.schema import MatchResult, TabSignature

logger = get_logger("signature_matcher")


class SignatureMatcher:
    """Score header rows against tab signatures.

    Parameters
    ----------
    normalizer:
        Used for both the row's headers and the signature's spellings.
    scoring:
        Point weights.  Defaults reproduce 10 / 0.1-decay / 2.
    """

    def __init__(
        self,
        normalizer: Optional[HeaderNormalizer] = None,
        scoring: Optional[ScoringConfig] = None,
    ) -> None:
        self._normalizer = normalizer or HeaderNormalizer()
        self._scoring = scoring or ScoringConfig()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def locate(
        self, normalized_headers: Sequence[str], alternatives: Sequence[str]
    ) -> Optional[int]:
        """Column index of the first spelling present in the row, or None."""
        for variant in alternatives:
            key = self._normalizer.normalize(variant)
            if not key:
                continue
            try:
                return normalized_headers.index(key)
            except ValueError:
                continue
        return None

    def score(
        self, headers: Sequence[Optional[str]], signature: TabSignature
    ) -> MatchResult:
        """Score a raw header row against *signature*.

        Returns
        -------
        MatchResult
            ``score == 0`` (with empty names and map) when any required
            field is absent.
        """
        normalized = self._normalizer.normalize_row(headers)
        column_map: Dict[str, int] = {}
        matched: Set[str] = set()
        total = 0.0

        for alternatives in signature.required:
            index = self.locate(normalized, alternatives)
            if index is None:
                logger.debug(
                    "Signature %r disqualified: required %r not in %s",
                    signature.name,
                    alternatives[0],
                    normalized,
                )
                return MatchResult.disqualified()

            canonical = alternatives[0]
            column_map[canonical] = index
            matched.add(canonical)
            total += self._required_points(index)

        for alternatives in signature.optional:
            index = self.locate(normalized, alternatives)
            if index is None:
                continue
            canonical = alternatives[0]
            column_map[canonical] = index
            matched.add(canonical)
            total += self._scoring.optional_points

        logger.debug(
            "Signature %r scored %.1f with %s", signature.name, total, column_map
        )
        return MatchResult(
            score=total,
            matched_field_names=frozenset(matched),
            column_map=MappingProxyType(column_map),
        )

    def missing_required(
        self, headers: Sequence[Optional[str]], signature: TabSignature
    ) -> List[str]:
        """Canonical names of required fields absent from the row."""
        normalized = self._normalizer.normalize_row(headers)
        return [
            alternatives[0]
            for alternatives in signature.required
            if self.locate(normalized, alternatives) is None
        ]

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _required_points(self, index: int) -> float:
        s = self._scoring
        return s.required_points + (s.position_origin - index) * s.position_decay
