"""
Near-miss Suggestion Layer.

Detection itself only accepts exact (normalised) header matches.  When a tab
type ends up undetected, this layer uses ``rapidfuzz`` to point operators at
headers that *almost* matched, e.g. ``"Mnth"`` for ``"month"``.

Suggestions are advisory only: they never change which tab is selected and
are reported separately from warnings.

* Only rows that already matched at least one required field exactly are
  considered, so unrelated tabs do not produce noise.
* Matches below ``fuzzy_threshold`` are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from rapidfuzz import fuzz, process

from sheet_structure.config import SuggestionConfig
from sheet_structure.logging_setup import get_logger
from sheet_structure.normalizer import HeaderNormalizer
from sheet_structure.schema import TabSignature

logger = get_logger("suggester")


@dataclass
class HeaderSuggestion:
    """A header that nearly matches a missing required field."""

    signature_name: str
    field_name: str
    tab_title: str
    header_row_index: int
    header: str
    score: float  # 0–100

    def describe(self) -> str:
        return (
            f"'{self.signature_name}' field '{self.field_name}' not found on "
            f"'{self.tab_title}' row {self.header_row_index + 1}; closest "
            f"header '{self.header}' (similarity {self.score:.1f})"
        )


class HeaderSuggester:
    """Fuzzy-match missing required fields against a header row.

    Parameters
    ----------
    config:
        Threshold and on/off switch.
    normalizer:
        Shared header normaliser.
    """

    def __init__(
        self,
        config: Optional[SuggestionConfig] = None,
        normalizer: Optional[HeaderNormalizer] = None,
    ) -> None:
        self._config = config or SuggestionConfig()
        self._normalizer = normalizer or HeaderNormalizer()

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def suggest(
        self,
        signature: TabSignature,
        tab_title: str,
        header_row_index: int,
        headers: Sequence[str],
    ) -> List[HeaderSuggestion]:
        """Suggestions for one header row that failed *signature*."""
        if not self._config.enabled:
            return []

        normalized = self._normalizer.normalize_row(headers)
        missing = []
        found_any = False
        for alternatives in signature.required:
            keys = {self._normalizer.normalize(a) for a in alternatives}
            if keys.intersection(normalized):
                found_any = True
            else:
                missing.append(alternatives)

        if not found_any or not missing:
            return []

        # index -> normalised header, blanks excluded
        choices = {i: h for i, h in enumerate(normalized) if h}
        suggestions: List[HeaderSuggestion] = []

        for alternatives in missing:
            best = None
            for variant in alternatives:
                key = self._normalizer.normalize(variant)
                if not key:
                    continue
                hit = process.extractOne(
                    key,
                    choices,
                    scorer=fuzz.ratio,
                    score_cutoff=self._config.fuzzy_threshold,
                )
                if hit is not None and (best is None or hit[1] > best[1]):
                    best = hit

            if best is None:
                continue

            _, score, index = best
            suggestion = HeaderSuggestion(
                signature_name=signature.name,
                field_name=alternatives[0],
                tab_title=tab_title,
                header_row_index=header_row_index,
                header=headers[index],
                score=score,
            )
            logger.info("Suggestion: %s", suggestion.describe())
            suggestions.append(suggestion)

        return suggestions
