"""
Unit tests for the HeaderSuggester.
"""

from __future__ import annotations

import pytest

from sheet_structure.config import SuggestionConfig
from sheet_structure.signatures import BUILTIN_SIGNATURES
from sheet_structure.suggester import HeaderSuggester


@pytest.fixture
def suggester() -> HeaderSuggester:
    return HeaderSuggester(config=SuggestionConfig(fuzzy_threshold=80.0))


LEDGER = BUILTIN_SIGNATURES["ledger"]


# ======================================================================
# Suggestions
# ======================================================================

class TestSuggest:
    def test_typo_suggested(self, suggester: HeaderSuggester) -> None:
        found = suggester.suggest(LEDGER, "Ledger", 0, ["Date", "Account", "Delta", "Mnth"])
        assert len(found) == 1
        s = found[0]
        assert s.field_name == "month"
        assert s.header == "Mnth"
        assert s.score >= 80.0
        text = s.describe()
        assert "'ledger'" in text
        assert "'Mnth'" in text
        assert "row 1" in text

    def test_unrelated_row_ignored(self, suggester: HeaderSuggester) -> None:
        # nothing in the row matches a required field exactly
        assert suggester.suggest(LEDGER, "Notes", 0, ["Mnth", "Remarks"]) == []

    def test_full_match_has_nothing_to_suggest(self, suggester: HeaderSuggester) -> None:
        headers = ["Date", "Account", "Amount", "Month"]
        assert suggester.suggest(LEDGER, "Ledger", 0, headers) == []

    def test_below_threshold_dropped(self, suggester: HeaderSuggester) -> None:
        headers = ["Date", "Account", "Amount", "Quarter"]
        assert suggester.suggest(LEDGER, "Ledger", 0, headers) == []

    def test_disabled(self) -> None:
        off = HeaderSuggester(config=SuggestionConfig(enabled=False))
        assert not off.enabled
        assert off.suggest(LEDGER, "Ledger", 0, ["Date", "Account", "Delta", "Mnth"]) == []
