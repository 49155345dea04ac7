"""
Unit tests for the SignatureMatcher.
"""

from __future__ import annotations

import pytest

from sheet_structure.config import ScoringConfig
from sheet_structure.schema import TabSignature
from sheet_structure.signature_matcher import SignatureMatcher
from sheet_structure.signatures import BUILTIN_SIGNATURES


@pytest.fixture
def matcher() -> SignatureMatcher:
    return SignatureMatcher()


@pytest.fixture
def two_field() -> TabSignature:
    return TabSignature(
        name="pair",
        required=(("accountName", "account name"), ("openingBalance", "opening balance")),
    )


@pytest.fixture
def with_optional() -> TabSignature:
    return TabSignature(
        name="pair",
        required=(("accountName", "account name"), ("openingBalance", "opening balance")),
        optional=(("note", "notes"),),
    )


# ======================================================================
# Scoring arithmetic
# ======================================================================

class TestScore:
    def test_two_required_at_left_edge(
        self, matcher: SignatureMatcher, two_field: TabSignature
    ) -> None:
        result = matcher.score(["Account Name", "Opening Balance"], two_field)
        # (10 + 10.0) + (10 + 9.9)
        assert result.score == pytest.approx(39.9)
        assert result.is_match

    def test_position_bonus_shrinks(
        self, matcher: SignatureMatcher, two_field: TabSignature
    ) -> None:
        left = matcher.score(["account name", "opening balance"], two_field)
        right = matcher.score(["", "", "account name", "opening balance"], two_field)
        assert right.score == pytest.approx(left.score - 0.4)

    def test_position_bonus_negative_past_origin(
        self, matcher: SignatureMatcher, two_field: TabSignature
    ) -> None:
        headers = [""] * 110 + ["account name", "opening balance"]
        result = matcher.score(headers, two_field)
        # (10 - 1.0) + (10 - 1.1)
        assert result.score == pytest.approx(17.9)

    def test_optional_adds_exactly_two(
        self, matcher: SignatureMatcher, with_optional: TabSignature
    ) -> None:
        base = matcher.score(["Account Name", "Opening Balance"], with_optional)
        extra = matcher.score(["Account Name", "Opening Balance", "Notes"], with_optional)
        assert extra.score - base.score == pytest.approx(2.0)
        assert "note" in extra.matched_field_names
        assert extra.column_map["note"] == 2

    def test_custom_weights(self, two_field: TabSignature) -> None:
        m = SignatureMatcher(
            scoring=ScoringConfig(required_points=1, position_origin=0, position_decay=0)
        )
        assert m.score(["account name", "opening balance"], two_field).score == pytest.approx(2.0)


# ======================================================================
# Disqualification
# ======================================================================

class TestDisqualification:
    def test_missing_required_scores_zero(
        self, matcher: SignatureMatcher, with_optional: TabSignature
    ) -> None:
        result = matcher.score(["Account Name", "Notes"], with_optional)
        assert result.score == 0
        assert not result.is_match
        assert result.column_map == {}
        assert result.matched_field_names == frozenset()

    def test_empty_row(self, matcher: SignatureMatcher, two_field: TabSignature) -> None:
        assert matcher.score([], two_field).score == 0

    def test_missing_required_reported(
        self, matcher: SignatureMatcher, with_optional: TabSignature
    ) -> None:
        assert matcher.missing_required(["Account Name"], with_optional) == ["openingBalance"]


# ======================================================================
# Column mapping
# ======================================================================

class TestColumnMap:
    def test_canonical_name_is_first_spelling(
        self, matcher: SignatureMatcher, two_field: TabSignature
    ) -> None:
        result = matcher.score(["opening balance", "Account Name"], two_field)
        assert dict(result.column_map) == {"accountName": 1, "openingBalance": 0}

    def test_duplicate_header_first_wins(
        self, matcher: SignatureMatcher, two_field: TabSignature
    ) -> None:
        result = matcher.score(
            ["Account Name", "Opening Balance", "Account Name"], two_field
        )
        assert result.column_map["accountName"] == 0

    def test_first_spelling_in_set_order_wins(self, matcher: SignatureMatcher) -> None:
        sig = TabSignature(name="t", required=(("timestamp", "date"),))
        result = matcher.score(["Date", "Timestamp"], sig)
        assert result.column_map["timestamp"] == 1

    def test_column_map_is_read_only(
        self, matcher: SignatureMatcher, two_field: TabSignature
    ) -> None:
        result = matcher.score(["Account Name", "Opening Balance"], two_field)
        with pytest.raises(TypeError):
            result.column_map["accountName"] = 5  # type: ignore[index]

    def test_shared_column_between_fields(self, matcher: SignatureMatcher) -> None:
        # 'balance' is an accepted spelling of both fields
        sig = TabSignature(
            name="s",
            required=(("currentBalance", "balance"),),
            optional=(("balanceAfter", "balance"),),
        )
        result = matcher.score(["Balance"], sig)
        assert dict(result.column_map) == {"currentBalance": 0, "balanceAfter": 0}

    def test_repeated_canonical_last_write_wins(self, matcher: SignatureMatcher) -> None:
        sig = TabSignature(
            name="s",
            required=(("note", "memo"),),
            optional=(("note", "comment"),),
        )
        result = matcher.score(["Memo", "Comment"], sig)
        assert result.column_map["note"] == 1

    def test_builtin_transactions(self, matcher: SignatureMatcher) -> None:
        headers = ["Date", "From", "To", "Type", "Amount", "Currency", "Ref"]
        result = matcher.score(headers, BUILTIN_SIGNATURES["transactions"])
        assert result.column_map["timestamp"] == 0
        assert result.column_map["transactionType"] == 3
        assert result.column_map["referenceID"] == 6
