"""
Tab signatures and detection data models.

Defines the structural roles a tab can play and the typed, immutable data
structures produced by a detection pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple


# Canonical field name -> zero-based column index
ColumnMap = Mapping[str, int]

AlternativeSet = Tuple[str, ...]


# ---------------------------------------------------------------------------
# Signature types
# ---------------------------------------------------------------------------

class SignatureType(str, Enum):
    """
    The built-in structural roles the detector recognises.

    Members compare and hash like their ``.value`` so they can index the
    plain-string keys of ``SheetMetadata.detected_tabs``.
    """

    ACCOUNTS = "accounts"
    TRANSACTIONS = "transactions"
    LEDGER = "ledger"
    BALANCE_SUMMARY = "balanceSummary"


def _freeze_sets(sets: Sequence[Sequence[str]], name: str, kind: str) -> Tuple[AlternativeSet, ...]:
    frozen = []
    for i, alternatives in enumerate(sets):
        if isinstance(alternatives, str):
            raise ValueError(
                f"Signature {name!r}: {kind} field #{i} must be a list of "
                f"spellings, got the string {alternatives!r}"
            )
        alts = tuple(str(a) for a in alternatives)
        if not alts:
            raise ValueError(
                f"Signature {name!r}: {kind} field #{i} has no spellings"
            )
        frozen.append(alts)
    return tuple(frozen)


@dataclass(frozen=True)
class TabSignature:
    """A named structural role described by its header alternative-sets.

    Each alternative-set is one logical field; its first spelling is the
    field's canonical name.
    """

    name: str
    required: Tuple[AlternativeSet, ...]
    optional: Tuple[AlternativeSet, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "required", _freeze_sets(self.required, self.name, "required"))
        object.__setattr__(self, "optional", _freeze_sets(self.optional, self.name, "optional"))
        if not self.required:
            raise ValueError(f"Signature {self.name!r} has no required fields")

    @property
    def required_names(self) -> List[str]:
        return [alts[0] for alts in self.required]

    @property
    def optional_names(self) -> List[str]:
        return [alts[0] for alts in self.optional]

    def canonical_names(self) -> List[str]:
        """Canonical names of all fields, required first."""
        return self.required_names + self.optional_names

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "TabSignature":
        if not isinstance(data, Mapping) or "required" not in data:
            raise ValueError(
                f"Signature {name!r} must be an object with a 'required' list"
            )
        return cls(
            name=name,
            required=data["required"],
            optional=data.get("optional", ()),
        )


# ---------------------------------------------------------------------------
# Detection data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MatchResult:
    """Outcome of scoring one header row against one signature.

    A score of exactly 0 is the disqualification sentinel: a required field
    was missing, and the matched names and column map are empty.
    """

    score: float
    matched_field_names: FrozenSet[str] = frozenset()
    column_map: ColumnMap = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def disqualified(cls) -> "MatchResult":
        return cls(score=0.0)

    @property
    def is_match(self) -> bool:
        return self.score > 0


@dataclass(frozen=True)
class TabInfo:
    """Identity of one tab inside a spreadsheet."""

    title: str
    sheet_id: int
    tab_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "sheet_id": self.sheet_id,
            "tab_index": self.tab_index,
        }


@dataclass
class TabGrid:
    """Leading rows of one tab, as cell text, returned by a sheets client."""

    info: TabInfo
    rows: List[List[str]] = field(default_factory=list)


@dataclass(frozen=True)
class DetectedTab:
    """The tab chosen for one signature type and its verified column map."""

    title: str
    sheet_id: int
    tab_index: int
    header_row_index: int  # 0-based physical row holding the headers
    column_map: ColumnMap
    matched_field_names: FrozenSet[str]
    match_score: float
    month_selector_cell_ref: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "title": self.title,
            "sheet_id": self.sheet_id,
            "tab_index": self.tab_index,
            "header_row_index": self.header_row_index,
            "column_map": dict(self.column_map),
            "matched_field_names": sorted(self.matched_field_names),
            "match_score": round(self.match_score, 2),
        }
        if self.month_selector_cell_ref is not None:
            d["month_selector_cell_ref"] = self.month_selector_cell_ref
        return d


@dataclass(frozen=True)
class SheetMetadata:
    """Aggregate result of one full detection pass over a spreadsheet."""

    spreadsheet_id: str
    detected_tabs: Mapping[str, DetectedTab]
    all_tabs: Tuple[TabInfo, ...]
    warnings: Tuple[str, ...]
    detected_at: datetime
    suggestions: Tuple[str, ...] = ()

    def get(self, signature_type: str) -> Optional[DetectedTab]:
        """Detected tab for a type, or ``None`` when nothing matched."""
        return self.detected_tabs.get(signature_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spreadsheet_id": self.spreadsheet_id,
            "detected_tabs": {
                name: tab.to_dict() for name, tab in self.detected_tabs.items()
            },
            "all_tabs": [t.to_dict() for t in self.all_tabs],
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "detected_at": self.detected_at.isoformat(),
        }
