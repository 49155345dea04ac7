"""
Tab Signature Registry.

A curated, configurable set of header signatures, one per structural role a
tab can play.  The matcher and detector only ever see the registry, so new
roles are added here (or from a JSON file) without touching either.

Design decisions
----------------
* Each field is an *alternative-set*: several spellings of the same header.
  Its first spelling is the canonical name used as the column-map key.
* Spellings do not need to be pre-normalised; the matcher normalises both
  sides, so ``"opening balance"`` and ``"opening_balance"`` are redundant but
  harmless.
* Users can extend at runtime via ``load_custom_signatures`` (JSON file) or
  ``add_signature``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from sheet_structure.logging_setup import get_logger
from sheet_structure.schema import SignatureType, TabSignature

logger = get_logger("signatures")


# ---------------------------------------------------------------------------
# Built-in signatures
# ---------------------------------------------------------------------------

BUILTIN_SIGNATURES: Dict[str, TabSignature] = {
    SignatureType.ACCOUNTS.value: TabSignature(
        name=SignatureType.ACCOUNTS.value,
        required=(
            ("accountName", "accountname", "account_name", "account name"),
            ("openingBalance", "openingbalance", "opening_balance", "opening balance"),
        ),
        optional=(
            ("active?", "active", "isactive", "is active"),
            ("note", "notes", "description"),
        ),
    ),
    SignatureType.TRANSACTIONS.value: TabSignature(
        name=SignatureType.TRANSACTIONS.value,
        required=(
            ("timestamp", "time", "date", "datetime", "txndate", "transaction date"),
            ("fromAccount", "fromaccount", "from_account", "from account", "from"),
            ("toAccount", "toaccount", "to_account", "to account", "to"),
            ("transactionType", "transactiontype", "transaction_type",
             "transaction type", "type", "txntype"),
            ("amount", "value", "sum"),
        ),
        optional=(
            ("currency", "curr"),
            ("note", "notes", "description"),
            ("referenceID", "referenceid", "reference_id", "reference id", "ref", "refid"),
            ("user", "username", "createdby", "created by"),
            ("balanceAfter", "balanceafter", "balance_after", "balance after", "balance"),
        ),
    ),
    SignatureType.LEDGER.value: TabSignature(
        name=SignatureType.LEDGER.value,
        required=(
            ("date", "txndate", "transaction date", "timestamp"),
            ("accountName", "accountname", "account_name", "account name", "account"),
            ("amount", "value", "sum", "debit/credit", "debitcredit", "delta", "change"),
            ("month", "monthname", "month name", "period"),
        ),
    ),
    SignatureType.BALANCE_SUMMARY.value: TabSignature(
        name=SignatureType.BALANCE_SUMMARY.value,
        required=(
            ("accountName", "accountname", "account_name", "account name", "account"),
            ("openingBalance", "openingbalance", "opening_balance", "opening balance", "opening"),
            ("netChange", "netchange", "net_change", "net change", "change"),
            ("currentBalance", "currentbalance", "current_balance", "current balance",
             "balance", "closing balance", "closingbalance"),
        ),
        optional=(
            ("lastTxnAt", "lasttxnat", "last_txn_at", "last txn at",
             "last transaction", "lasttransaction"),
            ("inflow(+)", "inflow", "in", "credits", "revenue"),
            ("outflow(-)", "outflow", "out", "debits", "expense"),
            ("note", "notes", "description", "status"),
        ),
    ),
}


class SignatureRegistry:
    """Ordered collection of the tab signatures a detector scans for.

    Iteration order is registration order: the built-ins first, then any
    extras in the order they were added.

    Parameters
    ----------
    extra_signatures:
        Optional ``{name: TabSignature}`` merged in at construction time.
    include_builtins:
        When False the registry starts empty.
    """

    def __init__(
        self,
        extra_signatures: Optional[Mapping[str, TabSignature]] = None,
        include_builtins: bool = True,
    ) -> None:
        self._signatures: Dict[str, TabSignature] = {}
        if include_builtins:
            self._signatures.update(BUILTIN_SIGNATURES)

        if extra_signatures:
            for signature in extra_signatures.values():
                self.register(signature)

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def get(self, name: str) -> Optional[TabSignature]:
        return self._signatures.get(name)

    def names(self) -> List[str]:
        return list(self._signatures)

    def __iter__(self) -> Iterator[TabSignature]:
        return iter(list(self._signatures.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._signatures

    def __len__(self) -> int:
        return len(self._signatures)

    # ------------------------------------------------------------------ #
    # Extension API
    # ------------------------------------------------------------------ #

    def register(self, signature: TabSignature) -> None:
        """Add or replace a signature."""
        if signature.name in self._signatures:
            logger.warning("Overwriting signature %r", signature.name)
        self._signatures[signature.name] = signature
        logger.debug(
            "Registered signature %r: required=%s optional=%s",
            signature.name,
            signature.required_names,
            signature.optional_names,
        )

    def add_signature(
        self,
        name: str,
        required: Sequence[Sequence[str]],
        optional: Sequence[Sequence[str]] = (),
    ) -> TabSignature:
        """Build and register a signature from plain lists.

        Raises
        ------
        ValueError
            If any alternative-set is empty or there are no required fields.
        """
        signature = TabSignature(name=name, required=required, optional=optional)
        self.register(signature)
        return signature

    def load_custom_signatures(self, path: Path) -> int:
        """Load signatures from a JSON file.

        Expected shape::

            {"budget": {"required": [["category", "cat"], ["limit"]],
                        "optional": [["note", "notes"]]}}

        Returns the number of signatures added.
        """
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object of signatures")

        for name, spec in data.items():
            self.register(TabSignature.from_dict(name, spec))
        logger.info("Loaded %d custom signatures from %s", len(data), path)
        return len(data)
