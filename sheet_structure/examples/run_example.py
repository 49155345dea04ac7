#!/usr/bin/env python3
"""
Example: Tab Detection Demo.

Builds a small finance workbook in a temp directory, runs the detector over
it and prints the detected structure, warnings and the ranges downstream
readers would use.

Run from the project root:
    python -m sheet_structure.examples.run_example
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

import openpyxl

from sheet_structure.config import DetectorConfig
from sheet_structure.detector import TabDetector
from sheet_structure.excel_client import WorkbookClient
from sheet_structure.ranges import build_range, data_range
from sheet_structure.schema import SignatureType


# ======================================================================
# Helper
# ======================================================================

def print_section(title: str) -> None:
    width = 72
    print("\n" + "=" * width)
    print(f"  {title}")
    print("=" * width)


def build_workbook(path: Path) -> None:
    wb = openpyxl.Workbook()

    summary = wb.active
    summary.title = "Balance Summary"
    summary.append(["Month Filter", "ALL"])
    summary.append(["Account Name", "Opening Balance", "Net Change", "Current Balance", "Note"])
    summary.append(["Cash", 1000, 250, 1250, ""])

    accounts = wb.create_sheet("Accounts")
    accounts.append(["accountName", "openingBalance", "active?", "note"])
    accounts.append(["Cash", 1000, "TRUE", "petty cash"])

    txns = wb.create_sheet("Transactions")
    txns.append(["Timestamp", "From Account", "To Account", "Type", "Amount", "Currency"])

    ledger = wb.create_sheet("Ledger")
    ledger.append(["Date", "Account", "Delta", "Mnth"])  # typo: no 'month' column

    wb.save(path)


# ======================================================================
# Main
# ======================================================================

def main() -> None:
    detector = TabDetector(DetectorConfig(log_level=logging.WARNING))

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "finance.xlsx"
        build_workbook(path)
        meta = detector.detect("demo-finance", WorkbookClient(path))

    print_section("Detected structure")
    print(json.dumps(meta.to_dict(), indent=2))

    print_section("Ranges")
    accounts = meta.get(SignatureType.ACCOUNTS)
    if accounts is not None:
        print(build_range(accounts.title, "openingBalance", accounts.column_map))
    summary = meta.get(SignatureType.BALANCE_SUMMARY)
    if summary is not None:
        print(data_range(summary))

    print(f"\n  ✓ Detected : {len(meta.detected_tabs)}")
    print(f"  ⚠ Warnings : {len(meta.warnings)}")
    print(f"  ? Hints    : {len(meta.suggestions)}")


if __name__ == "__main__":
    main()
