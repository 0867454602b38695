"""Flat CSV report of every category's budget, spending and balance."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import List

from .models import LedgerState
from .services import LedgerService

REPORT_HEADER = ["Category", "Budget", "Spent", "Balance", "Type"]
DEFAULT_REPORT_FILENAME = "finance-report.csv"


def report_rows(state: LedgerState) -> List[List[str]]:
    """Return rows suitable for CSV export, header first."""
    ledger = LedgerService(state)
    rows = [list(REPORT_HEADER)]
    for row in ledger.category_overview():
        rows.append([
            row.category.name,
            f"{row.category.budget:.2f}",
            f"{row.spent:.2f}",
            f"{row.balance:.2f}",
            "Savings" if row.category.is_savings else "Expense",
        ])
    return rows


def to_csv(state: LedgerState) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(report_rows(state))
    return buf.getvalue()


def write_csv(state: LedgerState, path: Path) -> Path:
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(to_csv(state))
    return path
