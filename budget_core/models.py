"""Data models for the budget planner domain."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .validators import ZERO, clean_text, coerce_amount, coerce_budget, coerce_rate

__all__ = [
    "Category",
    "CategoryOverview",
    "DEFAULT_SAVINGS_RATE",
    "Expense",
    "LedgerState",
    "LedgerSummary",
    "SAVINGS_CATEGORY_ID",
    "default_state",
    "parse_date",
    "savings_category_seed",
]

SAVINGS_CATEGORY_ID = "savings"
SAVINGS_CATEGORY_NAME = "Savings"
SAVINGS_CATEGORY_COLOR = "#10B981"
DEFAULT_CATEGORY_COLOR = "#3B82F6"
DEFAULT_SAVINGS_RATE = coerce_rate(5)


def parse_date(value: object) -> date:
    """Parse a calendar date from a date, datetime or ISO 8601 string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO date string, got {value!r}")
    text = value.strip()
    # Older exports stored full timestamps; only the calendar day matters.
    return date.fromisoformat(text[:10])


def _money(value: Decimal) -> float:
    return float(value)


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    budget: Decimal
    is_savings: bool = False
    color: str = DEFAULT_CATEGORY_COLOR

    def with_budget(self, budget: Decimal) -> "Category":
        return replace(self, budget=budget)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "budget": _money(self.budget),
            "isSavings": self.is_savings,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            id=str(data["id"]),
            name=clean_text(data.get("name")),
            budget=coerce_budget(data.get("budget")),
            is_savings=bool(data.get("isSavings", False)),
            color=data.get("color") or DEFAULT_CATEGORY_COLOR,
        )


@dataclass(frozen=True)
class Expense:
    id: str
    category_id: str
    description: str
    amount: Decimal
    date: date

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "categoryId": self.category_id,
            "description": self.description,
            "amount": _money(self.amount),
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from JSON-native data."""
        return cls(
            id=str(data["id"]),
            category_id=str(data["categoryId"]),
            description=clean_text(data.get("description")),
            amount=coerce_budget(data.get("amount")),
            date=parse_date(data["date"]),
        )


def savings_category_seed() -> Category:
    return Category(
        id=SAVINGS_CATEGORY_ID,
        name=SAVINGS_CATEGORY_NAME,
        budget=ZERO,
        is_savings=True,
        color=SAVINGS_CATEGORY_COLOR,
    )


def _first_of_each(records: Iterable[Any]) -> List[Any]:
    """Drop records whose id was already seen and any savings category after the first."""
    kept: List[Any] = []
    seen_ids = set()
    has_savings = False
    for record in records:
        if record.id in seen_ids:
            continue
        if getattr(record, "is_savings", False):
            if has_savings:
                continue
            has_savings = True
        seen_ids.add(record.id)
        kept.append(record)
    return kept


@dataclass
class LedgerState:
    """Everything the planner persists: income, categories, expenses and rate."""

    income: Decimal = ZERO
    categories: List[Category] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    savings_annual_rate: Decimal = DEFAULT_SAVINGS_RATE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "income": _money(self.income),
            "categories": [category.to_dict() for category in self.categories],
            "expenses": [expense.to_dict() for expense in self.expenses],
            "savingsAnnualRate": float(self.savings_annual_rate),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerState":
        """Hydrate state, back-filling any missing key with its default.

        ``salary`` and ``savingsRate`` are accepted as aliases written by the
        first release of the planner.
        """
        if not isinstance(data, dict):
            raise TypeError("Ledger payload must be a JSON object")

        income = data.get("income", data.get("salary", 0))
        rate = data.get("savingsAnnualRate", data.get("savingsRate"))

        if "categories" in data:
            categories = _first_of_each(Category.from_dict(raw) for raw in data["categories"])
        else:
            categories = []
        if not any(category.is_savings for category in categories):
            categories.insert(0, savings_category_seed())

        expenses = _first_of_each(Expense.from_dict(raw) for raw in data.get("expenses", []))

        return cls(
            income=coerce_amount(income),
            categories=categories,
            expenses=expenses,
            savings_annual_rate=DEFAULT_SAVINGS_RATE if rate is None else coerce_rate(rate),
        )


def default_state() -> LedgerState:
    """Return the seeded first-run state: no income, savings only, 5% rate."""
    return LedgerState(categories=[savings_category_seed()])


@dataclass(frozen=True)
class CategoryOverview:
    """A category alongside its derived figures, as shown on the dashboard."""

    category: Category
    spent: Decimal
    balance: Decimal
    usage_percent: Optional[Decimal]

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.category.to_dict(),
            "budget": f"{self.category.budget:.2f}",
            "spent": f"{self.spent:.2f}",
            "balance": f"{self.balance:.2f}",
            "usagePercent": None if self.usage_percent is None else f"{self.usage_percent:.2f}",
        }


@dataclass(frozen=True)
class LedgerSummary:
    income: Decimal
    total_budgeted: Decimal
    total_spent: Decimal
    unallocated: Decimal
    savings_pool: Decimal
    savings_annual_rate: Decimal
    monthly_savings_earnings: Decimal
    annual_savings_earnings: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "income": f"{self.income:.2f}",
            "totalBudgeted": f"{self.total_budgeted:.2f}",
            "totalSpent": f"{self.total_spent:.2f}",
            "unallocated": f"{self.unallocated:.2f}",
            "savingsPool": f"{self.savings_pool:.2f}",
            "savingsAnnualRate": f"{self.savings_annual_rate.normalize():f}",
            "monthlySavingsEarnings": f"{self.monthly_savings_earnings:.2f}",
            "annualSavingsEarnings": f"{self.annual_savings_earnings:.2f}",
        }
