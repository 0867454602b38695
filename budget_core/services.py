"""Framework-agnostic ledger service for the budget planner."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional

from .exceptions import RecordNotFoundError
from .generators import ColorFactory, IdFactory, TimestampIdFactory, random_color
from .models import (
    SAVINGS_CATEGORY_ID,
    Category,
    CategoryOverview,
    Expense,
    LedgerState,
    LedgerSummary,
    default_state,
)
from .validators import (
    ZERO,
    clean_text,
    coerce_amount,
    coerce_budget,
    coerce_rate,
    quantize_money,
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")


class LedgerService:
    """Owns a single ledger state and answers every question asked of it.

    Mutations apply in place and report whether anything changed so the
    caller can decide to re-render and persist. Invalid input is a silent
    no-op, never an exception.
    """

    def __init__(
        self,
        state: Optional[LedgerState] = None,
        *,
        id_factory: Optional[IdFactory] = None,
        color_factory: Optional[ColorFactory] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._state = state if state is not None else default_state()
        self._new_id = id_factory or TimestampIdFactory()
        self._new_color = color_factory or random_color
        self._today = today or date.today

    @property
    def state(self) -> LedgerState:
        return self._state

    # Mutations ------------------------------------------------------------
    def set_income(self, value: object) -> bool:
        income = coerce_amount(value)
        if income == self._state.income:
            return False
        self._state.income = income
        return True

    def set_savings_rate(self, value: object) -> bool:
        rate = coerce_rate(value)
        if rate == self._state.savings_annual_rate:
            return False
        self._state.savings_annual_rate = rate
        return True

    def add_category(self, name: object, budget: object) -> Optional[Category]:
        label = clean_text(name)
        amount = coerce_budget(budget)
        if not label or amount <= 0:
            logger.debug("Ignoring category %r with budget %r", name, budget)
            return None

        category = Category(
            id=self._fresh_id(existing.id for existing in self._state.categories),
            name=label,
            budget=amount,
            is_savings=False,
            color=self._new_color(),
        )
        self._state.categories.append(category)
        return category

    def delete_category(self, category_id: str) -> bool:
        category = self.find_category(category_id)
        if category is None or category.is_savings or category.id == SAVINGS_CATEGORY_ID:
            return False

        self._state.categories = [
            existing for existing in self._state.categories if existing.id != category_id
        ]
        # Expenses never outlive their category.
        self._state.expenses = [
            expense for expense in self._state.expenses if expense.category_id != category_id
        ]
        return True

    def update_category_budget(self, category_id: str, value: object) -> bool:
        category = self.find_category(category_id)
        if category is None:
            return False

        budget = coerce_budget(value)
        self._state.categories = [
            existing.with_budget(budget) if existing.id == category_id else existing
            for existing in self._state.categories
        ]
        return budget != category.budget

    def add_expense(
        self, category_id: str, description: object, amount: object
    ) -> Optional[Expense]:
        category = self.find_category(category_id) if category_id else None
        text = clean_text(description)
        value = coerce_budget(amount)
        if category is None or category.is_savings or not text or value <= 0:
            logger.debug(
                "Ignoring expense %r of %r against category %r", description, amount, category_id
            )
            return None

        expense = Expense(
            id=self._fresh_id(existing.id for existing in self._state.expenses),
            category_id=category.id,
            description=text,
            amount=value,
            date=self._today(),
        )
        self._state.expenses.append(expense)
        return expense

    def delete_expense(self, expense_id: str) -> bool:
        remaining = [expense for expense in self._state.expenses if expense.id != expense_id]
        if len(remaining) == len(self._state.expenses):
            return False
        self._state.expenses = remaining
        return True

    # Lookups --------------------------------------------------------------
    def find_category(self, category_id: str) -> Optional[Category]:
        for category in self._state.categories:
            if category.id == category_id:
                return category
        return None

    def get_category(self, category_id: str) -> Category:
        """Return a category or raise if it does not exist."""
        category = self.find_category(category_id)
        if category is None:
            raise RecordNotFoundError(f"Category {category_id} not found")
        return category

    def savings_category(self) -> Optional[Category]:
        for category in self._state.categories:
            if category.is_savings:
                return category
        return self.find_category(SAVINGS_CATEGORY_ID)

    def list_categories(self) -> List[Category]:
        return list(self._state.categories)

    def spendable_categories(self) -> List[Category]:
        """Categories an expense may be recorded against."""
        return [category for category in self._state.categories if not category.is_savings]

    def category_expenses(self, category_id: str) -> List[Expense]:
        return [expense for expense in self._state.expenses if expense.category_id == category_id]

    def list_expenses(self, category_id: Optional[str] = None) -> List[Expense]:
        """Expenses newest first; same-day entries keep their recorded order."""
        records: Iterable[Expense] = self._state.expenses
        if category_id is not None:
            records = self.category_expenses(category_id)
        return sorted(records, key=lambda exp: exp.date, reverse=True)

    # Derivations ----------------------------------------------------------
    def spent(self, category_id: str) -> Decimal:
        return sum(
            (expense.amount for expense in self.category_expenses(category_id)),
            start=ZERO,
        )

    def balance(self, category_id: str) -> Decimal:
        category = self.find_category(category_id)
        if category is None:
            return ZERO
        if category.is_savings:
            return category.budget
        return category.budget - self.spent(category_id)

    def usage_percent(self, category_id: str) -> Optional[Decimal]:
        """Spent as a percentage of budget; ``None`` for the savings pool."""
        category = self.find_category(category_id)
        if category is None:
            return ZERO
        if category.is_savings:
            return None
        if category.budget <= 0:
            return ZERO
        return quantize_money(self.spent(category_id) / category.budget * HUNDRED)

    def total_budgeted(self) -> Decimal:
        return sum((category.budget for category in self._state.categories), start=ZERO)

    def total_spent(self) -> Decimal:
        spendable = {category.id for category in self.spendable_categories()}
        return sum(
            (expense.amount for expense in self._state.expenses if expense.category_id in spendable),
            start=ZERO,
        )

    def unallocated(self) -> Decimal:
        return self._state.income - self.total_budgeted()

    def monthly_savings_earnings(self) -> Decimal:
        return quantize_money(self._monthly_interest())

    def annual_savings_earnings(self) -> Decimal:
        return quantize_money(self._monthly_interest() * MONTHS_PER_YEAR)

    def category_row(self, category_id: str) -> CategoryOverview:
        category = self.get_category(category_id)
        return CategoryOverview(
            category=category,
            spent=self.spent(category.id),
            balance=self.balance(category.id),
            usage_percent=self.usage_percent(category.id),
        )

    def category_overview(self) -> List[CategoryOverview]:
        return [self.category_row(category.id) for category in self._state.categories]

    def summary(self) -> LedgerSummary:
        savings = self.savings_category()
        return LedgerSummary(
            income=self._state.income,
            total_budgeted=self.total_budgeted(),
            total_spent=self.total_spent(),
            unallocated=self.unallocated(),
            savings_pool=savings.budget if savings else ZERO,
            savings_annual_rate=self._state.savings_annual_rate,
            monthly_savings_earnings=self.monthly_savings_earnings(),
            annual_savings_earnings=self.annual_savings_earnings(),
        )

    def snapshot(self) -> Dict[str, object]:
        """Return serialisable snapshot useful for testing or exports."""
        return self._state.to_dict()

    # Internal helpers -----------------------------------------------------
    def _monthly_interest(self) -> Decimal:
        # Simple pro-ration of the annual rate; earnings are never accrued.
        savings = self.savings_category()
        if savings is None:
            return ZERO
        return savings.budget * self._state.savings_annual_rate / HUNDRED / MONTHS_PER_YEAR

    def _fresh_id(self, taken: Iterable[str]) -> str:
        existing = set(taken)
        candidate = self._new_id()
        while candidate in existing:
            candidate = self._new_id()
        return candidate
