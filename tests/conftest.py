from datetime import date
from itertools import count

import pytest

from budget_core.models import default_state
from budget_core.services import LedgerService

FIXED_DAY = date(2024, 3, 15)


class SequentialIds:
    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"


@pytest.fixture
def id_factory():
    return SequentialIds()


@pytest.fixture
def color_factory():
    return lambda: "#123456"


@pytest.fixture
def ledger(id_factory, color_factory):
    return LedgerService(
        default_state(),
        id_factory=id_factory,
        color_factory=color_factory,
        today=lambda: FIXED_DAY,
    )


@pytest.fixture
def food_ledger(ledger):
    """Income 5000 with a Food budget of 800 and two meals recorded."""
    ledger.set_income(5000)
    food = ledger.add_category("Food", 800)
    ledger.add_expense(food.id, "Lunch", 50)
    ledger.add_expense(food.id, "Dinner", 40)
    return ledger
