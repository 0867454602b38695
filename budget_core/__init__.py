"""Core business logic package for the budget planner."""

from .models import Category, Expense, LedgerState, default_state
from .services import LedgerService
from .storage import JSONStorage, LedgerPersistence
from .report import to_csv
from .exceptions import PersistenceError, ValidationError, RecordNotFoundError

__all__ = [
    "Category",
    "Expense",
    "LedgerState",
    "default_state",
    "LedgerService",
    "JSONStorage",
    "LedgerPersistence",
    "to_csv",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
