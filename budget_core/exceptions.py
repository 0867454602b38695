"""Domain-specific exceptions for the budget planner core."""

class ValidationError(ValueError):
    """Raised when a request at the API or console boundary is malformed."""


class RecordNotFoundError(LookupError):
    """Raised when a category or expense cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""
