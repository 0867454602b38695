"""Persistence utilities for the budget planner core."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import PersistenceError
from .models import LedgerState, default_state

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "finance_data.json"


class JSONStorage:
    """Simple file-based JSON storage with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = base_path
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load(self, resource: str) -> Optional[Dict[str, Any]]:
        path = self._base_path / resource
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

        if not isinstance(payload, dict):
            raise PersistenceError(f"Expected object payload in {path}")
        return payload

    def save(self, resource: str, payload: Dict[str, Any]) -> None:
        path = self._base_path / resource
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
                handle.flush()
            # Atomic on POSIX; readers never see a half-written slot.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path


class LedgerPersistence:
    """Best-effort load/save of the ledger to a single storage slot.

    Nothing here raises: an unreadable slot loads as the seeded default
    state and a failed write is logged and reported as ``False``.
    """

    def __init__(self, storage: JSONStorage, resource: str = DEFAULT_RESOURCE) -> None:
        self._storage = storage
        self._resource = resource

    @property
    def resource(self) -> str:
        return self._resource

    def load(self) -> LedgerState:
        try:
            payload = self._storage.load(self._resource)
        except PersistenceError as exc:
            logger.warning("Falling back to a fresh ledger: %s", exc)
            return default_state()

        if payload is None:
            logger.debug("No ledger at %s; seeding defaults", self._resource)
            return default_state()

        try:
            state = LedgerState.from_dict(payload)
        except (KeyError, TypeError, ValueError, AttributeError, ArithmeticError) as exc:
            logger.warning("Falling back to a fresh ledger, %s is malformed: %s", self._resource, exc)
            return default_state()

        logger.debug(
            "Loaded ledger with %d categories and %d expenses",
            len(state.categories),
            len(state.expenses),
        )
        return state

    def save(self, state: LedgerState) -> bool:
        try:
            self._storage.save(self._resource, state.to_dict())
        except PersistenceError as exc:
            logger.warning("Ledger not saved: %s", exc)
            return False
        logger.debug("Saved ledger to %s", self._resource)
        return True
