"""Identifier and colour generators injected into the ledger service."""

from __future__ import annotations

import random
import time
from typing import Callable, Optional

IdFactory = Callable[[], str]
ColorFactory = Callable[[], str]


class TimestampIdFactory:
    """Millisecond timestamps as ids, bumped forward when two land in one tick."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def __call__(self) -> str:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)


def random_color(rng: Optional[random.Random] = None) -> str:
    """Return a random ``#rrggbb`` display colour."""
    source = rng or random
    return f"#{source.randrange(0x1000000):06x}"
