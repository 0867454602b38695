"""Environment-driven settings shared by the API and the console."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .storage import DEFAULT_RESOURCE


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    resource: str = DEFAULT_RESOURCE
    env: str = "prod"
    allowed_origins: Tuple[str, ...] = ()

    @property
    def is_development(self) -> bool:
        return self.env in {"dev", "development"}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    raw_origins = env.get("BUDGET_PLANNER_ALLOWED_ORIGINS", "")
    return Settings(
        data_dir=Path(env.get("BUDGET_PLANNER_DATA_DIR") or "data"),
        resource=env.get("BUDGET_PLANNER_RESOURCE") or DEFAULT_RESOURCE,
        env=env.get("BUDGET_PLANNER_ENV", "prod").lower(),
        allowed_origins=tuple(
            origin.strip() for origin in raw_origins.split(",") if origin.strip()
        ),
    )
