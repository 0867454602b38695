from pathlib import Path

from budget_core.config import load_settings
from budget_core.storage import DEFAULT_RESOURCE


def test_defaults():
    settings = load_settings({})
    assert settings.data_dir == Path("data")
    assert settings.resource == DEFAULT_RESOURCE
    assert settings.env == "prod"
    assert settings.allowed_origins == ()
    assert not settings.is_development


def test_environment_overrides():
    settings = load_settings(
        {
            "BUDGET_PLANNER_DATA_DIR": "/tmp/ledger",
            "BUDGET_PLANNER_RESOURCE": "home.json",
            "BUDGET_PLANNER_ENV": "Development",
            "BUDGET_PLANNER_ALLOWED_ORIGINS": "http://a.test, ,http://b.test",
        }
    )
    assert settings.data_dir == Path("/tmp/ledger")
    assert settings.resource == "home.json"
    assert settings.is_development
    assert settings.allowed_origins == ("http://a.test", "http://b.test")
