from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.clock import FrozenClock
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def rules_path() -> Path:
    """The project's real rules file."""
    path = PROJECT_ROOT / "rules.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Rules not found at {path}")
    return path


@pytest.fixture
def rules(rules_path: Path) -> Rules:
    return load_rules(rules_path)


@pytest.fixture
def frozen_clock() -> FrozenClock:
    """Clock frozen on a Saturday afternoon (UTC)."""
    return FrozenClock(datetime(2024, 6, 15, 14, 30, tzinfo=UTC))
