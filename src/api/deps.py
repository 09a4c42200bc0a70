import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from src.adapters.clock import SystemClock
from src.adapters.sqlite_store import SQLiteEventStore
from src.components.analytics import AnalyticsService, ClockPort, create_analytics_service
from src.rules.analytics_rules import AnalyticsRulesAdapter
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.db_path = f"{os.environ.get('LAB_DATA_DIR', './data')}/analytics.db"
        self.rules_path = Path(os.environ.get("LAB_RULES_PATH", self.base_dir / "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


@lru_cache
def _load_rules_cached(path: Path) -> Rules:
    return load_rules(path)


# --- Adapters ---
def get_event_store(settings: Settings = Depends(get_settings)) -> SQLiteEventStore:
    return SQLiteEventStore(settings.db_path)


def get_clock() -> ClockPort:
    return SystemClock()


# --- Services ---
def get_analytics_service(
    store: SQLiteEventStore = Depends(get_event_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> AnalyticsService:
    """New service per request; nothing is shared between reports."""
    return create_analytics_service(store, clock=clock, rules=AnalyticsRulesAdapter(rules))
