"""
Rules-backed implementation of the analytics RulesPort.
"""

from __future__ import annotations

from src.rules.models import AnalyticsRules, Rules


class AnalyticsRulesAdapter:
    """Expose the ``analytics`` section of the rules file to the component."""

    def __init__(self, rules: Rules | AnalyticsRules) -> None:
        self._rules = rules.analytics if isinstance(rules, Rules) else rules

    def get_daily_window_days(self) -> int:
        return self._rules.windows.daily_days

    def get_weekly_window_weeks(self) -> int:
        return self._rules.windows.weekly_weeks

    def get_top_n(self) -> int:
        return self._rules.ranking.top_entities

    def get_search_top_n(self) -> int:
        return self._rules.ranking.top_search_terms

    def get_known_categories(self) -> tuple[str, ...]:
        return tuple(self._rules.breakdown.known_categories)

    def use_concurrent_queries(self) -> bool:
        return self._rules.queries.concurrent

    def get_max_workers(self) -> int:
        return self._rules.queries.max_workers
