import argparse
import json
import logging
import sys
from pathlib import Path

from src.adapters.clock import SystemClock
from src.adapters.sqlite_store import SQLiteEventStore
from src.components.analytics import AnalyticsService, StoreUnavailableError, create_analytics_service
from src.rules.analytics_rules import AnalyticsRulesAdapter
from src.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

DB_PATH = "data/analytics.db"
RULES_PATH = "rules.yaml"


def get_service(args: argparse.Namespace) -> AnalyticsService:
    rules_path = Path(args.rules)
    if not rules_path.exists():
        logger.error("Rules file %s not found.", rules_path)
        sys.exit(1)

    rules = load_rules(rules_path)
    Path(args.db).parent.mkdir(parents=True, exist_ok=True)
    store = SQLiteEventStore(args.db)
    store.init_schema()
    return create_analytics_service(
        store, clock=SystemClock(), rules=AnalyticsRulesAdapter(rules)
    )


def handle_report(service: AnalyticsService, args: argparse.Namespace) -> None:
    report = service.generate_report()
    print(json.dumps(report.to_dict(), indent=args.indent))


def handle_search_terms(service: AnalyticsService, args: argparse.Namespace) -> None:
    for rank, term in enumerate(service.top_search_terms(args.limit), start=1):
        print(f"{rank:>3}. {term.label} ({term.metric_value:g})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Listing Analytics CLI")
    parser.add_argument("--db", default=DB_PATH, help="SQLite event store path")
    parser.add_argument("--rules", default=RULES_PATH, help="Rules file path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # report
    report_parser = subparsers.add_parser("report", help="Print the dashboard report as JSON")
    report_parser.add_argument("--indent", type=int, default=2)

    # search-terms
    terms_parser = subparsers.add_parser("search-terms", help="Print the top search terms")
    terms_parser.add_argument("--limit", type=int, default=None)

    args = parser.parse_args()
    service = get_service(args)

    try:
        if args.command == "report":
            handle_report(service, args)
        elif args.command == "search-terms":
            handle_search_terms(service, args)
    except StoreUnavailableError as e:
        logger.error("%s", e)
        sys.exit(2)


if __name__ == "__main__":
    main()
