import os
import random
import sys
from datetime import UTC, datetime, timedelta

# Add root to pythonpath
sys.path.append(os.getcwd())

from src.adapters.sqlite_store import SQLiteEventStore  # noqa: E402
from src.components.analytics import DEFAULT_CATEGORIES, MetricRecord, RecordSource  # noqa: E402

LISTINGS = [
    ("villa-lotus", "Villa Lotus"),
    ("villa-orchid", "Villa Orchid"),
    ("villa-palm", "Villa Palm"),
    ("villa-teak", "Villa Teak"),
    ("villa-jasmine", "Villa Jasmine"),
    ("villa-frangipani", "Villa Frangipani"),
]

SEARCH_TERMS = ["pool villa", "canggu", "ubud", "seminyak", "sea view", "3 bedroom"]


def seed() -> None:
    data_dir = os.environ.get("LAB_DATA_DIR", "./data")
    os.makedirs(data_dir, exist_ok=True)

    db_path = f"{data_dir}/analytics.db"
    print(f"Seeding to {db_path}")

    store = SQLiteEventStore(db_path)
    store.init_schema()

    now = datetime.now(UTC)
    rng = random.Random(42)

    store.add_many(
        RecordSource.ENTITY,
        [
            MetricRecord(
                entity_id=slug,
                timestamp=now - timedelta(days=rng.randint(0, 120)),
                value=rng.randint(0, 500),
                label=name,
            )
            for slug, name in LISTINGS
        ],
    )

    # Mostly known statuses, plus a legacy value the breakdown ignores
    statuses = [*DEFAULT_CATEGORIES, "ARCHIVED"]
    store.add_many(
        RecordSource.INQUIRY,
        [
            MetricRecord(
                entity_id=rng.choice(LISTINGS)[0],
                timestamp=now - timedelta(hours=rng.randint(0, 24 * 45)),
                category=rng.choices(statuses, weights=[5, 3, 2, 1])[0],
            )
            for _ in range(80)
        ],
    )

    store.add_many(
        RecordSource.SEARCH,
        [
            MetricRecord(entity_id=term, timestamp=now, value=rng.randint(1, 60))
            for term in SEARCH_TERMS
        ],
    )

    print("Seeding complete.")


if __name__ == "__main__":
    seed()
