from datetime import UTC, datetime, timedelta

from src.adapters.clock import FrozenClock, SystemClock


def test_system_clock():
    clock = SystemClock()
    now = clock.now_utc()
    assert now.tzinfo is not None
    # Sanity check: is it close to real now?
    real_now = datetime.now(UTC)
    diff = abs((real_now - now).total_seconds())
    assert diff < 1.0 # Should be very fast


def test_frozen_clock_is_stable():
    frozen = datetime(2024, 6, 15, 14, 30, tzinfo=UTC)
    clock = FrozenClock(frozen)
    assert clock.now_utc() == frozen
    assert clock.now_utc() == clock.now_utc()


def test_frozen_clock_naive_is_utc():
    clock = FrozenClock(datetime(2024, 6, 15, 14, 30))  # noqa: DTZ001
    assert clock.now_utc().tzinfo == UTC


def test_frozen_clock_advance():
    clock = FrozenClock(datetime(2024, 6, 15, tzinfo=UTC))
    clock.advance(timedelta(days=1))
    assert clock.now_utc() == datetime(2024, 6, 16, tzinfo=UTC)
