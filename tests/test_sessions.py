import asyncio
from datetime import timedelta

import pytest

from attendance_api.exceptions import NotFoundError, StorageConflict, StorageUnavailable
from attendance_api.services.clock import FixedClock
from attendance_api.services.sessions import SessionManager
from helpers import utc


def test_first_login_of_the_day_creates_one_open_record(store, clock):
    manager = SessionManager(store, clock)
    now = utc(2024, 1, 1, 9, 0)

    session = asyncio.run(manager.reconcile_login("emp-1", now))

    assert session.clock_in == now
    assert session.clock_out is None
    assert session.is_logged_in is True
    assert session.session_start_time == now
    assert session.is_continuation is False
    records = store.for_employee("emp-1")
    assert len(records) == 1
    assert records[0].date == utc(2024, 1, 1)
    assert records[0].total_hours == 0


def test_login_with_open_session_leaves_record_untouched(store, clock):
    manager = SessionManager(store, clock)
    first = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    writes = store.writes

    second = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 11, 30)))

    assert second.clock_in == first.clock_in
    assert second.is_logged_in is True
    assert second.is_continuation is False
    assert store.writes == writes


def test_login_within_reopen_window_continues_session(store, clock):
    manager = SessionManager(store, clock)
    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    closed = asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 12, 0)))

    session = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 12, 5)))

    assert session.is_continuation is True
    assert session.clock_in == utc(2024, 1, 1, 9, 0)
    assert session.clock_out is None
    (record,) = store.for_employee("emp-1")
    assert record.id == closed.id
    assert record.total_hours == 0


def test_login_exactly_at_window_edge_still_continues(store, clock):
    manager = SessionManager(store, clock)
    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 12, 0)))

    session = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 12, 10)))

    assert session.is_continuation is True


def test_login_after_reopen_window_restarts_same_record(store, clock):
    manager = SessionManager(store, clock)
    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    closed = asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 12, 0)))

    now = utc(2024, 1, 1, 12, 15)
    session = asyncio.run(manager.reconcile_login("emp-1", now))

    assert session.is_continuation is False
    assert session.clock_in == now
    assert session.is_logged_in is True
    records = store.for_employee("emp-1")
    assert len(records) == 1
    assert records[0].id == closed.id
    assert records[0].clock_in == now


def test_reopen_window_is_configurable(store, clock):
    manager = SessionManager(store, clock, reopen_window=timedelta(minutes=30))
    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 12, 0)))

    session = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 12, 25)))

    assert session.is_continuation is True


def test_next_day_login_opens_a_new_record(store, clock):
    manager = SessionManager(store, clock)
    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 23, 55)))

    session = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 2, 0, 1)))

    assert session.is_continuation is False
    assert len(store.for_employee("emp-1")) == 2


def test_day_boundary_follows_configured_timezone(store):
    clock = FixedClock(utc(2024, 1, 1, 20, 0), timezone="America/New_York")
    manager = SessionManager(store, clock)

    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 20, 0)))  # 15:00 in New York
    asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 22, 0)))
    session = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 2, 4, 0)))  # 23:00 in New York

    assert len(store.for_employee("emp-1")) == 1
    assert session.clock_in == utc(2024, 1, 2, 4, 0)


def test_logout_without_record_is_a_noop(store, clock):
    manager = SessionManager(store, clock)

    assert asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 17, 0))) is None
    assert store.records == {}
    assert store.writes == 0


def test_logout_on_closed_session_is_a_noop(store, clock):
    manager = SessionManager(store, clock)
    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 17, 0)))
    before = dict(store.records)
    writes = store.writes

    assert asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 18, 0))) is None
    assert store.records == before
    assert store.writes == writes


def test_logout_closes_session_and_computes_hours(store, clock):
    manager = SessionManager(store, clock)
    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))

    closed = asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 17, 30)))

    assert closed.clock_out == utc(2024, 1, 1, 17, 30)
    assert closed.total_hours == 8.5
    assert store.records[closed.id].total_hours == 8.5


def test_full_day_with_reopened_session_counts_wall_clock_hours(store, clock):
    manager = SessionManager(store, clock)

    session = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    assert session.is_logged_in is True

    closed = asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 17, 0)))
    assert closed.total_hours == 8.0

    session = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 17, 5)))
    assert session.is_continuation is True
    assert session.clock_in == utc(2024, 1, 1, 9, 0)

    closed = asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 18, 0)))
    assert closed.total_hours == 9.0
    assert len(store.for_employee("emp-1")) == 1


def test_concurrent_first_login_is_retried_against_winner(racing_store_factory, clock):
    winner_clock_in = utc(2024, 1, 1, 8, 59, 59)
    store = racing_store_factory(winner_clock_in)
    manager = SessionManager(store, clock)

    session = asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))

    assert len(store.for_employee("emp-1")) == 1
    assert session.clock_in == winner_clock_in
    assert session.is_logged_in is True
    assert session.is_continuation is False


def test_conflict_after_retry_propagates(always_stale_store, clock):
    manager = SessionManager(always_stale_store, clock)
    asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))

    with pytest.raises(StorageConflict):
        asyncio.run(manager.reconcile_logout("emp-1", utc(2024, 1, 1, 17, 0)))
    (record,) = always_stale_store.for_employee("emp-1")
    assert record.clock_out is None


def test_storage_unavailable_propagates(unavailable_store, clock):
    manager = SessionManager(unavailable_store, clock)

    with pytest.raises(StorageUnavailable):
        asyncio.run(manager.reconcile_login("emp-1", utc(2024, 1, 1, 9, 0)))
    assert unavailable_store.writes == 0


def test_unknown_employee_is_rejected_without_creating_a_record(store, clock, directory):
    manager = SessionManager(store, clock, directory)

    with pytest.raises(NotFoundError):
        asyncio.run(manager.reconcile_login("nobody", utc(2024, 1, 1, 9, 0)))
    assert store.records == {}


def test_now_defaults_to_clock(store, clock):
    manager = SessionManager(store, clock)

    session = asyncio.run(manager.reconcile_login("emp-1"))

    assert session.clock_in == clock.now()
