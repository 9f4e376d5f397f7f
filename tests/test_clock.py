from datetime import date, datetime, timedelta, timezone

from attendance_api.services.clock import Clock, FixedClock


def test_day_bounds_in_utc():
    clock = Clock("UTC")
    start, end = clock.day_bounds(datetime(2024, 1, 1, 17, 45, tzinfo=timezone.utc))

    assert start == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert end - start == timedelta(hours=24)


def test_day_bounds_use_configured_zone():
    clock = Clock("Asia/Kolkata")
    # 20:00 UTC is already the next day in India
    start, end = clock.day_bounds(datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc))

    assert start.date() == date(2024, 1, 2)
    assert start == datetime(2024, 1, 1, 18, 30, tzinfo=timezone.utc)
    assert end == datetime(2024, 1, 2, 18, 30, tzinfo=timezone.utc)


def test_day_bounds_across_dst_change_end_at_next_midnight():
    clock = Clock("Europe/Berlin")
    start, end = clock.day_bounds(datetime(2024, 3, 31, 12, 0))

    assert end.date() == date(2024, 4, 1)
    assert end.hour == 0
    assert end.astimezone(timezone.utc) - start.astimezone(timezone.utc) == timedelta(hours=23)


def test_naive_input_is_read_in_configured_zone():
    clock = Clock("America/New_York")
    moment = clock.localize(datetime(2024, 1, 1, 9, 0))

    assert moment.utcoffset() == timedelta(hours=-5)


def test_fixed_clock_advances():
    clock = FixedClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))
    clock.advance(minutes=5)

    assert clock.now() == datetime(2024, 1, 1, 9, 5, tzinfo=timezone.utc)
    assert clock.today() == date(2024, 1, 1)
