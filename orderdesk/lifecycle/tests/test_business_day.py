import os
import time
from datetime import date, datetime, timedelta

import pytest

from orderdesk.lifecycle.business_day import business_date, business_day_bounds, in_business_day


@pytest.fixture
def new_york_time():
    if not hasattr(time, "tzset"):
        pytest.skip("process time zone cannot be switched on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()


def local(*args):
    return datetime(*args).astimezone()


def test_evening_belongs_to_same_day():
    start, end = business_day_bounds(local(2026, 3, 14, 20, 0))
    assert start == local(2026, 3, 14, 4, 0)
    assert end - start == timedelta(days=1)


def test_after_midnight_belongs_to_previous_day():
    start, end = business_day_bounds(local(2026, 3, 15, 2, 30))
    assert start == local(2026, 3, 14, 4, 0)
    assert business_date(local(2026, 3, 15, 2, 30)) == date(2026, 3, 14)


def test_boundary_is_half_open():
    now = local(2026, 3, 14, 20, 0)
    assert in_business_day(local(2026, 3, 14, 4, 0), now)
    assert in_business_day(local(2026, 3, 15, 3, 59), now)
    assert not in_business_day(local(2026, 3, 15, 4, 0), now)
    assert not in_business_day(local(2026, 3, 14, 3, 59), now)
    assert not in_business_day(None, now)


def test_custom_start_hour():
    start, _ = business_day_bounds(local(2026, 3, 14, 5, 0), start_hour=6)
    assert start == local(2026, 3, 13, 6, 0)


def test_bounds_across_spring_forward(new_york_time):
    """Clocks jump 02:00 -> 03:00 on 2026-03-08: the day still starts at 04:00 EST and ends at 04:00 EDT."""
    start, end = business_day_bounds(local(2026, 3, 8, 3, 30))
    assert (start.hour, start.utcoffset()) == (4, timedelta(hours=-5))
    assert (end.hour, end.utcoffset()) == (4, timedelta(hours=-4))
    assert end - start == timedelta(hours=23)
    assert business_date(local(2026, 3, 8, 3, 30)) == date(2026, 3, 7)
