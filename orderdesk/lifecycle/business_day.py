from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from orderdesk.config import get_config


def _local(ts: datetime) -> datetime:
    # naive timestamps are taken as local time
    return ts.astimezone()


def business_day_bounds(now: Optional[datetime] = None, start_hour: Optional[int] = None) -> Tuple[datetime, datetime]:
    """Half-open [start, end) window of the business day containing `now`.

    A business day starts at `start_hour` local time (04:00 by default) and
    runs until the same hour the next calendar day, so 02:00 still belongs
    to the previous day's service.
    """
    if start_hour is None:
        start_hour = get_config().business_day_start_hour
    # bounds are built on wall-clock time so each gets its own UTC offset across DST changes
    wall = _local(now or datetime.now()).replace(tzinfo=None)
    start = wall.replace(hour=start_hour, minute=0, second=0, microsecond=0)
    if wall < start:
        start -= timedelta(days=1)
    return start.astimezone(), (start + timedelta(days=1)).astimezone()


def business_date(ts: datetime, start_hour: Optional[int] = None) -> date:
    """Calendar date of the business day `ts` falls in."""
    start, _ = business_day_bounds(ts, start_hour)
    return start.date()


def in_business_day(ts: Optional[datetime], now: Optional[datetime] = None, start_hour: Optional[int] = None) -> bool:
    if ts is None:
        return False
    start, end = business_day_bounds(now, start_hour)
    return start <= _local(ts) < end
