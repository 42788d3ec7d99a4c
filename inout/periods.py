"""Calendar window helpers.

Weeks start on Monday everywhere in the application, so the dashboard's
"this week" card and the weekly chart buckets always agree.
"""
import calendar
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta

from inout.domain import MONTH, WEEK, YEAR

WEEK_START = calendar.MONDAY


def start_of_day(ts: datetime) -> datetime:
    return datetime.combine(ts.date(), time.min)


def end_of_day(ts: datetime) -> datetime:
    return datetime.combine(ts.date(), time.max)


def start_of_week(ts: datetime) -> datetime:
    offset = (ts.weekday() - WEEK_START) % 7
    return start_of_day(ts - timedelta(days=offset))


def end_of_week(ts: datetime) -> datetime:
    return end_of_day(start_of_week(ts) + timedelta(days=6))


def start_of_month(ts: datetime) -> datetime:
    return datetime.combine(date(ts.year, ts.month, 1), time.min)


def end_of_month(ts: datetime) -> datetime:
    last_day = calendar.monthrange(ts.year, ts.month)[1]
    return datetime.combine(date(ts.year, ts.month, last_day), time.max)


def shift_months(ts: datetime, months: int) -> datetime:
    """Move ``ts`` by a whole number of months, clamping the day.

    31 March minus one month lands on the last day of February rather than
    spilling over into March.
    """
    return ts + relativedelta(months=months)


def shift_period(ts: datetime, period: str, count: int = -1) -> datetime:
    """Shift ``ts`` by ``count`` periods (negative goes back in time)."""
    if period == WEEK:
        return ts + timedelta(days=7 * count)
    if period == MONTH:
        return shift_months(ts, count)
    if period == YEAR:
        return ts + relativedelta(years=count)
    raise ValueError(f"Unknown period: {period!r}")


def in_window(ts: datetime, start: datetime, end: datetime) -> bool:
    return start <= ts <= end
