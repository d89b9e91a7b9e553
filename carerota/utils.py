import datetime as dt
from dateutil.rrule import rrule, DAILY


def date_list(start: dt.date, days: int):
    return [d.date() for d in rrule(DAILY, dtstart=start, count=days)]


def date_key(day: dt.date) -> str:
    return day.isoformat()


def parse_date(value) -> dt.date:
    """Accept a date, datetime or ISO string; anything else raises ValueError."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return dt.date.fromisoformat(value.strip()[:10])
    raise ValueError(f"not a calendar date: {value!r}")
