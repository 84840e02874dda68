"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta


def add_months(base: date, months: int) -> date:
    """Shift a date by whole months, keeping the day-of-month (clamped to month end)"""
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    day = min(base.day, calendar.monthrange(year, month)[1])
    return base.replace(year=year, month=month, day=day)


def month_label(d: date) -> str:
    """Human label like 'March 2027'"""
    return f"{calendar.month_name[d.month]} {d.year}"


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def diff_days(a: datetime, b: datetime) -> int:
    """Calendar days from b to a, ignoring time of day"""
    return (a.date() - b.date()).days


def start_of_week(dt: datetime) -> datetime:
    """Monday 00:00 of the week containing dt"""
    return start_of_day(dt) - timedelta(days=dt.weekday())


def start_of_month(dt: datetime) -> datetime:
    return start_of_day(dt).replace(day=1)


def minutes_from_midnight(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def sunday_first_weekday(dt: datetime) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday"""
    return (dt.weekday() + 1) % 7
