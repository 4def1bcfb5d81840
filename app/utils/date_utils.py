"""Date helpers for subscription expiry (calendar dates, UTC)."""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from dateutil.relativedelta import relativedelta


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def add_days(base: date, days: int) -> date:
    return base + timedelta(days=days)


def add_months(base: date, months: int) -> date:
    """
    Calendar month arithmetic: 2027-01-31 + 1 month -> 2027-02-28.

    relativedelta clamps to the last day of the target month.
    """
    return base + relativedelta(months=months)


def parse_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    """date column / ISO string / None -> date"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def format_date(value: Optional[date]) -> Optional[str]:
    """YYYY-MM-DD (как в БД) или None"""
    if value is None:
        return None
    return value.isoformat()
