"""
Calendar helpers - ISO dates, month arithmetic, business days, local "today"
"""
import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from organizese.config import get_settings

DateLike = Union[date, str]


def parse_iso_date(value: DateLike) -> date:
    """Accept a date or a yyyy-MM-dd string (a time part is ignored)"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def to_iso(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def add_months(value: date, months: int) -> date:
    """Add months, clamping the day to the length of the target month"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(value: date, years: int) -> date:
    return add_months(value, 12 * years)


def is_weekend(value: date) -> bool:
    # Monday == 0 ... Saturday == 5, Sunday == 6
    return value.weekday() >= 5


def next_business_day(value: DateLike) -> date:
    """First Monday-Friday date strictly after the given one"""
    current = parse_iso_date(value) + timedelta(days=1)
    while is_weekend(current):
        current += timedelta(days=1)
    return current


def today_in_timezone(tz_name: Optional[str] = None) -> date:
    """Current calendar date in the configured locale (America/Sao_Paulo by default)"""
    tz = ZoneInfo(tz_name or get_settings().TIMEZONE)
    return datetime.now(tz).date()


def now_iso() -> str:
    """UTC timestamp used in history entries"""
    return datetime.utcnow().replace(microsecond=0).isoformat() + "Z"
