"""
Value Parsing and Calendar Periods

Helpers shared by the models and calculators. Periods are "YYYY-MM" strings,
dates are "YYYY-MM-DD" strings, money is Decimal.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation

from .exceptions import ParseError

DATE_FORMAT = "%Y-%m-%d"
PERIOD_FORMAT = "%Y-%m"

SHORT_MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
LONG_MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def parse_money(value, field_name: str) -> Decimal:
    """Convert a raw JSON number/string into Decimal."""
    if value is None or isinstance(value, bool):
        raise ParseError(f"{field_name} must be numeric, got: {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ParseError(f"{field_name} must be numeric, got: {value!r}") from None
    if not amount.is_finite():
        raise ParseError(f"{field_name} must be a finite number, got: {value!r}")
    return amount


def parse_flag(value, field_name: str) -> bool:
    """JSON booleans only; the strings "true"/"false" are rejected."""
    if not isinstance(value, bool):
        raise ParseError(f"{field_name} must be true or false, got: {value!r}")
    return value


def parse_date(value, field_name: str) -> str:
    """Validate an ISO calendar date and return it normalized."""
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    try:
        return datetime.strptime(str(value), DATE_FORMAT).strftime(DATE_FORMAT)
    except ValueError:
        raise ParseError(f"{field_name} must be a YYYY-MM-DD date, got: {value!r}") from None


def parse_period(value, field_name: str) -> str:
    """Validate a YYYY-MM period and return it normalized."""
    try:
        return datetime.strptime(str(value), PERIOD_FORMAT).strftime(PERIOD_FORMAT)
    except ValueError:
        raise ParseError(f"{field_name} must be a YYYY-MM period, got: {value!r}") from None


def split_period(period: str) -> tuple[int, int]:
    year, month = period.split("-")
    return int(year), int(month)


def make_period(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def next_period(period: str) -> str:
    year, month = split_period(period)
    if month == 12:
        return make_period(year + 1, 1)
    return make_period(year, month + 1)


def previous_period(period: str) -> str:
    year, month = split_period(period)
    if month == 1:
        return make_period(year - 1, 12)
    return make_period(year, month - 1)


def period_of(date_str: str) -> str:
    """Raw calendar month of a date."""
    return date_str[:7]


def period_label(period: str, long: bool = False) -> str:
    """Human-readable label, e.g. 'Mar 2025' or 'March 2025'."""
    year, month = split_period(period)
    names = LONG_MONTH_NAMES if long else SHORT_MONTH_NAMES
    return f"{names[month - 1]} {year}"


def add_days(date_str: str, days: int) -> str:
    start = datetime.strptime(date_str, DATE_FORMAT)
    return (start + timedelta(days=days)).strftime(DATE_FORMAT)


def current_period(today: date | None = None) -> str:
    """Calendar period of today's date. Only the HTTP layer reads the clock."""
    today = today or date.today()
    return make_period(today.year, today.month)


def current_date(today: date | None = None) -> str:
    today = today or date.today()
    return today.strftime(DATE_FORMAT)
