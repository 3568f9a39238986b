"""
Lenient value parsing for backend records.

The backend stores money as text and timestamps in several shapes.
A single malformed record must never abort a statement, so these
helpers recover instead of raising: numbers fall back to zero and
dates fall back to None (the caller decides what "unknown" means).
"""

import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Amounts beyond this are treated as corrupt and read as zero
MAX_AMOUNT = Decimal("1e15")

# Epoch values above this are milliseconds, below are seconds
_EPOCH_MS_THRESHOLD = 10**11

# Numeric date strings shorter than this are not epochs (e.g. "2024")
_EPOCH_MIN_DIGITS = 9

# Leading numeric prefix, so "1500.50 PKR" reads as 1500.50
_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_amount(value) -> Decimal:
    """
    Parse a monetary value, returning Decimal("0") when it is unusable.

    Accepts Decimal, int, float and numeric strings. None, booleans,
    non-numeric text, NaN, infinities and anything larger in magnitude
    than MAX_AMOUNT all become zero.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return ZERO
        try:
            result = Decimal(match.group(1))
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not result.is_finite() or abs(result) > MAX_AMOUNT:
        return ZERO
    return result


def parse_datetime(value) -> datetime | None:
    """
    Parse a timestamp into an aware UTC datetime.

    Accepts datetime, date, ISO-8601 strings and epoch numbers
    (seconds or milliseconds). A bare four-digit string is a year; other
    short numeric strings are rejected. Naive values are taken as UTC.
    Returns None when the value is missing or unparsable.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        return _from_epoch(value)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if re.fullmatch(r"\d{4}", text):
            return _year_start(int(text))
        if _NUMERIC_PREFIX.fullmatch(text):
            if len(text.lstrip("+-").split(".")[0]) < _EPOCH_MIN_DIGITS:
                return None
            return _from_epoch(float(text))
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _as_utc(datetime.fromisoformat(text))
        except ValueError:
            return None

    return None


def round_money(value: Decimal) -> Decimal:
    """Round to two decimal places for display."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _year_start(year: int) -> datetime | None:
    if year < 1:
        return None
    return datetime(year, 1, 1, tzinfo=timezone.utc)


def _from_epoch(value: float) -> datetime | None:
    if value != value:  # NaN
        return None
    if abs(value) > _EPOCH_MS_THRESHOLD:
        value = value / 1000
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
