"""Wire-value coercions shared by normalization and form handling.

Each coercion accepts the encodings the boundary is known to send and
raises MalformedRecord for anything else. None of them guess.
"""
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import pytz

from londonpark.errors import MalformedRecord
from londonpark.models.booking import SeatType

_DIGITS = re.compile(r"^\d+$")
_TRUE_FALSE = {"1": True, "0": False}


def coerce_bool(value: Any, field: str = "value") -> bool:
    """Accept True/False, 1/0 and "1"/"0"; reject everything else."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return value == 1
    if isinstance(value, str) and value.strip() in _TRUE_FALSE:
        return _TRUE_FALSE[value.strip()]
    raise MalformedRecord(field, value, "not a recognised boolean encoding")


def coerce_id(value: Any, field: str = "id") -> int:
    """Accept a positive integer or a string of digits."""
    if isinstance(value, bool):
        raise MalformedRecord(field, value, "boolean is not an identifier")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and _DIGITS.match(value.strip()):
        number = int(value.strip())
    else:
        raise MalformedRecord(field, value, "not a numeric identifier")
    if number <= 0:
        raise MalformedRecord(field, value, "identifier must be positive")
    return number


def coerce_quantity(value: Any, field: str = "quantity") -> int:
    return coerce_id(value, field)


def coerce_text(value: Any, field: str = "value") -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    raise MalformedRecord(field, value, "not text")


def coerce_price(value: Any, field: str = "price") -> Decimal:
    """Accept a non-negative number or numeric string."""
    if isinstance(value, bool):
        raise MalformedRecord(field, value, "boolean is not a price")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise MalformedRecord(field, value, "not a number")
    else:
        raise MalformedRecord(field, value, "not a number")
    if not amount.is_finite() or amount < 0:
        raise MalformedRecord(field, value, "price must be a non-negative number")
    return amount


def coerce_seat_type(value: Any, field: str = "seat_type") -> SeatType:
    if isinstance(value, SeatType):
        return value
    if isinstance(value, str):
        try:
            return SeatType(value.strip())
        except ValueError:
            pass
    raise MalformedRecord(field, value, "unknown seat type")


def coerce_timestamp(value: Any, field: str = "booked_at", tz_name: str = "UTC") -> datetime:
    """Parse ISO-8601 / SQL datetime text or a unix epoch.

    Naive values are interpreted in ``tz_name`` (the boundary's zone).
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise MalformedRecord(field, value, "timestamp out of range")
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise MalformedRecord(field, value, "unrecognised timestamp")
    else:
        raise MalformedRecord(field, value, "unrecognised timestamp")

    if parsed.tzinfo is None:
        parsed = pytz.timezone(tz_name).localize(parsed)
    return parsed
