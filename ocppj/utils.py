"""
Utility functions for OCPP timestamps and message ids.
"""

import random
import re
from datetime import datetime, timedelta, timezone

from ocppj import config

RFC3339 = "%Y-%m-%dT%H:%M:%SZ"

_date_time_format = config.DATE_TIME_FORMAT

_TIMESTAMP_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|z|[+-]\d{2}:?\d{2})?$"
)


def set_date_time_format(fmt):
    """
    Set the process-wide format used when marshaling timestamps.

    Args:
        fmt: strftime format string. An empty string selects ISO 8601 with
            microseconds and a Z suffix.
    """
    global _date_time_format
    _date_time_format = fmt


def get_date_time_format():
    return _date_time_format


def utc_now():
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_ocpp_timestamp(value):
    """
    Format a datetime for an OCPP payload.

    Naive datetimes are taken as UTC. The value is converted to UTC before
    applying the configured format.

    Args:
        value: datetime to format

    Returns:
        str: formatted timestamp
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    if not _date_time_format:
        return value.isoformat().replace("+00:00", "Z")
    return value.strftime(_date_time_format)


def parse_ocpp_timestamp(timestamp_str):
    """
    Parse an OCPP timestamp string to a timezone-aware datetime.

    Accepts RFC 3339 with or without fractional seconds, with or without a
    timezone offset (absent means UTC) and with or without a colon inside the
    offset. A JSON null (None) parses to None.

    Args:
        timestamp_str: ISO timestamp string from an OCPP message

    Returns:
        datetime: timezone-aware datetime, or None

    Raises:
        ValueError: if the string has any other shape
    """
    if timestamp_str is None:
        return None
    if not isinstance(timestamp_str, str):
        raise ValueError(f"invalid timestamp {timestamp_str!r}, expected string")
    match = _TIMESTAMP_PATTERN.match(timestamp_str)
    if match is None:
        raise ValueError(f"invalid timestamp {timestamp_str!r}")

    fraction = match.group("fraction") or "0"
    microseconds = int(fraction[:6].ljust(6, "0"))
    tz = _parse_offset(match.group("offset"))
    parsed = datetime.strptime(
        f"{match.group('date')}T{match.group('time')}", "%Y-%m-%dT%H:%M:%S"
    )
    return parsed.replace(microsecond=microseconds, tzinfo=tz)


def _parse_offset(offset):
    if offset is None or offset in ("Z", "z"):
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    digits = offset[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if hours > 23 or minutes > 59:
        raise ValueError(f"invalid timezone offset {offset!r}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def default_message_id():
    """Random unsigned 32-bit integer rendered as a decimal string."""
    return str(random.getrandbits(32))
