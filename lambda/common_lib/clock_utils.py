"""
Time helpers shared by validation, record construction and error reporting
"""

from datetime import datetime
from email.utils import parsedate_to_datetime
from zoneinfo import ZoneInfo

UTC = ZoneInfo('UTC')

# Layouts tried after ISO-8601 parsing fails
FALLBACK_FORMATS = [
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y/%m/%d %H:%M:%S',
    '%Y/%m/%d %H:%M',
    '%m/%d/%Y %H:%M:%S',
    '%m/%d/%Y %H:%M',
    '%B %d, %Y %H:%M:%S',
    '%B %d, %Y %H:%M',
]


def utc_now():
    return datetime.now(UTC)


def format_timestamp(dt):
    """Format a datetime as ISO-8601 UTC with millisecond precision, e.g. 2025-04-20T15:30:00.000Z"""
    if dt.tzinfo is not None:
        dt = dt.astimezone(UTC)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{dt.microsecond // 1000:03d}Z"


def utc_timestamp():
    return format_timestamp(utc_now())


def parse_timestamp(value):
    """
    Parse an appointment time string

    Args:
        value (str): Timestamp in ISO-8601 or one of the fallback layouts

    Returns:
        datetime: Parsed value, or None if the string cannot be parsed
    """
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    iso_text = text[:-1] + '+00:00' if text[-1] in ('Z', 'z') else text
    try:
        return datetime.fromisoformat(iso_text)
    except ValueError:
        pass

    for date_format in FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, date_format)
        except ValueError:
            continue

    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
