"""
Strict timestamp parsing for import formats.

Each source format writes timestamps in one fixed layout; anything else is
rejected instead of guessed. Results are naive datetimes in UTC, the way
time entries are stored.
"""
import re
from datetime import datetime, timezone, tzinfo
from typing import Optional

from timeport.domain.imports.exceptions import ParseError

ISO_UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
LOCAL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# 1/2/2024 3:04 PM or 01/02/2024 03:04:05 PM
_SLASH_DATETIME_PATTERN = re.compile(
    r"^([0-9]{1,2})/([0-9]{1,2})/([0-9]{4}) ([0-9]{1,2}):([0-9]{1,2})(:[0-9]{1,2})? (AM|PM)$"
)


def to_utc_naive(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_utc(value: str, *, field: str, line_number: Optional[int] = None) -> datetime:
    """Parse ``YYYY-MM-DDTHH:MM:SSZ``."""
    try:
        parsed = datetime.strptime(value, ISO_UTC_FORMAT)
    except (TypeError, ValueError) as exc:
        raise ParseError(f'Value of {field} ("{value}") is invalid', line_number) from exc
    return parsed


def parse_local_datetime(
    date_value: str,
    time_value: str,
    zone: tzinfo,
    *,
    field: str,
    line_number: Optional[int] = None,
) -> datetime:
    """Parse ``YYYY-MM-DD`` + ``HH:MM:SS`` given in ``zone`` and convert to UTC."""
    try:
        parsed = datetime.strptime(f"{date_value} {time_value}", LOCAL_DATETIME_FORMAT)
    except (TypeError, ValueError) as exc:
        raise ParseError(
            f'{field} date ("{date_value}") or time ("{time_value}") are invalid', line_number
        ) from exc
    return to_utc_naive(parsed.replace(tzinfo=zone))


def parse_slash_datetime(
    date_value: str,
    time_value: str,
    zone: tzinfo,
    *,
    field: str,
    day_first: bool = False,
    line_number: Optional[int] = None,
) -> datetime:
    """
    Parse ``MM/DD/YYYY`` (or ``DD/MM/YYYY``) with a 12-hour clock time.

    A month component above 12 means the export used the other day/month
    order; that is reported with a hint instead of silently swapping.
    """
    text_value = f"{date_value} {time_value}"
    match = _SLASH_DATETIME_PATTERN.match(text_value)
    if match is None:
        raise ParseError(f'{field} date ("{date_value}") or time ("{time_value}") are invalid', line_number)

    first, second, year, hour, minute, seconds, meridiem = match.groups()
    month, day = (int(second), int(first)) if day_first else (int(first), int(second))
    if month > 12:
        raise ParseError(
            f'{field} date ("{date_value}") is invalid, please select the correct date format before exporting',
            line_number,
        )

    hour_value = int(hour)
    if not 1 <= hour_value <= 12:
        raise ParseError(f'{field} time ("{time_value}") is invalid', line_number)
    if meridiem == "AM":
        hour_value = 0 if hour_value == 12 else hour_value
    else:
        hour_value = 12 if hour_value == 12 else hour_value + 12

    try:
        parsed = datetime(
            int(year),
            month,
            day,
            hour_value,
            int(minute),
            int(seconds[1:]) if seconds else 0,
            tzinfo=zone,
        )
    except ValueError as exc:
        raise ParseError(f'{field} date ("{date_value}") or time ("{time_value}") are invalid', line_number) from exc
    return to_utc_naive(parsed)
