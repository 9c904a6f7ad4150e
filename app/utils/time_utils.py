# app/utils/time_utils.py
#
# Wall-clock "HH:MM" arithmetic. Times are naive local strings; no
# timezone or calendar date is attached to them.

import enum
import re
from typing import Tuple

from app.utils.errors import ErrorKind, SchedulingError

TIME_PATTERN = re.compile(r'^\d{1,2}:\d{2}$')

MINUTES_PER_DAY = 24 * 60


class TimeOrder(str, enum.Enum):
    BEFORE = "before"
    EQUAL = "equal"
    AFTER = "after"


def parse_time(value: str) -> Tuple[int, int]:
    """Parse "HH:MM" (hour 0-23, minute 0-59) into an (hour, minute) tuple."""
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise SchedulingError(
            ErrorKind.INVALID_TIME_FORMAT,
            f"Invalid time format: {value!r}. Use HH:MM format (e.g., 09:30)"
        )

    hour_str, minute_str = value.split(":")
    hour, minute = int(hour_str), int(minute_str)

    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise SchedulingError(
            ErrorKind.INVALID_TIME_FORMAT,
            f"Invalid time: {value}. Hour must be 0-23 and minute 0-59"
        )
    return hour, minute


def add_minutes(hour: int, minute: int, delta: int) -> Tuple[int, int]:
    """Add ``delta`` minutes and wrap around midnight.

    23:30 + 30 gives (0, 0): the result never reads 24:00 and the
    calendar date is not rolled forward.
    """
    total = (hour * 60 + minute + delta) % MINUTES_PER_DAY
    return divmod(total, 60)


def to_minutes(hour: int, minute: int) -> int:
    return hour * 60 + minute


def from_minutes(total: int) -> Tuple[int, int]:
    return divmod(total % MINUTES_PER_DAY, 60)


def format_time(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def time_to_minutes(value: str) -> int:
    return to_minutes(*parse_time(value))


def compare(first: str, second: str) -> TimeOrder:
    first_minutes = time_to_minutes(first)
    second_minutes = time_to_minutes(second)
    if first_minutes < second_minutes:
        return TimeOrder.BEFORE
    if first_minutes > second_minutes:
        return TimeOrder.AFTER
    return TimeOrder.EQUAL


def compute_end_time(start_time: str, duration_minutes: int) -> str:
    """End time of a slot starting at ``start_time``, wrapped at midnight."""
    hour, minute = parse_time(start_time)
    return format_time(*add_minutes(hour, minute, duration_minutes))


def normalize_time(value: str) -> str:
    """Canonical zero-padded form, so "9:00" and "09:00" match in the store."""
    return format_time(*parse_time(value))
