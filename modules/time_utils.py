"""
Time Utilities Module
Target timezone handling, time-of-day extraction and display formatting.

All instants handed out by the resolver live in a single fixed civil
timezone (Europe/Berlin, with DST). The zone is looked up once and
shared read-only afterwards.
"""

import logging
import re
from datetime import datetime
from functools import lru_cache
from typing import Optional, Tuple

import pytz


logger = logging.getLogger(__name__)

TARGET_TIMEZONE_NAME = 'Europe/Berlin'

# Appointments without an explicit time start at 09:00
DEFAULT_HOUR = 9
DEFAULT_MINUTE = 0

DAY_PART_HOURS = [
    (re.compile(r'\bmorning\b'), 9),
    (re.compile(r'\bafternoon\b'), 14),
    (re.compile(r'\b(?:noon|midday)\b'), 12),
    (re.compile(r'\bevening\b'), 18),
]

CLOCK_TIME_PATTERN = re.compile(r'(\d{1,2}):(\d{2})')


@lru_cache(maxsize=None)
def get_target_timezone():
    """Load the target timezone once; fall back to UTC if the zone database is missing."""
    try:
        return pytz.timezone(TARGET_TIMEZONE_NAME)
    except pytz.UnknownTimeZoneError:
        logger.warning("Timezone %s unavailable, falling back to UTC", TARGET_TIMEZONE_NAME)
        return pytz.utc


def localize(naive: datetime) -> datetime:
    """
    Attach the target timezone to a naive wall-clock datetime.

    Wall times skipped by a DST jump are moved forward by the jump size,
    repeated wall times resolve to standard time.
    """
    tz = get_target_timezone()
    return tz.normalize(tz.localize(naive, is_dst=False))


def to_target_timezone(value: datetime) -> datetime:
    """Convert an aware datetime into the target timezone."""
    tz = get_target_timezone()
    if value.tzinfo is None:
        return localize(value)
    return value.astimezone(tz)


def is_valid_clock_time(hour: int, minute: int) -> bool:
    return 0 <= hour <= 23 and 0 <= minute <= 59


def extract_time_of_day(text: str) -> Optional[Tuple[int, int]]:
    """
    Extract the time of day from free text.

    An explicit HH:MM wins; otherwise a day-part keyword picks the hour;
    otherwise 09:00. Returns None when the explicit clock time is out of range.
    """
    text_lower = text.lower().strip()

    clock = CLOCK_TIME_PATTERN.search(text_lower)
    if clock:
        hour, minute = int(clock.group(1)), int(clock.group(2))
        if not is_valid_clock_time(hour, minute):
            return None
        return hour, minute

    for pattern, hour in DAY_PART_HOURS:
        if pattern.search(text_lower):
            return hour, 0

    return DEFAULT_HOUR, DEFAULT_MINUTE


def format_datetime_for_display(value: datetime, include_zone: bool = True) -> str:
    """Render e.g. 'Monday, December 2, 2024 at 14:30 CET'."""
    local = to_target_timezone(value)
    text = f"{local:%A, %B} {local.day}, {local:%Y} at {local:%H:%M}"
    if include_zone:
        text += f" {local:%Z}"
    return text
