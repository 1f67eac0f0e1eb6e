"""
Date Resolution Module
Turns clinician-typed date/time text into a single instant in the target timezone.

Matchers are tried from most to least specific and the first hit wins:
offset timestamps, UTC timestamps, local timestamps, date only,
German dotted dates, slash dates (which may be ambiguous) and finally
a small vocabulary of relative phrases.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from dateutil.parser import isoparse

from modules.date_models import AmbiguousDate, DateOption, ParseFailure, ResolvedDateTime
from modules.time_utils import (
    DEFAULT_HOUR,
    DEFAULT_MINUTE,
    extract_time_of_day,
    format_datetime_for_display,
    get_target_timezone,
    is_valid_clock_time,
    localize,
    to_target_timezone,
)


logger = logging.getLogger(__name__)

ResolveOutcome = Union[ResolvedDateTime, AmbiguousDate, ParseFailure]

OFFSET_TIMESTAMP = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,9})?[+-]\d{2}:\d{2}$')
UTC_TIMESTAMP = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,9})?Z$')
SLASH_DATE = re.compile(r'^(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?(?:\s+(\d{1,2}):(\d{2}))?$')
IN_DAYS = re.compile(r'in (\d+) days?')

# Month, day, minute and second must be zero-padded; the hour may be one digit.
LOCAL_TIMESTAMP = re.compile(r'^\d{4}-\d{2}-\d{2}[T ]\d{1,2}:\d{2}(?::\d{2})?$')
DATE_ONLY = re.compile(r'^\d{4}-\d{2}-\d{2}$')
DOTTED_DATE = re.compile(r'^\d{2}\.\d{2}\.\d{4}(?: \d{1,2}:\d{2})?$')

LOCAL_TIMESTAMP_FORMATS = [
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
]
DATE_ONLY_FORMAT = '%Y-%m-%d'
DOTTED_DATETIME_FORMAT = '%d.%m.%Y %H:%M'
DOTTED_DATE_FORMAT = '%d.%m.%Y'

NEXT_WEEKDAY_PHRASES = [
    ('next monday', 0),
    ('next tuesday', 1),
    ('next wednesday', 2),
    ('next thursday', 3),
    ('next friday', 4),
    ('next saturday', 5),
    ('next sunday', 6),
]


def _strptime_any(text: str, formats) -> Optional[datetime]:
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _at_default_time(day: datetime) -> datetime:
    return localize(day.replace(hour=DEFAULT_HOUR, minute=DEFAULT_MINUTE, second=0, microsecond=0))


def resolve_datetime(text: str, reference_now: datetime = None) -> ResolveOutcome:
    """
    Resolve free text into a ResolvedDateTime, AmbiguousDate or ParseFailure.

    Args:
        text: Raw user input, e.g. "15.12.2024 14:30" or "next monday morning"
        reference_now: Anchor for relative phrases and for the default year of
            partial slash dates. Defaults to the current time.

    Returns:
        One of the three outcome types; never raises for bad input.
    """
    original = text or ''
    text = original.strip()
    if not text:
        return ParseFailure("empty datetime string", original)

    if reference_now is None:
        reference_now = datetime.now(get_target_timezone())

    # ---------- 1. OFFSET TIMESTAMP ----------
    if OFFSET_TIMESTAMP.match(text):
        try:
            return _resolved(text, to_target_timezone(isoparse(text)), 'offset')
        except ValueError:
            pass

    # ---------- 2. UTC TIMESTAMP ----------
    if UTC_TIMESTAMP.match(text):
        try:
            return _resolved(text, to_target_timezone(isoparse(text)), 'utc')
        except ValueError:
            pass

    # ---------- 3. LOCAL TIMESTAMP ----------
    if LOCAL_TIMESTAMP.match(text):
        naive = _strptime_any(text, LOCAL_TIMESTAMP_FORMATS)
        if naive is not None:
            return _resolved(text, localize(naive), 'local')

    # ---------- 4. DATE ONLY ----------
    if DATE_ONLY.match(text):
        naive = _strptime_any(text, [DATE_ONLY_FORMAT])
        if naive is not None:
            return _resolved(text, _at_default_time(naive), 'date_only')

    # ---------- 5. GERMAN DOTTED ----------
    if DOTTED_DATE.match(text):
        naive = _strptime_any(text, [DOTTED_DATETIME_FORMAT])
        if naive is not None:
            return _resolved(text, localize(naive), 'dotted')
        naive = _strptime_any(text, [DOTTED_DATE_FORMAT])
        if naive is not None:
            return _resolved(text, _at_default_time(naive), 'dotted')

    # ---------- 6. SLASH (MM/DD vs DD/MM) ----------
    slash = parse_slash_format(text, reference_now)
    if slash is not None:
        if isinstance(slash, ParseFailure):
            logger.debug("Slash date %r rejected: %s", text, slash.message)
        return slash

    # ---------- 7. RELATIVE ----------
    relative = parse_relative_date(text, reference_now)
    if isinstance(relative, ResolvedDateTime):
        return relative

    logger.debug("No matcher accepted %r", text)
    return ParseFailure("unrecognized datetime format", original)


def _resolved(text: str, value: datetime, source: str) -> ResolvedDateTime:
    logger.debug("Resolved %r via %s matcher to %s", text, source, value.isoformat())
    return ResolvedDateTime(value=value, source=source)


def parse_slash_format(text: str, reference_now: datetime) -> Optional[ResolveOutcome]:
    """
    Handle N/N[/YYYY][ HH:MM] dates.

    Returns None when the text is not a slash date at all. Both readings
    valid and distinct gives an AmbiguousDate with A = month/day and
    B = day/month. With a single valid reading, day/month is tried first.
    """
    match = SLASH_DATE.match(text.strip())
    if not match:
        return None

    first, second = int(match.group(1)), int(match.group(2))

    year = to_target_timezone(reference_now).year
    if match.group(3):
        year = int(match.group(3))
        if year < 100:
            year += 2000

    hour, minute = DEFAULT_HOUR, DEFAULT_MINUTE
    if match.group(4):
        hour, minute = int(match.group(4)), int(match.group(5))
    if not is_valid_clock_time(hour, minute):
        return ParseFailure(f"invalid time component: {hour:02d}:{minute:02d}", text)

    first_is_month = 1 <= first <= 12
    second_is_month = 1 <= second <= 12
    first_is_day = 1 <= first <= 31
    second_is_day = 1 <= second <= 31

    try:
        if first_is_month and second_is_day and second_is_month and first_is_day and first != second:
            month_first = localize(datetime(year, first, second, hour, minute))
            day_first = localize(datetime(year, second, first, hour, minute))
            return AmbiguousDate(
                original_input=text,
                options=[
                    _date_option('A', 'MM/DD format', month_first),
                    _date_option('B', 'DD/MM format', day_first),
                ],
            )

        if second_is_month and first_is_day:
            return _resolved(text, localize(datetime(year, second, first, hour, minute)), 'slash')

        if first_is_month and second_is_day:
            return _resolved(text, localize(datetime(year, first, second, hour, minute)), 'slash')
    except ValueError:
        # day out of range for the month, e.g. 31/04
        pass

    return ParseFailure(f"invalid date components: {first}/{second}", text)


def _date_option(key: str, convention: str, value: datetime) -> DateOption:
    return DateOption(
        key=key,
        display_text=f"{convention}: {format_datetime_for_display(value, include_zone=False)}",
        iso_date=value.isoformat(timespec='seconds'),
        date_time=value,
    )


def parse_relative_date(text: str, reference_now: datetime) -> Union[ResolvedDateTime, ParseFailure]:
    """Resolve today / tomorrow / next week / in N days / next <weekday>."""
    text_lower = text.lower().strip()
    today = to_target_timezone(reference_now).date()

    clock = extract_time_of_day(text_lower)
    if clock is None:
        return ParseFailure("invalid time component", text)
    hour, minute = clock

    in_days = IN_DAYS.search(text_lower)
    try:
        if 'today' in text_lower:
            target = today
        elif 'tomorrow' in text_lower:
            target = today + timedelta(days=1)
        elif 'next week' in text_lower:
            target = today + timedelta(days=7)
        elif in_days:
            target = today + timedelta(days=int(in_days.group(1)))
        else:
            target = None
            for phrase, weekday in NEXT_WEEKDAY_PHRASES:
                if phrase in text_lower:
                    target = next_weekday(today, weekday)
                    break
            if target is None:
                return ParseFailure("unrecognized relative date expression", text)
    except OverflowError:
        return ParseFailure("relative date out of range", text)

    return _resolved(text, localize(datetime.combine(target, time(hour, minute))), 'relative')


def next_weekday(today: date, weekday: int) -> date:
    """Next occurrence of weekday strictly after today (Monday=0)."""
    days_ahead = (weekday - today.weekday()) % 7
    if days_ahead <= 0:
        days_ahead += 7
    return today + timedelta(days=days_ahead)
