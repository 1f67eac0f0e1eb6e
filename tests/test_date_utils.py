"""
Tests for datetime resolution.

All relative expressions are anchored to Saturday 2024-11-30.
"""

from datetime import date, datetime, timezone

import pytest

from modules.date_models import AmbiguousDate, ParseFailure, ResolvedDateTime
from modules.date_utils import next_weekday, parse_relative_date, parse_slash_format, resolve_datetime
from modules.time_utils import get_target_timezone


def _fields(value):
    local = value.astimezone(get_target_timezone())
    return local.year, local.month, local.day, local.hour, local.minute


def _resolve(text, reference_now):
    outcome = resolve_datetime(text, reference_now)
    assert isinstance(outcome, ResolvedDateTime), outcome
    return outcome


@pytest.mark.parametrize("text,expected,source", [
    ("2024-12-01T14:30:00+01:00", (2024, 12, 1, 14, 30), 'offset'),
    ("2024-07-01T12:00:00+00:00", (2024, 7, 1, 14, 0), 'offset'),
    ("2024-12-01T08:30:00.250-05:00", (2024, 12, 1, 14, 30), 'offset'),
    ("2024-12-01T13:30:00Z", (2024, 12, 1, 14, 30), 'utc'),
    ("2024-12-01T13:30:00.123Z", (2024, 12, 1, 14, 30), 'utc'),
    ("2024-12-15T09:00:00", (2024, 12, 15, 9, 0), 'local'),
    ("2024-12-15T09:45", (2024, 12, 15, 9, 45), 'local'),
    ("2024-12-25 18:30", (2024, 12, 25, 18, 30), 'local'),
    ("2024-12-25 18:30:15", (2024, 12, 25, 18, 30), 'local'),
    ("2024-12-01", (2024, 12, 1, 9, 0), 'date_only'),
    ("15.12.2024 14:30", (2024, 12, 15, 14, 30), 'dotted'),
    ("25.12.2024", (2024, 12, 25, 9, 0), 'dotted'),
    ("25/12/2024", (2024, 12, 25, 9, 0), 'slash'),
    ("12/25/2024", (2024, 12, 25, 9, 0), 'slash'),
    ("25/12/2024 14:30", (2024, 12, 25, 14, 30), 'slash'),
    ("  2024-12-01  ", (2024, 12, 1, 9, 0), 'date_only'),
])
def test_resolves_unambiguous_formats(text, expected, source, reference_now):
    outcome = _resolve(text, reference_now)
    assert _fields(outcome.value) == expected
    assert outcome.source == source


def test_resolved_value_is_in_target_timezone(reference_now):
    outcome = _resolve("2024-12-01T13:30:00Z", reference_now)
    assert outcome.value.tzinfo is not None
    assert outcome.value.tzinfo.zone == 'Europe/Berlin'
    assert outcome.iso == "2024-12-01T14:30:00+01:00"


def test_summer_dates_use_daylight_saving_offset(reference_now):
    outcome = _resolve("2024-07-15", reference_now)
    assert outcome.iso == "2024-07-15T09:00:00+02:00"


def test_wall_time_skipped_by_dst_moves_forward(reference_now):
    outcome = _resolve("2024-03-31 02:30", reference_now)
    assert _fields(outcome.value) == (2024, 3, 31, 3, 30)


def test_dotted_format_is_always_day_first(reference_now):
    outcome = _resolve("06.12.2024", reference_now)
    assert _fields(outcome.value) == (2024, 12, 6, 9, 0)


def test_ambiguous_slash_date_offers_both_readings(reference_now):
    outcome = resolve_datetime("06/12/2024", reference_now)

    assert isinstance(outcome, AmbiguousDate)
    assert outcome.original_input == "06/12/2024"
    assert [o.key for o in outcome.options] == ['A', 'B']

    month_first, day_first = outcome.options
    assert _fields(month_first.date_time) == (2024, 6, 12, 9, 0)
    assert _fields(day_first.date_time) == (2024, 12, 6, 9, 0)
    assert month_first.display_text == "MM/DD format: Wednesday, June 12, 2024 at 09:00"
    assert day_first.display_text == "DD/MM format: Friday, December 6, 2024 at 09:00"
    assert month_first.iso_date == "2024-06-12T09:00:00+02:00"
    assert day_first.iso_date == "2024-12-06T09:00:00+01:00"


def test_ambiguous_option_order_is_reproducible(reference_now):
    first = resolve_datetime("03/04/2025 10:15", reference_now)
    second = resolve_datetime("03/04/2025 10:15", reference_now)
    assert first == second
    assert [_fields(o.date_time) for o in first.options] == [(2025, 3, 4, 10, 15), (2025, 4, 3, 10, 15)]


def test_equal_slash_components_are_not_ambiguous(reference_now):
    outcome = _resolve("07/07/2024", reference_now)
    assert _fields(outcome.value) == (2024, 7, 7, 9, 0)


def test_slash_date_without_year_uses_reference_year(reference_now):
    outcome = _resolve("25/12", reference_now)
    assert _fields(outcome.value) == (2024, 12, 25, 9, 0)


def test_two_digit_year_is_promoted(reference_now):
    outcome = _resolve("25/12/25", reference_now)
    assert _fields(outcome.value) == (2025, 12, 25, 9, 0)


@pytest.mark.parametrize("text", ["99/99/2024", "31/04/2024", "02/30/2024", "0/5/2024"])
def test_invalid_slash_dates_fail(text, reference_now):
    outcome = resolve_datetime(text, reference_now)
    assert isinstance(outcome, ParseFailure)
    assert "invalid date components" in outcome.message


def test_out_of_range_slash_time_is_a_failure(reference_now):
    outcome = parse_slash_format("25/12/2024 25:00", reference_now)
    assert isinstance(outcome, ParseFailure)
    assert "invalid time component" in outcome.message


def test_parse_slash_format_ignores_other_text(reference_now):
    assert parse_slash_format("tomorrow", reference_now) is None


@pytest.mark.parametrize("text", ["", "   ", "not-a-date", "99/99/2024", "2024-13-45"])
def test_unparseable_inputs_fail(text, reference_now):
    assert isinstance(resolve_datetime(text, reference_now), ParseFailure)


def test_empty_input_message(reference_now):
    outcome = resolve_datetime("   ", reference_now)
    assert outcome.message == "empty datetime string"


def test_failure_message_lists_supported_formats(reference_now):
    outcome = resolve_datetime("not-a-date", reference_now)
    message = outcome.to_user_message()
    assert "not-a-date" in message
    assert "01.12.2024 14:00" in message
    assert "tomorrow" in message


@pytest.mark.parametrize("text,expected", [
    ("tomorrow", (2024, 12, 1, 9, 0)),
    ("tomorrow at 14:30", (2024, 12, 1, 14, 30)),
    ("Tomorrow Noon", (2024, 12, 1, 12, 0)),
    ("today afternoon", (2024, 11, 30, 14, 0)),
    ("today in the evening", (2024, 11, 30, 18, 0)),
    ("next week", (2024, 12, 7, 9, 0)),
    ("in 3 days", (2024, 12, 3, 9, 0)),
    ("in 1 day at 08:15", (2024, 12, 1, 8, 15)),
    ("next monday", (2024, 12, 2, 9, 0)),
    ("next Friday morning", (2024, 12, 6, 9, 0)),
    ("next saturday", (2024, 12, 7, 9, 0)),
    ("next sunday at midday", (2024, 12, 1, 12, 0)),
])
def test_relative_expressions(text, expected, reference_now):
    outcome = _resolve(text, reference_now)
    assert _fields(outcome.value) == expected
    assert outcome.source == 'relative'


def test_relative_dates_use_target_timezone_calendar():
    # 23:30 UTC on Nov 30 is already Dec 1 in Berlin
    reference = datetime(2024, 11, 30, 23, 30, tzinfo=timezone.utc)
    outcome = _resolve("today", reference)
    assert _fields(outcome.value)[:3] == (2024, 12, 1)


def test_unrecognized_relative_expression(reference_now):
    outcome = parse_relative_date("some random text", reference_now)
    assert isinstance(outcome, ParseFailure)
    assert outcome.message == "unrecognized relative date expression"


def test_relative_expression_with_invalid_clock_time(reference_now):
    assert isinstance(parse_relative_date("tomorrow at 25:00", reference_now), ParseFailure)


def test_next_weekday_never_returns_today():
    saturday = date(2024, 11, 30)
    assert next_weekday(saturday, 5) == date(2024, 12, 7)
    assert next_weekday(saturday, 0) == date(2024, 12, 2)
    assert next_weekday(saturday, 6) == date(2024, 12, 1)


def test_resolution_is_deterministic(reference_now):
    texts = ["2024-12-01T14:30:00+01:00", "2024-12-01T13:30:00Z", "2024-12-25 18:30", "tomorrow"]
    for text in texts:
        assert resolve_datetime(text, reference_now) == resolve_datetime(text, reference_now)


@pytest.mark.parametrize("text,fmt", [
    ("2024-12-25 18:30", '%Y-%m-%d %H:%M'),
    ("2024-12-15T09:45", '%Y-%m-%dT%H:%M'),
    ("15.12.2024 14:30", '%d.%m.%Y %H:%M'),
])
def test_formatted_value_resolves_back_to_same_instant(text, fmt, reference_now):
    first = _resolve(text, reference_now)
    again = _resolve(first.value.strftime(fmt), reference_now)
    assert again.value == first.value


def test_iso_output_resolves_back_to_same_instant(reference_now):
    first = _resolve("next monday at 10:30", reference_now)
    again = _resolve(first.iso, reference_now)
    assert again.value == first.value
    assert again.source == 'offset'


@pytest.mark.parametrize("text", ["2024-1-5 9:5", "2024-1-5", "2024-12-5T10:00", "1.2.2024", "15.12.2024 14:5"])
def test_unpadded_numeric_formats_fail(text, reference_now):
    assert isinstance(resolve_datetime(text, reference_now), ParseFailure)


def test_single_digit_hour_is_accepted(reference_now):
    outcome = _resolve("2024-12-25 9:30", reference_now)
    assert _fields(outcome.value) == (2024, 12, 25, 9, 30)
    assert outcome.source == 'local'
