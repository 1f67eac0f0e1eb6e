from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from modules.time_utils import get_target_timezone, localize
from modules.validation import validate_datetime


NOW = localize(datetime(2025, 1, 15, 12, 0))


def test_thirty_days_ago_is_rejected():
    result = validate_datetime(NOW - timedelta(days=30), now=NOW)
    assert not result.accepted
    assert result.reason.startswith("datetime is in the past")


def test_within_grace_window_is_accepted():
    assert validate_datetime(NOW - timedelta(hours=23), now=NOW).accepted


def test_just_past_grace_window_is_rejected():
    assert not validate_datetime(NOW - timedelta(hours=24, minutes=1), now=NOW).accepted


def test_three_years_ahead_is_rejected():
    result = validate_datetime(NOW + relativedelta(years=3), now=NOW)
    assert not result.accepted
    assert "too far in the future" in result.reason


def test_one_year_ahead_is_accepted():
    result = validate_datetime(NOW + relativedelta(years=1), now=NOW)
    assert result.accepted
    assert result.reason is None


def test_defaults_to_wall_clock():
    tz = get_target_timezone()
    assert validate_datetime(datetime.now(tz) + timedelta(days=30)).accepted
    assert not validate_datetime(datetime.now(tz) - timedelta(days=2)).accepted
