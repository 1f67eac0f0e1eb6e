"""
DateTime Validation Module
Checks a resolved instant against the scheduling window.
"""

from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from modules.date_models import ValidationResult
from modules.time_utils import get_target_timezone


# Same-day bookings and small clock skew stay acceptable
MAX_PAST_GRACE = timedelta(hours=24)
MAX_FUTURE_YEARS = 2


def validate_datetime(value: datetime, now: datetime = None) -> ValidationResult:
    """
    Validate a resolved datetime against wall-clock now.

    Rejects anything more than 24 hours in the past or more than two years
    ahead. `now` is only meant to be overridden in tests.
    """
    if now is None:
        now = datetime.now(get_target_timezone())

    if value < now - MAX_PAST_GRACE:
        return ValidationResult(
            accepted=False,
            reason=f"datetime is in the past: {value:%Y-%m-%d %H:%M}",
        )

    if value > now + relativedelta(years=MAX_FUTURE_YEARS):
        return ValidationResult(
            accepted=False,
            reason=f"datetime is too far in the future: {value:%Y-%m-%d %H:%M} (max {MAX_FUTURE_YEARS} years ahead)",
        )

    return ValidationResult(accepted=True)
