"""
Handlers Package
Contains handlers for scheduling operations.
"""

from .clarify import (
    handle_date_clarification,
    handle_invalid_date,
    prepare_datetime,
    check_scheduling_window,
)
from .schedule import (
    handle_schedule_appointment,
    handle_cancel_appointment,
    handle_record_observation,
)
from .confirm import handle_confirm_date_choice
from .context import handle_set_context, handle_get_context, handle_clear_context

__all__ = [
    'handle_date_clarification',
    'handle_invalid_date',
    'prepare_datetime',
    'check_scheduling_window',
    'handle_schedule_appointment',
    'handle_cancel_appointment',
    'handle_record_observation',
    'handle_confirm_date_choice',
    'handle_set_context',
    'handle_get_context',
    'handle_clear_context',
]
