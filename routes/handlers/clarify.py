"""
Clarification Handlers
Turns datetime outcomes into responses and parks ambiguous dates for confirmation.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from modules.date_models import AmbiguousDate, ParseFailure
from modules.date_utils import resolve_datetime
from modules.pending_choices import PendingChoice, PendingChoiceStore
from modules.session_context import SessionContext
from modules.validation import validate_datetime


logger = logging.getLogger(__name__)


def handle_date_clarification(ambiguity: AmbiguousDate) -> Dict[str, Any]:
    """Response asking the user to pick one of the date readings."""
    return {
        'success': False,
        'status': 'needs_confirmation',
        'original_input': ambiguity.original_input,
        'options': [option.to_dict() for option in ambiguity.options],
        'message': ambiguity.to_user_message(),
    }


def handle_invalid_date(failure: ParseFailure) -> Dict[str, Any]:
    return {
        'success': False,
        'status': 'invalid_datetime',
        'error': failure.message,
        'message': failure.to_user_message(),
    }


def prepare_datetime(ctx: SessionContext, pending: PendingChoiceStore, action: str,
                     arguments: Dict[str, Any], datetime_text: str,
                     reference_now: datetime = None) -> Tuple[Optional[datetime], Optional[Dict[str, Any]]]:
    """
    Resolve the datetime argument of an action.

    Returns (value, None) when the text resolved to a single instant,
    otherwise (None, response). An ambiguous date is stored as the session's
    pending choice so a later confirmation can finish the action.
    """
    outcome = resolve_datetime(datetime_text, reference_now)

    if isinstance(outcome, AmbiguousDate):
        pending.put(ctx.session_id, PendingChoice(action=action, ambiguity=outcome, arguments=arguments))
        logger.info("Session %s: ambiguous date %r for %s, awaiting choice",
                    ctx.session_id, outcome.original_input, action)
        return None, handle_date_clarification(outcome)

    if isinstance(outcome, ParseFailure):
        return None, handle_invalid_date(outcome)

    return outcome.value, None


def check_scheduling_window(value: datetime, now: datetime = None) -> Optional[Dict[str, Any]]:
    """Return a rejection response when the instant is outside the allowed window."""
    result = validate_datetime(value, now=now)
    if result.accepted:
        return None
    return {
        'success': False,
        'status': 'rejected_datetime',
        'error': result.reason,
        'message': f"The requested date/time cannot be used: {result.reason}. Please provide a different date/time.",
    }
