"""
Date Choice Confirmation Handler
Finishes an action that was paused on an ambiguous date.
"""

import logging
from datetime import datetime

from modules.pending_choices import PendingChoiceStore
from modules.session_context import SessionContext
from services.encounters import EncounterStore
from .schedule import ACTION_EXECUTORS


logger = logging.getLogger(__name__)


def handle_confirm_date_choice(ctx: SessionContext, store: EncounterStore, pending: PendingChoiceStore,
                               choice: str, now: datetime = None):
    """
    Apply the user's A/B answer to the session's pending date question.

    The stored option's datetime is used directly; the original ambiguous
    text is never parsed again. An unknown key keeps the question open.
    """
    pending_choice, option = pending.take(ctx.session_id, choice)
    if pending_choice is None:
        return {
            'success': False,
            'status': 'no_pending_choice',
            'error': 'no pending date choice',
            'message': "There is no date waiting for confirmation (it may have expired). Please provide the date again.",
        }

    if option is None:
        keys = ', '.join(o.key for o in pending_choice.ambiguity.options)
        return {
            'success': False,
            'status': 'invalid_choice',
            'error': f"invalid choice '{choice}'",
            'message': f"'{choice}' is not one of the offered options ({keys}).\n\n"
                       f"{pending_choice.ambiguity.to_user_message()}",
        }

    logger.info("Session %s confirmed option %s (%s) for %s",
                ctx.session_id, option.key, option.iso_date, pending_choice.action)

    executor = ACTION_EXECUTORS[pending_choice.action]
    return executor(store, pending_choice.arguments, option.date_time, now=now)
