"""
Scheduling Handlers
Appointment scheduling, cancellation and observation recording.
"""

from datetime import datetime

from modules.pending_choices import PendingChoiceStore
from modules.session_context import SessionContext
from modules.time_utils import format_datetime_for_display
from services.encounters import EncounterStore, RecordNotFoundError
from .clarify import check_scheduling_window, prepare_datetime


SCHEDULE_APPOINTMENT = 'schedule_appointment'
RECORD_OBSERVATION = 'record_observation'


def _error(message, status='error'):
    return {'success': False, 'status': status, 'error': message, 'message': message}


def handle_schedule_appointment(ctx: SessionContext, store: EncounterStore, pending: PendingChoiceStore,
                                datetime_text: str, patient_id: str = None, practitioner_id: str = None,
                                appointment_type: str = None, reference_now: datetime = None,
                                now: datetime = None):
    """
    Schedule an appointment from a free-text date/time.

    Patient and practitioner fall back to the session context. An ambiguous
    date returns a confirmation question instead of creating anything.
    """
    patient_id = ctx.resolve_patient_id(patient_id)
    practitioner_id = ctx.resolve_practitioner_id(practitioner_id)

    if not patient_id:
        return _error("patient ID is required (no patient ID provided and none set in context)")
    if not practitioner_id:
        return _error("practitioner ID is required (no practitioner ID provided and none set in context)")
    if not store.patient_exists(patient_id):
        return _error(f"patient not found: {patient_id}", status='not_found')
    if not store.practitioner_exists(practitioner_id):
        return _error(f"practitioner not found: {practitioner_id}", status='not_found')

    arguments = {
        'patient_id': patient_id,
        'practitioner_id': practitioner_id,
        'appointment_type': appointment_type,
    }
    value, response = prepare_datetime(ctx, pending, SCHEDULE_APPOINTMENT, arguments, datetime_text, reference_now)
    if response is not None:
        return response

    return execute_schedule_appointment(store, arguments, value, now=now)


def execute_schedule_appointment(store: EncounterStore, arguments, value: datetime, now: datetime = None):
    """Validate the instant and create the encounter."""
    rejection = check_scheduling_window(value, now=now)
    if rejection is not None:
        return rejection

    try:
        encounter = store.create_encounter(
            arguments['patient_id'],
            arguments['practitioner_id'],
            value.isoformat(timespec='seconds'),
            arguments.get('appointment_type'),
        )
    except RecordNotFoundError as e:
        return _error(str(e), status='not_found')

    message = (
        "Successfully scheduled appointment:\n\n"
        f"Appointment ID: {encounter['id']}\n"
        f"Patient ID: {encounter['patient_id']}\n"
        f"Practitioner ID: {encounter['practitioner_id']}\n"
        f"Date/Time: {format_datetime_for_display(value)}\n"
        f"Type: {encounter['type_display']}\n"
        "Status: Scheduled"
    )
    return {'success': True, 'status': 'scheduled', 'encounter': encounter, 'message': message}


def handle_cancel_appointment(store: EncounterStore, encounter_id: str):
    try:
        encounter = store.get_encounter(encounter_id)
        if encounter['status'] == 'cancelled':
            return {'success': True, 'status': 'cancelled', 'encounter': encounter,
                    'message': f"Appointment {encounter_id} is already cancelled"}
        encounter = store.cancel_encounter(encounter_id)
    except RecordNotFoundError:
        return _error(f"appointment not found: {encounter_id}", status='not_found')

    return {'success': True, 'status': 'cancelled', 'encounter': encounter,
            'message': f"Appointment {encounter_id} has been cancelled"}


def handle_record_observation(ctx: SessionContext, store: EncounterStore, pending: PendingChoiceStore,
                              datetime_text: str, code: str, patient_id: str = None, display: str = '',
                              value_quantity: float = None, value_unit: str = '', value_string: str = '',
                              reference_now: datetime = None, now: datetime = None):
    """Record an observation whose effective time is given as free text."""
    patient_id = ctx.resolve_patient_id(patient_id)
    if not patient_id:
        return _error("patient ID is required (no patient ID provided and none set in context)")
    if not code:
        return _error("observation code is required")
    if not store.patient_exists(patient_id):
        return _error(f"patient not found: {patient_id}", status='not_found')

    arguments = {
        'patient_id': patient_id,
        'code': code,
        'display': display,
        'value_quantity': value_quantity,
        'value_unit': value_unit,
        'value_string': value_string,
    }
    value, response = prepare_datetime(ctx, pending, RECORD_OBSERVATION, arguments, datetime_text, reference_now)
    if response is not None:
        return response

    return execute_record_observation(store, arguments, value, now=now)


def execute_record_observation(store: EncounterStore, arguments, value: datetime, now: datetime = None):
    rejection = check_scheduling_window(value, now=now)
    if rejection is not None:
        return rejection

    try:
        observation = store.create_observation(
            arguments['patient_id'],
            arguments['code'],
            value.isoformat(timespec='seconds'),
            display=arguments.get('display') or '',
            value_quantity=arguments.get('value_quantity'),
            value_unit=arguments.get('value_unit') or '',
            value_string=arguments.get('value_string') or '',
        )
    except RecordNotFoundError as e:
        return _error(str(e), status='not_found')

    return {
        'success': True,
        'status': 'recorded',
        'observation': observation,
        'message': f"Recorded observation {observation['code']} at {format_datetime_for_display(value)}",
    }


ACTION_EXECUTORS = {
    SCHEDULE_APPOINTMENT: execute_schedule_appointment,
    RECORD_OBSERVATION: execute_record_observation,
}
