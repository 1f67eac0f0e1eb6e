"""
Scheduling Routes
JSON API for datetime resolution, session context, appointments and observations.

Routes:
- /api/datetime/resolve - Resolve free-text date/time
- /api/datetime/validate - Check an ISO datetime against the scheduling window
- /api/context - Set / show / clear session defaults
- /api/appointments - Schedule an appointment
- /api/appointments/confirm - Answer an ambiguous date question
- /api/appointments/<encounter_id>/cancel - Cancel an appointment
- /api/observations - Record an observation
"""

from flask import Blueprint, abort, current_app, jsonify, request
from dateutil.parser import isoparse

from modules.date_models import ResolvedDateTime
from modules.date_utils import resolve_datetime
from modules.time_utils import format_datetime_for_display, to_target_timezone
from modules.validation import validate_datetime
from .handlers import (
    handle_schedule_appointment,
    handle_confirm_date_choice,
    handle_cancel_appointment,
    handle_record_observation,
    handle_set_context,
    handle_get_context,
    handle_clear_context,
)


scheduling_bp = Blueprint('scheduling', __name__)

STATUS_CODES = {
    'scheduled': 201,
    'recorded': 201,
    'needs_confirmation': 200,
    'invalid_datetime': 400,
    'invalid_choice': 400,
    'no_pending_choice': 409,
    'rejected_datetime': 422,
    'not_found': 404,
    'error': 400,
}


def _services():
    return current_app.extensions['scheduling']


def _request_data():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        abort(400, description='request body must be a JSON object')
    return data


def _text_field(data, name, default=None):
    """Read an optional string field; anything else is a 400."""
    value = data.get(name, default)
    if value is not None and not isinstance(value, str):
        abort(400, description=f'{name} must be a string')
    return value


def _number_field(data, name):
    value = data.get(name)
    if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
        abort(400, description=f'{name} must be a number')
    return value


def _session(data, create=False):
    """
    Context for the request's session_id (or X-Session-ID header).

    Only create=True registers a new context; expired sessions and
    pending choices are purged on every call.
    """
    services = _services()
    services['pending'].purge_expired()
    session_id = _text_field(data, 'session_id') or request.headers.get('X-Session-ID')
    if create:
        return services['sessions'].get_or_create(session_id)
    return services['sessions'].lookup(session_id)


def _respond(result, ctx=None):
    if ctx is not None:
        result['session_id'] = ctx.session_id
    code = STATUS_CODES.get(result.get('status'), 200 if result.get('success') else 400)
    return jsonify(result), code


def _parse_iso(value):
    """Parse an ISO string into an aware datetime in the target timezone, or None."""
    if not value:
        return None
    if not isinstance(value, str):
        raise ValueError(f"not an ISO-8601 string: {value!r}")
    return to_target_timezone(isoparse(value))


# =============================================================================
# Datetime API
# =============================================================================

@scheduling_bp.route('/api/datetime/resolve', methods=['POST'])
def api_resolve_datetime():
    """Resolve a free-text datetime without side effects."""
    data = _request_data()
    text = _text_field(data, 'input')
    if text is None:
        return jsonify({'success': False, 'error': 'input is required'}), 400

    try:
        reference_now = _parse_iso(data.get('reference_now'))
    except ValueError:
        return jsonify({'success': False, 'error': 'reference_now must be an ISO-8601 datetime'}), 400

    outcome = resolve_datetime(text, reference_now)
    payload = outcome.to_dict()
    if isinstance(outcome, ResolvedDateTime):
        payload['display'] = format_datetime_for_display(outcome.value)
        return jsonify(payload), 200
    if payload['status'] == 'ambiguous':
        return jsonify(payload), 200
    return jsonify(payload), 400


@scheduling_bp.route('/api/datetime/validate', methods=['POST'])
def api_validate_datetime():
    data = _request_data()
    try:
        value = _parse_iso(data.get('datetime'))
    except ValueError:
        value = None
    if value is None:
        return jsonify({'success': False, 'error': 'datetime must be an ISO-8601 datetime'}), 400

    result = validate_datetime(value)
    return jsonify({'success': True, 'datetime': value.isoformat(timespec='seconds'), **result.to_dict()}), 200


# =============================================================================
# Context API
# =============================================================================

@scheduling_bp.route('/api/context', methods=['POST'])
def api_set_context():
    data = _request_data()
    patient_id = _text_field(data, 'patient_id')
    practitioner_id = _text_field(data, 'practitioner_id')
    ctx = _session(data, create=True)
    result = handle_set_context(ctx, _services()['store'], patient_id, practitioner_id)
    return _respond(result, ctx)


@scheduling_bp.route('/api/context', methods=['GET'])
def api_get_context():
    ctx = _session(request.args)
    return _respond(handle_get_context(ctx), ctx)


@scheduling_bp.route('/api/context', methods=['DELETE'])
def api_clear_context():
    data = _request_data()
    ctx = _session(data)
    services = _services()
    services['pending'].clear(ctx.session_id)
    services['sessions'].drop(ctx.session_id)
    return _respond(handle_clear_context(ctx), ctx)


# =============================================================================
# Appointment & Observation API
# =============================================================================

@scheduling_bp.route('/api/appointments', methods=['POST'])
def api_schedule_appointment():
    data = _request_data()
    datetime_text = _text_field(data, 'datetime')
    if not datetime_text:
        return jsonify({'success': False, 'error': 'datetime is required'}), 400

    patient_id = _text_field(data, 'patient_id')
    practitioner_id = _text_field(data, 'practitioner_id')
    appointment_type = _text_field(data, 'appointment_type')
    ctx = _session(data)
    services = _services()
    result = handle_schedule_appointment(
        ctx, services['store'], services['pending'],
        datetime_text,
        patient_id=patient_id,
        practitioner_id=practitioner_id,
        appointment_type=appointment_type,
    )
    return _respond(result, ctx)


@scheduling_bp.route('/api/appointments/confirm', methods=['POST'])
def api_confirm_date_choice():
    data = _request_data()
    choice = _text_field(data, 'choice')
    if not choice:
        return jsonify({'success': False, 'error': 'choice is required'}), 400

    ctx = _session(data)
    services = _services()
    result = handle_confirm_date_choice(ctx, services['store'], services['pending'], choice)
    return _respond(result, ctx)


@scheduling_bp.route('/api/appointments/<encounter_id>/cancel', methods=['POST'])
def api_cancel_appointment(encounter_id):
    return _respond(handle_cancel_appointment(_services()['store'], encounter_id))


@scheduling_bp.route('/api/observations', methods=['POST'])
def api_record_observation():
    data = _request_data()
    datetime_text = _text_field(data, 'datetime')
    if not datetime_text:
        return jsonify({'success': False, 'error': 'datetime is required'}), 400

    code = _text_field(data, 'code')
    patient_id = _text_field(data, 'patient_id')
    display = _text_field(data, 'display', '')
    value_quantity = _number_field(data, 'value_quantity')
    value_unit = _text_field(data, 'value_unit', '')
    value_string = _text_field(data, 'value_string', '')
    ctx = _session(data)
    services = _services()
    result = handle_record_observation(
        ctx, services['store'], services['pending'],
        datetime_text,
        code,
        patient_id=patient_id,
        display=display,
        value_quantity=value_quantity,
        value_unit=value_unit,
        value_string=value_string,
    )
    return _respond(result, ctx)
