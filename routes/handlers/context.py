"""
Context Handlers
Set, show and clear the default patient/practitioner of a session.
"""

from modules.session_context import SessionContext
from services.encounters import EncounterStore


def handle_set_context(ctx: SessionContext, store: EncounterStore, patient_id: str = None,
                       practitioner_id: str = None):
    if not patient_id and not practitioner_id:
        return {'success': False, 'status': 'error', 'error': 'patient_id or practitioner_id is required'}

    if patient_id and not store.patient_exists(patient_id):
        return {'success': False, 'status': 'not_found', 'error': f"patient not found: {patient_id}"}
    if practitioner_id and not store.practitioner_exists(practitioner_id):
        return {'success': False, 'status': 'not_found', 'error': f"practitioner not found: {practitioner_id}"}

    lines = []
    if patient_id:
        ctx.patient_id = patient_id
        patient = store.get_patient(patient_id)
        lines.append(f"Context updated: Default patient set to {patient['given_name']} "
                     f"{patient['family_name']} (ID: {patient_id})")
    if practitioner_id:
        ctx.practitioner_id = practitioner_id
        lines.append(f"Context updated: Default practitioner set to ID: {practitioner_id}")

    return {'success': True, 'context': ctx.to_dict(), 'message': '\n'.join(lines)}


def handle_get_context(ctx: SessionContext):
    message = "Current context:\n"
    message += f"• Patient ID: {ctx.patient_id}\n" if ctx.patient_id else "• Patient: Not set\n"
    message += f"• Practitioner ID: {ctx.practitioner_id}\n" if ctx.practitioner_id else "• Practitioner: Not set\n"
    return {'success': True, 'context': ctx.to_dict(), 'message': message}


def handle_clear_context(ctx: SessionContext):
    ctx.clear()
    return {'success': True, 'context': ctx.to_dict(),
            'message': "Context cleared. No default patient or practitioner set."}
