"""
Encounter Service Module
In-memory patient/encounter/observation store used by the scheduling flow.

Records are plain dicts keyed by opaque string ids. Datetimes are stored
as the ISO-8601 string of the resolved instant (target timezone, with offset).
"""

import logging
import threading
import uuid
from typing import Any, Dict, List, Optional


logger = logging.getLogger(__name__)

DEFAULT_APPOINTMENT_TYPE = 'General Consultation'


class SchedulingError(Exception):
    """Base error for the scheduling services."""


class RecordNotFoundError(SchedulingError):
    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class EncounterStore:
    """Thread-safe in-memory store for patients, practitioners, encounters and observations."""

    def __init__(self):
        self._patients: Dict[str, Dict[str, Any]] = {}
        self._practitioners: Dict[str, Dict[str, Any]] = {}
        self._encounters: Dict[str, Dict[str, Any]] = {}
        self._observations: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    # ============================================================
    # Patients & practitioners
    # ============================================================

    def add_patient(self, patient_id: str, given_name: str = '', family_name: str = '') -> Dict[str, Any]:
        patient = {'id': patient_id, 'given_name': given_name, 'family_name': family_name}
        with self._lock:
            self._patients[patient_id] = patient
        return patient

    def add_practitioner(self, practitioner_id: str, name: str = '') -> Dict[str, Any]:
        practitioner = {'id': practitioner_id, 'name': name}
        with self._lock:
            self._practitioners[practitioner_id] = practitioner
        return practitioner

    def patient_exists(self, patient_id: str) -> bool:
        with self._lock:
            return patient_id in self._patients

    def practitioner_exists(self, practitioner_id: str) -> bool:
        with self._lock:
            return practitioner_id in self._practitioners

    def get_patient(self, patient_id: str) -> Dict[str, Any]:
        with self._lock:
            patient = self._patients.get(patient_id)
        if patient is None:
            raise RecordNotFoundError('patient', patient_id)
        return dict(patient)

    # ============================================================
    # Encounters
    # ============================================================

    def create_encounter(self, patient_id: str, practitioner_id: str, start_datetime: str,
                         appointment_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a planned ambulatory encounter.

        Args:
            patient_id: Existing patient id
            practitioner_id: Existing practitioner id
            start_datetime: ISO-8601 string with offset
            appointment_type: Free text, defaults to a general consultation

        Returns:
            dict: The stored encounter
        """
        with self._lock:
            if patient_id not in self._patients:
                raise RecordNotFoundError('patient', patient_id)
            if practitioner_id not in self._practitioners:
                raise RecordNotFoundError('practitioner', practitioner_id)

            encounter = {
                'id': str(uuid.uuid4()),
                'status': 'planned',
                'class': 'ambulatory',
                'type_display': appointment_type or DEFAULT_APPOINTMENT_TYPE,
                'patient_id': patient_id,
                'practitioner_id': practitioner_id,
                'start_datetime': start_datetime,
            }
            self._encounters[encounter['id']] = encounter

        logger.info("Created encounter %s for patient %s at %s", encounter['id'], patient_id, start_datetime)
        return dict(encounter)

    def get_encounter(self, encounter_id: str) -> Dict[str, Any]:
        with self._lock:
            encounter = self._encounters.get(encounter_id)
        if encounter is None:
            raise RecordNotFoundError('encounter', encounter_id)
        return dict(encounter)

    def cancel_encounter(self, encounter_id: str) -> Dict[str, Any]:
        """Mark an encounter cancelled. Cancelling twice is a no-op."""
        with self._lock:
            encounter = self._encounters.get(encounter_id)
            if encounter is None:
                raise RecordNotFoundError('encounter', encounter_id)
            encounter['status'] = 'cancelled'
            return dict(encounter)

    def list_encounters(self, patient_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            encounters = [dict(e) for e in self._encounters.values() if e['patient_id'] == patient_id]
        return sorted(encounters, key=lambda e: e['start_datetime'])

    # ============================================================
    # Observations
    # ============================================================

    def create_observation(self, patient_id: str, code: str, effective_datetime: str,
                           display: str = '', value_quantity: Optional[float] = None,
                           value_unit: str = '', value_string: str = '',
                           category: str = 'vital-signs') -> Dict[str, Any]:
        with self._lock:
            if patient_id not in self._patients:
                raise RecordNotFoundError('patient', patient_id)

            observation = {
                'id': str(uuid.uuid4()),
                'status': 'final',
                'category': category,
                'code': code,
                'display': display,
                'patient_id': patient_id,
                'effective_datetime': effective_datetime,
                'value_quantity': value_quantity,
                'value_unit': value_unit,
                'value_string': value_string,
            }
            self._observations[observation['id']] = observation

        logger.info("Recorded observation %s (%s) for patient %s", observation['id'], code, patient_id)
        return dict(observation)

    def list_observations(self, patient_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            observations = [dict(o) for o in self._observations.values() if o['patient_id'] == patient_id]
        return sorted(observations, key=lambda o: o['effective_datetime'])
