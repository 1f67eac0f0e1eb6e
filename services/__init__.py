"""
Services Package
Contains business logic services for the application.
"""

from .encounters import (
    EncounterStore,
    SchedulingError,
    RecordNotFoundError,
    DEFAULT_APPOINTMENT_TYPE,
)

__all__ = [
    'EncounterStore',
    'SchedulingError',
    'RecordNotFoundError',
    'DEFAULT_APPOINTMENT_TYPE',
]
