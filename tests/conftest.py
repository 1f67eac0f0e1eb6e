from datetime import datetime, timezone

import pytest

from app import create_app
from modules.pending_choices import PendingChoiceStore
from modules.session_context import SessionContext
from modules.time_utils import get_target_timezone
from services.encounters import EncounterStore


# Saturday, November 30, 2024, 10:00 UTC (11:00 in Berlin)
REFERENCE_NOW = datetime(2024, 11, 30, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def reference_now():
    return REFERENCE_NOW


@pytest.fixture
def berlin_now():
    return REFERENCE_NOW.astimezone(get_target_timezone())


@pytest.fixture
def store():
    store = EncounterStore()
    store.add_patient('pat-1', 'Anna', 'Schmidt')
    store.add_patient('pat-2', 'Jonas', 'Weber')
    store.add_practitioner('prac-1', 'Dr. Keller')
    return store


@pytest.fixture
def pending():
    return PendingChoiceStore()


@pytest.fixture
def ctx():
    return SessionContext(session_id='session-1')


@pytest.fixture
def app(store):
    app = create_app({'pending_choice_timeout_minutes': 30}, store=store)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
