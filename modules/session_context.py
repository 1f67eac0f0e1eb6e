"""
Session Context Module
Per-conversation defaults (current patient and practitioner).

Each conversation gets its own SessionContext which is passed explicitly
to the handlers, so concurrent conversations never see each other's
defaults. Contexts idle for longer than the registry timeout are dropped.
"""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional


DEFAULT_TIMEOUT = timedelta(minutes=30)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionContext:
    session_id: str
    patient_id: str = ''
    practitioner_id: str = ''
    last_seen: datetime = field(default_factory=_utcnow, compare=False)

    def resolve_patient_id(self, provided_id: Optional[str] = None) -> str:
        """Explicit id wins over the session default."""
        return provided_id or self.patient_id

    def resolve_practitioner_id(self, provided_id: Optional[str] = None) -> str:
        return provided_id or self.practitioner_id

    def clear(self):
        self.patient_id = ''
        self.practitioner_id = ''

    def to_dict(self):
        return {
            "session_id": self.session_id,
            "patient_id": self.patient_id or None,
            "practitioner_id": self.practitioner_id or None,
        }


class SessionRegistry:
    """
    Looks up SessionContext objects by id.

    `lookup` never registers anything: an unknown or missing id yields a
    fresh, unregistered context. Only `get_or_create` keeps a context,
    which callers use when there is a default worth remembering.
    """

    def __init__(self, timeout: timedelta = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self._sessions: Dict[str, SessionContext] = {}
        self._lock = threading.Lock()

    def _purge_locked(self, now: datetime) -> None:
        expired = [sid for sid, ctx in self._sessions.items() if now - ctx.last_seen > self.timeout]
        for sid in expired:
            del self._sessions[sid]

    def lookup(self, session_id: Optional[str] = None, now: datetime = None) -> SessionContext:
        now = now or _utcnow()
        with self._lock:
            self._purge_locked(now)
            ctx = self._sessions.get(session_id) if session_id else None
            if ctx is None:
                return SessionContext(session_id=session_id or str(uuid.uuid4()), last_seen=now)
            ctx.last_seen = now
            return ctx

    def get_or_create(self, session_id: Optional[str] = None, now: datetime = None) -> SessionContext:
        now = now or _utcnow()
        session_id = session_id or str(uuid.uuid4())
        with self._lock:
            self._purge_locked(now)
            ctx = self._sessions.get(session_id)
            if ctx is None:
                ctx = SessionContext(session_id=session_id)
                self._sessions[session_id] = ctx
            ctx.last_seen = now
            return ctx

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
