"""
Pending Date Choices
Remembers an ambiguous date question per session until the user answers.

When a request carries an ambiguous date, the original action and its
arguments are parked here together with the offered options. A later
"A" / "B" reply picks the stored option and re-runs the action.
Entries older than the timeout are treated as gone.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from modules.date_models import AmbiguousDate, DateOption


DEFAULT_TIMEOUT = timedelta(minutes=30)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PendingChoice:
    action: str
    ambiguity: AmbiguousDate
    arguments: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)

    def is_expired(self, now: datetime, timeout: timedelta) -> bool:
        return now - self.created_at > timeout


class PendingChoiceStore:
    """Session id -> PendingChoice map with expiry. Safe to share between threads."""

    def __init__(self, timeout: timedelta = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self._entries: Dict[str, PendingChoice] = {}
        self._lock = threading.Lock()

    def put(self, session_id: str, choice: PendingChoice) -> None:
        """Store a pending choice, replacing any earlier one for the session."""
        with self._lock:
            self._entries[session_id] = choice

    def get(self, session_id: str, now: datetime = None) -> Optional[PendingChoice]:
        now = now or _utcnow()
        with self._lock:
            choice = self._entries.get(session_id)
            if choice is None:
                return None
            if choice.is_expired(now, self.timeout):
                del self._entries[session_id]
                return None
            return choice

    def pop(self, session_id: str, now: datetime = None) -> Optional[PendingChoice]:
        now = now or _utcnow()
        with self._lock:
            choice = self._entries.pop(session_id, None)
        if choice is None or choice.is_expired(now, self.timeout):
            return None
        return choice

    def take(self, session_id: str, key: str,
             now: datetime = None) -> Tuple[Optional[PendingChoice], Optional[DateOption]]:
        """
        Look up the session's question and pick the option for key in one step.

        Returns (None, None) when nothing is pending, (choice, None) for an
        unknown key (the question stays open) and (choice, option) otherwise,
        in which case the entry is removed. Concurrent answers to the same
        question get the option at most once.
        """
        now = now or _utcnow()
        with self._lock:
            choice = self._entries.get(session_id)
            if choice is None:
                return None, None
            if choice.is_expired(now, self.timeout):
                del self._entries[session_id]
                return None, None
            option = choice.ambiguity.get_option(key)
            if option is not None:
                del self._entries[session_id]
            return choice, option

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._entries.pop(session_id, None)

    def purge_expired(self, now: datetime = None) -> int:
        """Drop every expired entry and return how many were removed."""
        now = now or _utcnow()
        with self._lock:
            expired = [sid for sid, choice in self._entries.items() if choice.is_expired(now, self.timeout)]
            for sid in expired:
                del self._entries[sid]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
