"""
In-memory conversation sessions.

Sessions live for the lifetime of the process only. Exactly one session may be
the current one; history is append-only.
"""

import time

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .errors import SessionNotFound


@dataclass(frozen=True)
class HistoryEntry:
    prompt: str
    response: str
    timestamp: datetime

    def to_dict(self) -> Dict:
        return {
            "prompt": self.prompt,
            "response": self.response,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Session:
    id: str
    start_time: datetime
    last_activity: datetime
    history: List[HistoryEntry] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "startTime": self.start_time.isoformat(),
            "lastActivity": self.last_activity.isoformat(),
            "history": [entry.to_dict() for entry in self.history],
        }


@dataclass(frozen=True)
class SessionSummary:
    id: str
    start_time: datetime
    last_activity: datetime
    message_count: int

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "startTime": self.start_time.isoformat(),
            "lastActivity": self.last_activity.isoformat(),
            "messageCount": self.message_count,
        }


class SessionStore:
    def __init__(self):
        # dicts keep insertion order, which is the order list() reports.
        self._sessions: Dict[str, Session] = {}
        self._current_id: Optional[str] = None

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def current_id(self) -> Optional[str]:
        return self._current_id

    @property
    def current(self) -> Optional[Session]:
        if self._current_id is None:
            return None
        return self._sessions.get(self._current_id)

    def create(self) -> str:
        """Creates a new session, makes it the current one and returns its id."""
        base_id = f"session-{int(time.time() * 1000)}"
        session_id = base_id
        suffix = 1
        while session_id in self._sessions:
            session_id = f"{base_id}-{suffix}"
            suffix += 1

        now = datetime.now()
        self._sessions[session_id] = Session(
            id=session_id, start_time=now, last_activity=now
        )
        self._current_id = session_id
        return session_id

    def get(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def list(self) -> List[SessionSummary]:
        return [
            SessionSummary(
                id=s.id,
                start_time=s.start_time,
                last_activity=s.last_activity,
                message_count=len(s.history),
            )
            for s in self._sessions.values()
        ]

    def context(self, session_id: Optional[str] = None) -> Optional["SessionContext"]:
        """Returns a handle on the given session, or on the current one when no id is given."""
        target = session_id if session_id is not None else self._current_id
        if target is None or target not in self._sessions:
            return None
        return SessionContext(self, target)

    def append(self, session_id: str, entry: HistoryEntry):
        session = self._sessions.get(session_id)
        if session is None:
            return
        session.history.append(entry)
        session.last_activity = entry.timestamp


@dataclass(frozen=True)
class SessionContext:
    """A handle on one session, passed explicitly to whoever records history."""

    store: SessionStore
    session_id: str

    def record(self, prompt: str, response: str) -> HistoryEntry:
        entry = HistoryEntry(prompt=prompt, response=response, timestamp=datetime.now())
        self.store.append(self.session_id, entry)
        return entry
