"""In-memory session registry and event log for styling sessions."""
from __future__ import annotations

import time
from collections import deque
from dataclasses import asdict, dataclass, field
from functools import partial
from typing import Any, Callable, Deque, Dict, List
from uuid import uuid4

from agents.stylist_session import StylistSession


@dataclass
class SessionEvent:
    """Tracks notable events in a session's lifetime."""

    event_type: str
    payload: Dict[str, Any] | None = None
    created_at: float = field(default_factory=lambda: time.time())


@dataclass
class _SessionRecord:
    session: StylistSession
    created_at: float
    events: Deque[SessionEvent]


class SessionStore:
    """Interface for holding live sessions."""

    def add_session(self, session: StylistSession) -> str:
        raise NotImplementedError

    def get_session(self, session_id: str) -> StylistSession:
        raise NotImplementedError

    def session_exists(self, session_id: str) -> bool:
        raise NotImplementedError

    def remove_session(self, session_id: str) -> StylistSession:
        raise NotImplementedError

    def append_event(self, session_id: str, event_type: str, payload: Dict[str, Any] | None = None) -> None:
        raise NotImplementedError

    def get_events(self, session_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def session_ids(self) -> List[str]:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Process-local store; sessions do not survive a restart."""

    def __init__(self, event_limit: int = 50) -> None:
        self.event_limit = event_limit
        self._records: Dict[str, _SessionRecord] = {}

    def _record(self, session_id: str) -> _SessionRecord:
        try:
            return self._records[session_id]
        except KeyError:
            raise KeyError(f"Unknown session_id {session_id}") from None

    def add_session(self, session: StylistSession) -> str:
        self._records[session.session_id] = _SessionRecord(
            session=session,
            created_at=time.time(),
            events=deque(maxlen=self.event_limit),
        )
        return session.session_id

    def get_session(self, session_id: str) -> StylistSession:
        return self._record(session_id).session

    def session_exists(self, session_id: str) -> bool:
        return session_id in self._records

    def remove_session(self, session_id: str) -> StylistSession:
        record = self._record(session_id)
        del self._records[session_id]
        return record.session

    def append_event(self, session_id: str, event_type: str, payload: Dict[str, Any] | None = None) -> None:
        self._record(session_id).events.append(SessionEvent(event_type=event_type, payload=payload))

    def get_events(self, session_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        events = list(self._record(session_id).events)
        return [asdict(event) for event in events[-limit:]]

    def session_ids(self) -> List[str]:
        return list(self._records)


class SessionManager:
    """Creates sessions, wires their event log and tears them down."""

    def __init__(self, store: SessionStore, session_factory: Callable[..., StylistSession]) -> None:
        self.store = store
        self.session_factory = session_factory

    def start_session(self, metadata: Dict[str, Any] | None = None) -> StylistSession:
        session_id = uuid4().hex
        session = self.session_factory(
            session_id=session_id,
            event_sink=partial(self._sink, session_id),
        )
        self.store.add_session(session)
        self.store.append_event(session_id, "session_started", metadata or {})
        return session

    def _sink(self, session_id: str, event_type: str, payload: Dict[str, Any]) -> None:
        # Late callbacks from an ended session are dropped.
        if self.store.session_exists(session_id):
            self.store.append_event(session_id, event_type, payload)

    def get_session(self, session_id: str) -> StylistSession:
        return self.store.get_session(session_id)

    def record_event(self, session_id: str, event_type: str, payload: Dict[str, Any] | None = None) -> None:
        if not self.store.session_exists(session_id):
            raise KeyError(f"Unknown session {session_id}")
        self.store.append_event(session_id=session_id, event_type=event_type, payload=payload)

    def get_events(self, session_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        return self.store.get_events(session_id, limit=limit)

    def end_session(self, session_id: str) -> None:
        session = self.store.remove_session(session_id)
        session.cancel_pending()

    def close(self) -> None:
        for session_id in self.store.session_ids():
            self.end_session(session_id)


__all__ = [
    "SessionEvent",
    "SessionManager",
    "SessionStore",
    "InMemorySessionStore",
]
