"""Session store adapters for the admin session gate.

The gate only depends on the `get`/`set`/`destroy`/`expire` capability, so
this in-memory store can be swapped for a distributed cache or signed
tokens without touching the authorization rules.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Protocol

from ..types import Clock


@dataclass(frozen=True)
class AdminSession:
    session_id: str
    operator: str
    created_at: float
    expires_at: float

    def is_authenticated(self, now: float) -> bool:
        return now < self.expires_at


class SessionStore(Protocol):
    def get(self, session_id: str) -> AdminSession | None: ...

    def set(self, session: AdminSession) -> None: ...

    def destroy(self, session_id: str) -> None: ...

    def expire(self) -> int: ...


class InMemorySessionStore:
    def __init__(self, *, clock: Clock = time.time) -> None:
        self._sessions: dict[str, AdminSession] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, session_id: str) -> AdminSession | None:
        """Return a live session; expired sessions are dropped on read."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if not session.is_authenticated(self._clock()):
                del self._sessions[session_id]
                return None
            return session

    def set(self, session: AdminSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def destroy(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def expire(self) -> int:
        """Drop every expired session and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, item in self._sessions.items() if not item.is_authenticated(now)]
            for key in expired:
                del self._sessions[key]
        return len(expired)
