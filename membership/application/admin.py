"""Admin session gate and the review use-case.

Mental model refresher:
- The gate answers one question: is this request made by a logged-in admin?
- `review_application` asks that question before it touches the store, so
  an unauthorized call leaves store state exactly as it was.
"""

from __future__ import annotations

import hmac
import secrets
import time

from ..adapters.sessions import AdminSession, SessionStore
from ..adapters.store import ApplicationStore
from ..domain.records import ApplicationRecord
from ..errors import AdminAuthorizationError
from ..types import Clock, RequestContext

SESSION_KEY = "session_id"


class AdminSessionGate:
    def __init__(
        self,
        sessions: SessionStore,
        *,
        username: str | None,
        password: str | None,
        ttl_seconds: float = 86400.0,
        clock: Clock = time.time,
    ) -> None:
        self.sessions = sessions
        self._username = username
        self._password = password
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def login(self, username: str, password: str) -> AdminSession | None:
        """Start a session for valid credentials; None otherwise.

        With no admin credentials configured nobody can log in.
        """
        if not self._username or not self._password:
            print("[ADMIN LOGIN] rejected reason=admin_credentials_not_configured")
            return None
        username_ok = hmac.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        password_ok = hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        if not (username_ok and password_ok):
            print(f"[ADMIN LOGIN] rejected username={username!r}")
            return None

        now = self._clock()
        session = AdminSession(
            session_id=secrets.token_urlsafe(32),
            operator=username,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        purged = self.sessions.expire()
        self.sessions.set(session)
        print(f"[ADMIN LOGIN] accepted operator={username} expired_sessions_purged={purged}")
        return session

    def logout(self, session_id: str) -> None:
        self.sessions.destroy(session_id)

    def current_session(self, request_context: RequestContext) -> AdminSession | None:
        session_id = request_context.get(SESSION_KEY)
        if not isinstance(session_id, str) or not session_id:
            return None
        return self.sessions.get(session_id)

    def is_authorized_admin(self, request_context: RequestContext) -> bool:
        return self.current_session(request_context) is not None


def review_application(
    application_id: str,
    status: str,
    *,
    store: ApplicationStore,
    gate: AdminSessionGate,
    request_context: RequestContext,
) -> ApplicationRecord:
    """Accept or reject a pending application on behalf of a logged-in admin."""
    session = gate.current_session(request_context)
    if session is None:
        print(f"[REVIEW] refused application_id={application_id} reason=unauthorized")
        raise AdminAuthorizationError()
    return store.update_status(application_id, status, reviewed_by=session.operator)
