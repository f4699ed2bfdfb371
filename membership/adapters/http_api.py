"""HTTP adapter: JSON API for applicants, admins and monitors.

Mental model refresher:
- This is an inbound adapter. Routes translate HTTP into use-case calls and
  exceptions into status codes; no business rule lives here.
- Admin identity travels in an opaque `admin_session` cookie that keys the
  injected session store.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Sequence

from flask import Flask, jsonify, request

from ..application.admin import SESSION_KEY, AdminSessionGate, review_application
from ..application.diagnostics import check_channel_status, health_check
from ..application.submission import ApplicationNotifier, build_dispatcher, submit_application
from ..config import AppConfig, load_config
from ..domain.records import STATUSES
from ..errors import (
    AdminAuthorizationError,
    ApplicationNotFoundError,
    ApplicationValidationError,
    InvalidStatusTransitionError,
)
from ..types import NotifyFn, RequestContext
from .channel import ChannelAdapter
from .sessions import InMemorySessionStore
from .store import ApplicationStore, MemoryApplicationStore, SqliteApplicationStore

SESSION_COOKIE = "admin_session"
HEALTH_PROBE_TIMEOUT_SECONDS = 3.0
HEALTH_CACHE_SECONDS = 30.0


def create_app(
    config: AppConfig | None = None,
    *,
    store: ApplicationStore | None = None,
    gate: AdminSessionGate | None = None,
    notify: NotifyFn | None = None,
    adapters: Sequence[ChannelAdapter] | None = None,
) -> Flask:
    """Application factory; collaborators default to ones built from config."""
    app_config = config or load_config()
    if store is None:
        store = (
            SqliteApplicationStore(app_config.database_path)
            if app_config.database_path
            else MemoryApplicationStore()
        )
    if gate is None:
        gate = AdminSessionGate(
            InMemorySessionStore(),
            username=app_config.admin_username,
            password=app_config.admin_password,
            ttl_seconds=app_config.session_ttl_seconds,
        )
    notifier = ApplicationNotifier.from_config(app_config)
    if notify is None:
        notify = build_dispatcher(app_config, notifier)
    channel_adapters = tuple(adapters) if adapters is not None else notifier.orchestrator.adapters
    probe_timeout = app_config.adapter_timeout_seconds
    health_timeout = min(probe_timeout, HEALTH_PROBE_TIMEOUT_SECONDS)
    health_cache: dict[str, Any] = {}
    health_lock = threading.Lock()

    app = Flask(__name__)
    app.config["SECRET_KEY"] = app_config.secret_key
    secure_cookie = app_config.is_production

    def request_context() -> RequestContext:
        return {SESSION_KEY: request.cookies.get(SESSION_COOKIE)}

    def require_admin() -> None:
        if not gate.is_authorized_admin(request_context()):
            raise AdminAuthorizationError()

    @app.errorhandler(AdminAuthorizationError)
    def unauthorized(exc: AdminAuthorizationError) -> Any:
        return jsonify(success=False, message=str(exc)), 401

    @app.errorhandler(ApplicationNotFoundError)
    def not_found(exc: ApplicationNotFoundError) -> Any:
        return jsonify(success=False, message=str(exc)), 404

    @app.errorhandler(InvalidStatusTransitionError)
    def conflict(exc: InvalidStatusTransitionError) -> Any:
        return jsonify(success=False, message=str(exc)), 409

    @app.errorhandler(ApplicationValidationError)
    def invalid(exc: ApplicationValidationError) -> Any:
        return jsonify(success=False, message="Validation failed", errors=exc.errors), 400

    @app.post("/api/membership-applications")
    def submit() -> Any:
        form = _json_object() or request.form.to_dict()
        record = submit_application(form, store=store, notify=notify)
        return jsonify(success=True, application=record.to_dict())

    @app.post("/api/admin/login")
    def login() -> Any:
        body = _json_object()
        session = gate.login(str(body.get("username", "")), str(body.get("password", "")))
        if session is None:
            return jsonify(success=False, message="Invalid credentials"), 401
        response = jsonify(success=True, operator=session.operator)
        response.set_cookie(
            SESSION_COOKIE,
            session.session_id,
            max_age=int(gate.ttl_seconds),
            httponly=True,
            samesite="Lax",
            secure=secure_cookie,
        )
        return response

    @app.post("/api/admin/logout")
    def logout() -> Any:
        session_id = request.cookies.get(SESSION_COOKIE)
        if session_id:
            gate.logout(session_id)
        response = jsonify(success=True)
        response.delete_cookie(SESSION_COOKIE)
        return response

    @app.get("/api/admin/session")
    def current_session() -> Any:
        session = gate.current_session(request_context())
        if session is None:
            return jsonify(authenticated=False)
        return jsonify(authenticated=True, operator=session.operator)

    @app.get("/api/admin/applications")
    def list_all() -> Any:
        require_admin()
        status = request.args.get("status") or None
        if status is not None and status not in STATUSES:
            return jsonify(success=False, message=f"Unknown status: {status}"), 400
        return _applications_response(store.list_applications(status))

    @app.get("/api/admin/pending")
    def list_pending() -> Any:
        require_admin()
        return _applications_response(store.list_pending())

    @app.get("/api/admin/accepted")
    def list_accepted() -> Any:
        require_admin()
        return _applications_response(store.list_accepted())

    @app.get("/api/admin/rejected")
    def list_rejected() -> Any:
        require_admin()
        return _applications_response(store.list_rejected())

    @app.patch("/api/admin/applications/<application_id>/status")
    def update_status(application_id: str) -> Any:
        body = _json_object()
        status = str(body.get("status", "")).strip().lower()
        if status not in STATUSES:
            require_admin()
            return jsonify(success=False, message=f"Unknown status: {status}"), 400
        record = review_application(
            application_id,
            status,
            store=store,
            gate=gate,
            request_context=request_context(),
        )
        return jsonify(success=True, application=record.to_dict())

    @app.get("/api/email-service-status")
    def email_service_status() -> Any:
        require_admin()
        return jsonify(check_channel_status(channel_adapters, probe_timeout))

    @app.get("/health")
    def health() -> Any:
        # Unauthenticated: probes run at most once per cache window.
        with health_lock:
            checked_at = health_cache.get("checked_at")
            if checked_at is None or time.monotonic() - checked_at >= HEALTH_CACHE_SECONDS:
                health_cache["summary"] = health_check(channel_adapters, health_timeout)
                health_cache["checked_at"] = time.monotonic()
            summary = health_cache["summary"]
        return jsonify(summary), 503 if summary["status"] == "fail" else 200

    return app


def _json_object() -> dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _applications_response(records: list[Any]) -> Any:
    return jsonify(success=True, applications=[record.to_dict() for record in records])
