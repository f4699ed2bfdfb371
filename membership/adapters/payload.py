"""Payload adapter functions.

Mental model refresher:
- This is an adapter/edge module.
- It translates transport-shaped data (HTTP form JSON, Kafka event payload)
  into internal domain values, and back into event payloads.
- It validates shape and required fields; it does not decide business
  outcomes like delivery order or review status.
"""

from __future__ import annotations

import re
import uuid
from datetime import UTC, datetime
from typing import Any

from ..domain.records import STATUS_PENDING, STATUSES, ApplicationDraft, ApplicationRecord
from ..errors import ApplicationValidationError
from ..types import Event, EventDict, FormData

EVENT_TYPE_APPLICATION_CREATED = "applications.created"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_TRUTHY_FORM_VALUES = {"true", "on", "yes", "1"}


def parse_application_form(data: FormData) -> ApplicationDraft:
    """Validate submitted form data into an `ApplicationDraft`.

    All field problems are collected and raised together.
    """
    errors: dict[str, str] = {}

    name = _as_optional_str(data.get("name"))
    company = _as_optional_str(data.get("company"))
    role = _as_optional_str(data.get("role"))
    email = _as_optional_str(data.get("email"))
    linkedin = _as_optional_str(data.get("linkedin"))

    if not name:
        errors["name"] = "Name is required"
    if not company:
        errors["company"] = "Company is required"
    if not role:
        errors["role"] = "Role is required"
    if not email or not _EMAIL_PATTERN.match(email):
        errors["email"] = "Valid email is required"
    if linkedin and not linkedin.lower().startswith(("http://", "https://")):
        errors["linkedin"] = "LinkedIn must be a full http(s) URL"
    consent = _as_consent(data.get("consent"))
    if not consent:
        errors["consent"] = "Consent is required"

    if errors:
        raise ApplicationValidationError(errors)

    return ApplicationDraft(
        name=name or "",
        company=company or "",
        role=role or "",
        email=email or "",
        consent=consent,
        linkedin=linkedin,
    )


def build_application_created_event(
    record: ApplicationRecord,
    *,
    event_id: str | None = None,
    occurred_at: datetime | None = None,
) -> EventDict:
    return {
        "event_id": event_id or f"evt-{uuid.uuid4()}",
        "event_type": EVENT_TYPE_APPLICATION_CREATED,
        "occurred_at": (occurred_at or datetime.now(tz=UTC)).isoformat(),
        "application": record.to_dict(),
    }


def parse_application_event(payload: Event) -> ApplicationRecord:
    """Normalize an `applications.created` payload into an `ApplicationRecord`.

    This is the first handoff from transport data to internal data.
    """
    _as_required_str(payload.get("event_id"), "event_id")
    application = payload.get("application")
    if not isinstance(application, dict):
        raise ValueError("Missing required field: application")

    status = _as_optional_str(application.get("status")) or STATUS_PENDING
    if status not in STATUSES:
        raise ValueError(f"Invalid application.status: {status!r}")

    reviewed_at_raw = _as_optional_str(application.get("reviewed_at"))
    return ApplicationRecord(
        id=_as_required_str(application.get("id"), "application.id"),
        name=_as_required_str(application.get("name"), "application.name"),
        company=_as_required_str(application.get("company"), "application.company"),
        role=_as_required_str(application.get("role"), "application.role"),
        email=_as_required_str(application.get("email"), "application.email"),
        linkedin=_as_optional_str(application.get("linkedin")),
        consent=bool(application.get("consent", False)),
        status=status,
        submitted_at=_as_datetime(application.get("submitted_at"), "application.submitted_at"),
        reviewed_at=_as_datetime(reviewed_at_raw, "application.reviewed_at") if reviewed_at_raw else None,
        reviewed_by=_as_optional_str(application.get("reviewed_by")),
    )


def _as_required_str(value: Any, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"Missing required field: {field_name}")
    return text


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_consent(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_FORM_VALUES
    return False


def _as_datetime(value: Any, field_name: str) -> datetime:
    text = _as_required_str(value, field_name)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp for {field_name}: {text!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
