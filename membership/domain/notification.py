"""Notification payload construction.

Mental model refresher:
- Domain modules hold business rules and message content.
- This module decides what the admins are told about a new application:
  subject, structured fields, text body, HTML body and recipients.
- It is written once for every channel; adapters differ only in transport.
- It does not know which provider will carry the message.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from html import escape
from typing import Sequence

from .records import ApplicationRecord

NOT_PROVIDED = "Not provided"


@dataclass(frozen=True)
class NotificationPayload:
    subject: str
    fields: tuple[tuple[str, str], ...]
    text_body: str
    html_body: str
    recipients: tuple[str, ...]
    reply_to: str
    application_id: str
    built_at: datetime

    def field_map(self) -> dict[str, str]:
        return dict(self.fields)


def build_notification_payload(
    record: ApplicationRecord,
    *,
    recipients: Sequence[str],
    society_name: str = "DYPS",
    dashboard_url: str = "",
    built_at: datetime | None = None,
) -> NotificationPayload:
    """Turn a stored application into a channel-agnostic admin notification.

    Everything except `built_at` depends only on the record and the
    arguments, so building twice yields equal content.
    """
    cleaned_recipients = tuple(item.strip() for item in recipients if item and item.strip())
    if not cleaned_recipients:
        raise ValueError("Notification payload needs at least one recipient")
    for field_name in ("id", "name", "company", "role", "email"):
        if not str(getattr(record, field_name) or "").strip():
            raise ValueError(f"Application record is missing required field: {field_name}")

    subject = f"New {society_name} Membership Application - {record.name}"
    fields = (
        ("Name", record.name),
        ("Company", record.company),
        ("Role", record.role),
        ("Email", record.email),
        ("LinkedIn", record.linkedin or NOT_PROVIDED),
        ("Submitted", _format_timestamp(record.submitted_at)),
    )

    return NotificationPayload(
        subject=subject,
        fields=fields,
        text_body=_render_text(society_name, fields, dashboard_url),
        html_body=_render_html(fields, record.linkedin, dashboard_url),
        recipients=cleaned_recipients,
        reply_to=record.email,
        application_id=record.id,
        built_at=built_at or datetime.now(tz=UTC),
    )


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def _render_text(society_name: str, fields: tuple[tuple[str, str], ...], dashboard_url: str) -> str:
    lines = [f"NEW {society_name.upper()} MEMBERSHIP APPLICATION", "", "Applicant details:"]
    lines.extend(f"{label}: {value}" for label, value in fields)
    lines.append("")
    lines.append("This application requires review.")
    if dashboard_url:
        lines.append(f"Review at: {dashboard_url}")
    return "\n".join(lines)


def _render_html(fields: tuple[tuple[str, str], ...], linkedin: str | None, dashboard_url: str) -> str:
    rows = []
    for label, value in fields:
        if label == "LinkedIn" and linkedin:
            link = escape(linkedin, quote=True)
            rendered = f'<a href="{link}">{link}</a>'
        else:
            rendered = escape(value)
        rows.append(f"<p><strong>{escape(label)}:</strong> {rendered}</p>")

    parts = [
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">',
        "<h2>New Membership Application Submitted</h2>",
        "<h3>Applicant Details:</h3>",
        *rows,
        "<p>Review this application in the admin dashboard and accept or reject the candidate.</p>",
    ]
    if dashboard_url:
        parts.append(f'<p><a href="{escape(dashboard_url, quote=True)}">Review Application</a></p>')
    parts.append("</div>")
    return "\n".join(parts)
