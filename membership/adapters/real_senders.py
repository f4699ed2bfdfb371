"""Real provider transports for admin notification email.

Mental model refresher:
- This module is an outbound adapter.
- Each `send_via_*` function speaks one vendor's native protocol and raises
  RuntimeError on any network, auth, quota or status failure.
- Each `check_*` function is a lightweight reachability probe used by the
  channel diagnostics. It never sends mail.
- Settings come from `membership.config`; nothing here reads the environment.
- `channel.py` wraps these functions so callers only ever see outcomes.
"""

from __future__ import annotations

import base64
import json
import smtplib
import urllib.error
import urllib.parse
import urllib.request
from email.message import EmailMessage
from typing import Any, Mapping

from ..config import (
    FormspreeSettings,
    MailgunSettings,
    ResendSettings,
    SendGridSettings,
    SmtpSettings,
)
from ..domain.notification import NotificationPayload

USER_AGENT = "membership-notifier/1.0"


def send_via_smtp(
    payload: NotificationPayload,
    *,
    settings: SmtpSettings,
    timeout_seconds: float,
) -> None:
    """Send through an authenticated SMTP relay (SSL or STARTTLS)."""
    message = EmailMessage()
    message["From"] = settings.from_email
    message["To"] = ", ".join(payload.recipients)
    message["Subject"] = payload.subject
    message["Reply-To"] = payload.reply_to
    message.set_content(payload.text_body)
    message.add_alternative(payload.html_body, subtype="html")

    try:
        with _open_smtp(settings, timeout_seconds) as client:
            client.login(settings.username, settings.password)
            client.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        raise RuntimeError(f"SMTP send via {settings.host} failed: {exc}") from exc


def send_via_resend(
    payload: NotificationPayload,
    *,
    settings: ResendSettings,
    timeout_seconds: float,
) -> None:
    """Send via the Resend REST API."""
    body = {
        "from": settings.from_email,
        "to": list(payload.recipients),
        "subject": payload.subject,
        "html": payload.html_body,
        "text": payload.text_body,
        "reply_to": payload.reply_to,
    }
    request = _json_request(f"{settings.base_url}/emails", body, bearer_token=settings.api_key)
    _send_request(request, vendor="Resend", timeout_seconds=timeout_seconds)


def send_via_sendgrid(
    payload: NotificationPayload,
    *,
    settings: SendGridSettings,
    timeout_seconds: float,
) -> None:
    """Send via SendGrid v3 mail/send. Only 202 Accepted counts as success."""
    body = {
        "from": {"email": settings.from_email, "name": settings.from_name},
        "reply_to": {"email": payload.reply_to},
        "personalizations": [
            {
                "to": [{"email": recipient} for recipient in payload.recipients],
                "subject": payload.subject,
            }
        ],
        "content": [
            {"type": "text/plain", "value": payload.text_body},
            {"type": "text/html", "value": payload.html_body},
        ],
    }
    request = _json_request(
        f"{settings.base_url}/v3/mail/send", body, bearer_token=settings.api_key
    )
    _send_request(request, vendor="SendGrid", timeout_seconds=timeout_seconds, expected_status=202)


def send_via_mailgun(
    payload: NotificationPayload,
    *,
    settings: MailgunSettings,
    timeout_seconds: float,
) -> None:
    """Send via Mailgun REST API."""
    encoded_domain = urllib.parse.quote(settings.domain, safe="")
    endpoint = f"{settings.base_url}/v3/{encoded_domain}/messages"
    data = urllib.parse.urlencode(
        {
            "from": settings.from_email,
            "to": ",".join(payload.recipients),
            "subject": payload.subject,
            "text": payload.text_body,
            "html": payload.html_body,
            "h:Reply-To": payload.reply_to,
        }
    ).encode("utf-8")

    request = urllib.request.Request(endpoint, data=data, method="POST")
    request.add_header("Authorization", _basic_auth_header("api", settings.api_key))
    request.add_header("Content-Type", "application/x-www-form-urlencoded")
    _send_request(request, vendor="Mailgun", timeout_seconds=timeout_seconds)


def send_via_formspree(
    payload: NotificationPayload,
    *,
    settings: FormspreeSettings,
    timeout_seconds: float,
) -> None:
    """Relay the notification through a Formspree form endpoint."""
    form: dict[str, str] = {
        "_replyto": payload.reply_to,
        "_subject": payload.subject,
    }
    for label, value in payload.fields:
        form[label.lower()] = value
    form["message"] = payload.text_body

    request = urllib.request.Request(
        settings.endpoint,
        data=urllib.parse.urlencode(form).encode("utf-8"),
        method="POST",
    )
    request.add_header("Content-Type", "application/x-www-form-urlencoded")
    request.add_header("Accept", "application/json")
    request.add_header("User-Agent", USER_AGENT)
    _send_request(request, vendor="Formspree", timeout_seconds=timeout_seconds)


def check_smtp(*, settings: SmtpSettings, timeout_seconds: float) -> None:
    try:
        with _open_smtp(settings, timeout_seconds) as client:
            client.login(settings.username, settings.password)
            client.noop()
    except (smtplib.SMTPException, OSError) as exc:
        raise RuntimeError(f"SMTP check via {settings.host} failed: {exc}") from exc


def check_resend(*, settings: ResendSettings, timeout_seconds: float) -> None:
    request = urllib.request.Request(f"{settings.base_url}/domains", method="GET")
    request.add_header("Authorization", f"Bearer {settings.api_key}")
    _send_request(request, vendor="Resend", timeout_seconds=timeout_seconds)


def check_sendgrid(*, settings: SendGridSettings, timeout_seconds: float) -> None:
    request = urllib.request.Request(f"{settings.base_url}/v3/user/account", method="GET")
    request.add_header("Authorization", f"Bearer {settings.api_key}")
    _send_request(request, vendor="SendGrid", timeout_seconds=timeout_seconds)


def check_mailgun(*, settings: MailgunSettings, timeout_seconds: float) -> None:
    encoded_domain = urllib.parse.quote(settings.domain, safe="")
    request = urllib.request.Request(
        f"{settings.base_url}/v3/domains/{encoded_domain}", method="GET"
    )
    request.add_header("Authorization", _basic_auth_header("api", settings.api_key))
    _send_request(request, vendor="Mailgun", timeout_seconds=timeout_seconds)


def check_formspree(*, settings: FormspreeSettings, timeout_seconds: float) -> None:
    """Any HTTP answer, error statuses included, means the endpoint is reachable."""
    request = urllib.request.Request(settings.endpoint, method="HEAD")
    request.add_header("User-Agent", USER_AGENT)
    try:
        with urllib.request.urlopen(request, timeout=timeout_seconds) as response:
            response.read()
    except urllib.error.HTTPError:
        return
    except urllib.error.URLError as exc:
        raise RuntimeError(f"Formspree endpoint unreachable: {exc.reason}") from exc


def _open_smtp(settings: SmtpSettings, timeout_seconds: float) -> smtplib.SMTP:
    if settings.use_ssl:
        return smtplib.SMTP_SSL(settings.host, settings.port, timeout=timeout_seconds)
    client = smtplib.SMTP(settings.host, settings.port, timeout=timeout_seconds)
    try:
        client.starttls()
    except Exception:
        client.close()
        raise
    return client


def _json_request(
    url: str,
    body: Mapping[str, Any],
    *,
    bearer_token: str,
) -> urllib.request.Request:
    data = json.dumps(body, separators=(",", ":")).encode("utf-8")
    request = urllib.request.Request(url, data=data, method="POST")
    request.add_header("Authorization", f"Bearer {bearer_token}")
    request.add_header("Content-Type", "application/json")
    request.add_header("User-Agent", USER_AGENT)
    return request


def _send_request(
    request: urllib.request.Request,
    *,
    vendor: str,
    timeout_seconds: float,
    expected_status: int | None = None,
) -> None:
    try:
        with urllib.request.urlopen(request, timeout=timeout_seconds) as response:
            status = int(response.getcode())
            if expected_status is not None and status != expected_status:
                raise RuntimeError(
                    f"{vendor} request failed with status {status} (expected {expected_status})"
                )
            if status < 200 or status >= 300:
                raise RuntimeError(f"{vendor} request failed with status {status}")
            response.read()
    except urllib.error.HTTPError as exc:
        details = exc.read().decode("utf-8", errors="replace")
        raise RuntimeError(f"{vendor} request failed HTTP {exc.code}: {details[:300]}") from exc
    except urllib.error.URLError as exc:
        raise RuntimeError(f"{vendor} request failed: {exc.reason}") from exc


def _basic_auth_header(username: str, password: str) -> str:
    token = f"{username}:{password}".encode("utf-8")
    encoded = base64.b64encode(token).decode("ascii")
    return f"Basic {encoded}"
