"""Console sender for local development and smoke tests.

Mental model refresher:
- This is outbound adapter code with the same signature as the real
  transports in `real_senders.py`.
- It lets a developer watch the fallback chain end-to-end without any
  provider credentials.
"""

from __future__ import annotations

from ..domain.notification import NotificationPayload


def send_via_console(payload: NotificationPayload, *, timeout_seconds: float) -> None:
    _ = timeout_seconds
    print("[EMAIL]")
    print(f"to={','.join(payload.recipients)}")
    print(f"reply_to={payload.reply_to}")
    print(f"subject={payload.subject}")
    print(f"body={payload.text_body}")


def check_console(*, timeout_seconds: float) -> None:
    _ = timeout_seconds
