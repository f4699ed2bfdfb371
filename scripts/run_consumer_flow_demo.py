#!/usr/bin/env python3
"""Run a Kafka-like consumer flow without Kafka."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from membership.adapters.channel import ChannelAdapter  # noqa: E402
from membership.adapters.consumer_handler import handle_batch  # noqa: E402
from membership.adapters.fake_senders import send_via_console  # noqa: E402
from membership.application.delivery import DeliveryOrchestrator  # noqa: E402
from membership.application.submission import ApplicationNotifier  # noqa: E402


def main() -> int:
    committed_offsets: list[tuple[int, int]] = []

    def commit(record: dict[str, Any]) -> None:
        partition = int(record.get("partition", -1))
        offset = int(record.get("offset", -1))
        committed_offsets.append((partition, offset))
        print(f"[COMMIT] partition={partition} offset={offset}")

    orchestrator = DeliveryOrchestrator(
        [ChannelAdapter(name="console-maybe-fail", send=send_via_console_maybe_fail)],
        timeout_seconds=2.0,
    )
    notifier = ApplicationNotifier(orchestrator, recipients=["admin@example.com"])
    results = handle_batch(sample_records(), notify=notifier, commit=commit)

    print("")
    print("[BATCH SUMMARY]")
    for result in results:
        meta = result["record_meta"]
        print(
            f"offset={meta['offset']} status={result['status']} "
            f"application_id={result['application_id']} error={result['error']}"
        )

    print("")
    print("[OFFSETS]")
    print(f"committed={committed_offsets}")
    return 0


def send_via_console_maybe_fail(payload, *, timeout_seconds: float) -> None:
    if payload.reply_to == "fail-email@example.com":
        raise RuntimeError("email provider unavailable")
    send_via_console(payload, timeout_seconds=timeout_seconds)


def sample_application(application_id: str, email: str) -> dict[str, Any]:
    return {
        "id": application_id,
        "name": "Demo Applicant",
        "company": "Acme",
        "role": "Analyst",
        "email": email,
        "linkedin": None,
        "consent": True,
        "status": "pending",
        "submitted_at": "2026-02-20T15:00:00+00:00",
    }


def sample_records() -> list[dict[str, Any]]:
    return [
        {
            "topic": "applications.created",
            "partition": 0,
            "offset": 100,
            "value": {
                "event_id": "evt-100",
                "event_type": "applications.created",
                "application": sample_application("app-100", "person@example.com"),
            },
        },
        {
            "topic": "applications.created",
            "partition": 0,
            "offset": 101,
            "value": {
                "event_type": "applications.created",
                "application": sample_application("app-101", "person@example.com"),
            },
        },
        {
            "topic": "applications.created",
            "partition": 0,
            "offset": 102,
            "value": {
                "event_id": "evt-102",
                "event_type": "applications.created",
                "application": sample_application("app-102", "fail-email@example.com"),
            },
        },
    ]


if __name__ == "__main__":
    sys.exit(main())
