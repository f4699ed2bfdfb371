"""Consumer-handler adapter functions (Kafka-like flow without Kafka).

Mental model refresher:
- This is the controller-like entrypoint for event processing.
- Real Kafka code calls this after polling a record.
- Flow:
  record -> parse adapter -> notifier (builder + orchestrator) -> commit
- Every record is committed once handled. A failed delivery is not
  re-queued: the orchestrator's failure record is the follow-up trail.
  Records that cannot be parsed are committed too, after being logged,
  so one bad event never blocks the partition.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..domain.delivery import DeliveryReport
from ..domain.records import ApplicationRecord
from ..types import EventDict, HandlingResult
from .payload import parse_application_event

Record = Mapping[str, Any]
CommitFn = Callable[[Record], None]
DeliverFn = Callable[[ApplicationRecord], DeliveryReport]


def handle_message(
    record: Record,
    *,
    notify: DeliverFn,
    commit: CommitFn,
) -> HandlingResult:
    """Handle one incoming record and commit it."""
    try:
        payload = _get_record_payload(record)
        application = parse_application_event(payload)
    except Exception as exc:
        error = f"parse_failed: {exc}"
        print(f"[PARSE ERROR] {_format_meta(record)} error={error}")
        commit(record)
        return {
            "status": "parse_failed",
            "record_meta": _record_meta(record),
            "application_id": None,
            "delivery": None,
            "error": error,
        }

    try:
        report = notify(application)
    except Exception as exc:
        # Payload building can reject a misconfigured recipient list.
        error = f"notify_failed: {exc}"
        print(f"[NOTIFY ERROR] {_format_meta(record)} application_id={application.id} error={error}")
        commit(record)
        return {
            "status": "notify_failed",
            "record_meta": _record_meta(record),
            "application_id": application.id,
            "delivery": None,
            "error": error,
        }

    commit(record)
    return {
        "status": "delivered" if report.delivered else "delivery_exhausted",
        "record_meta": _record_meta(record),
        "application_id": application.id,
        "delivery": report.to_dict(),
        "error": None if report.delivered else "all_channels_failed",
    }


def handle_batch(
    records: Sequence[Record],
    *,
    notify: DeliverFn,
    commit: CommitFn,
) -> list[HandlingResult]:
    """Handle a batch of records sequentially using `handle_message`."""
    results: list[HandlingResult] = []
    for record in records:
        results.append(handle_message(record, notify=notify, commit=commit))
    return results


def _get_record_payload(record: Record) -> EventDict:
    payload = record.get("value")
    if not isinstance(payload, dict):
        raise ValueError("record.value must be a dict payload")
    return payload


def _record_meta(record: Record) -> dict[str, Any]:
    return {
        "topic": record.get("topic"),
        "partition": record.get("partition"),
        "offset": record.get("offset"),
    }


def _format_meta(record: Record) -> str:
    meta = _record_meta(record)
    return f"topic={meta['topic']} partition={meta['partition']} offset={meta['offset']}"
