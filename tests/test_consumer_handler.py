from __future__ import annotations

import contextlib
import io
import unittest
from datetime import UTC, datetime
from typing import Any

from membership.adapters.consumer_handler import handle_batch, handle_message
from membership.domain.delivery import DeliveryOutcome, DeliveryReport
from membership.domain.records import ApplicationRecord


def make_application(**overrides: Any) -> dict[str, Any]:
    base: dict[str, Any] = {
        "id": "app-1",
        "name": "Ada Lovelace",
        "company": "Acme",
        "role": "Engineer",
        "email": "ada@acme.test",
        "linkedin": None,
        "consent": True,
        "status": "pending",
        "submitted_at": "2026-02-20T15:00:00Z",
    }
    return base | overrides


def make_record(value: Any, *, offset: int) -> dict[str, Any]:
    return {
        "topic": "applications.created",
        "partition": 0,
        "offset": offset,
        "value": value,
    }


def make_event(**application_overrides: Any) -> dict[str, Any]:
    return {
        "event_id": "evt-1",
        "event_type": "applications.created",
        "application": make_application(**application_overrides),
    }


def report(delivered: bool) -> DeliveryReport:
    outcome = DeliveryOutcome(
        channel="smtp",
        success=delivered,
        detail="delivered" if delivered else "smtp unavailable",
        timestamp=datetime(2026, 2, 20, 15, 0, tzinfo=UTC),
    )
    return DeliveryReport(delivered=delivered, channel="smtp" if delivered else None, outcomes=(outcome,))


class ConsumerHandlerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.committed: list[int] = []
        self.notified: list[ApplicationRecord] = []
        self._stdout = contextlib.redirect_stdout(io.StringIO())
        self._stdout.__enter__()
        self.addCleanup(self._stdout.__exit__, None, None, None)

    def commit(self, record: dict[str, Any]) -> None:
        self.committed.append(int(record["offset"]))

    def test_delivered_event_is_committed(self) -> None:
        def notify(application: ApplicationRecord) -> DeliveryReport:
            self.notified.append(application)
            return report(True)

        result = handle_message(make_record(make_event(), offset=10), notify=notify, commit=self.commit)

        self.assertEqual(result["status"], "delivered")
        self.assertEqual(result["application_id"], "app-1")
        self.assertEqual(self.committed, [10])
        self.assertEqual(self.notified[0].email, "ada@acme.test")
        self.assertEqual(self.notified[0].submitted_at, datetime(2026, 2, 20, 15, 0, tzinfo=UTC))

    def test_exhausted_delivery_is_still_committed(self) -> None:
        result = handle_message(
            make_record(make_event(), offset=11), notify=lambda _app: report(False), commit=self.commit
        )

        self.assertEqual(result["status"], "delivery_exhausted")
        self.assertEqual(result["error"], "all_channels_failed")
        self.assertFalse(result["delivery"]["delivered"])
        self.assertEqual(self.committed, [11])

    def test_parse_failure_is_logged_and_committed(self) -> None:
        bad_event = {"event_type": "applications.created", "application": make_application()}

        result = handle_message(
            make_record(bad_event, offset=12), notify=lambda _app: report(True), commit=self.commit
        )

        self.assertEqual(result["status"], "parse_failed")
        self.assertIn("event_id", result["error"] or "")
        self.assertEqual(self.committed, [12])

    def test_non_dict_value_is_parse_failure(self) -> None:
        result = handle_message(
            make_record(None, offset=13), notify=lambda _app: report(True), commit=self.commit
        )

        self.assertEqual(result["status"], "parse_failed")
        self.assertEqual(self.committed, [13])

    def test_notifier_exception_is_contained(self) -> None:
        def notify(application: ApplicationRecord) -> DeliveryReport:
            raise ValueError("Notification payload needs at least one recipient")

        result = handle_message(make_record(make_event(), offset=14), notify=notify, commit=self.commit)

        self.assertEqual(result["status"], "notify_failed")
        self.assertIn("recipient", result["error"] or "")
        self.assertEqual(self.committed, [14])

    def test_handle_batch_processes_in_order(self) -> None:
        records = [
            make_record(make_event(id="app-20"), offset=20),
            make_record(make_event(id="app-21", name=""), offset=21),
            make_record(make_event(id="app-22"), offset=22),
        ]

        results = handle_batch(records, notify=lambda _app: report(True), commit=self.commit)

        self.assertEqual([item["status"] for item in results], ["delivered", "parse_failed", "delivered"])
        self.assertEqual(self.committed, [20, 21, 22])


if __name__ == "__main__":
    unittest.main()
