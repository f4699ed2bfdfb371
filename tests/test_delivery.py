from __future__ import annotations

import contextlib
import io
import json
import threading
import time
import unittest
from dataclasses import replace
from datetime import UTC, datetime

from membership.adapters.channel import ChannelAdapter
from membership.application.delivery import DeliveryOrchestrator
from membership.domain.notification import NotificationPayload, build_notification_payload
from membership.domain.records import ApplicationRecord


def make_payload() -> NotificationPayload:
    record = ApplicationRecord(
        id="app-1",
        name="Ada Lovelace",
        company="Acme",
        role="Engineer",
        email="ada@acme.test",
        consent=True,
        submitted_at=datetime(2026, 2, 20, 15, 0, tzinfo=UTC),
    )
    return build_notification_payload(record, recipients=["admin@example.com"])


def recording_adapter(name: str, calls: list[str], *, succeed: bool) -> ChannelAdapter:
    def send(payload: NotificationPayload, *, timeout_seconds: float) -> None:
        calls.append(name)
        if not succeed:
            raise RuntimeError(f"{name} unavailable")

    return ChannelAdapter(name=name, send=send)


def deliver_quietly(orchestrator: DeliveryOrchestrator, payload: NotificationPayload):
    output = io.StringIO()
    with contextlib.redirect_stdout(output):
        report = orchestrator.deliver(payload)
    return report, output.getvalue()


class ChannelAdapterTests(unittest.TestCase):
    def test_attempt_turns_exceptions_into_failed_outcomes(self) -> None:
        def send(payload: NotificationPayload, *, timeout_seconds: float) -> None:
            raise ValueError("quota exceeded")

        outcome = ChannelAdapter(name="resend", send=send).attempt(make_payload(), 1.0)

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.channel, "resend")
        self.assertIn("quota exceeded", outcome.detail)
        self.assertFalse(outcome.timed_out)

    def test_attempt_passes_timeout_to_transport(self) -> None:
        seen: list[float] = []

        def send(payload: NotificationPayload, *, timeout_seconds: float) -> None:
            seen.append(timeout_seconds)

        outcome = ChannelAdapter(name="smtp", send=send).attempt(make_payload(), 2.5)

        self.assertTrue(outcome.success)
        self.assertEqual(seen, [2.5])

    def test_attempt_reports_timeout(self) -> None:
        release = threading.Event()

        def send(payload: NotificationPayload, *, timeout_seconds: float) -> None:
            release.wait(5)

        try:
            started = time.monotonic()
            outcome = ChannelAdapter(name="slow", send=send).attempt(make_payload(), 0.2)
            elapsed = time.monotonic() - started
        finally:
            release.set()

        self.assertFalse(outcome.success)
        self.assertTrue(outcome.timed_out)
        self.assertLess(elapsed, 2.0)

    def test_attempt_rejects_payload_without_recipients(self) -> None:
        calls: list[str] = []
        adapter = recording_adapter("smtp", calls, succeed=True)

        outcome = adapter.attempt(replace(make_payload(), recipients=()), 1.0)

        self.assertFalse(outcome.success)
        self.assertEqual(calls, [])


class DeliveryOrchestratorTests(unittest.TestCase):
    def test_stops_at_first_success_in_configured_order(self) -> None:
        calls: list[str] = []
        orchestrator = DeliveryOrchestrator(
            [
                recording_adapter("resend", calls, succeed=False),
                recording_adapter("sendgrid", calls, succeed=True),
                recording_adapter("formspree", calls, succeed=True),
            ],
            timeout_seconds=1.0,
        )

        report, _output = deliver_quietly(orchestrator, make_payload())

        self.assertTrue(report.delivered)
        self.assertEqual(report.channel, "sendgrid")
        self.assertEqual(calls, ["resend", "sendgrid"])
        self.assertEqual([item.success for item in report.outcomes], [False, True])

    def test_all_failing_adapters_yield_one_outcome_each(self) -> None:
        calls: list[str] = []
        names = ["smtp", "resend", "sendgrid", "formspree"]
        orchestrator = DeliveryOrchestrator(
            [recording_adapter(name, calls, succeed=False) for name in names],
            timeout_seconds=1.0,
        )

        report, _output = deliver_quietly(orchestrator, make_payload())

        self.assertFalse(report.delivered)
        self.assertIsNone(report.channel)
        self.assertEqual(len(report.outcomes), len(names))
        self.assertEqual(report.attempted_channels, names)
        self.assertTrue(all(not item.success for item in report.outcomes))
        self.assertEqual(calls, names)

    def test_zero_adapters_is_immediate_exhaustion(self) -> None:
        orchestrator = DeliveryOrchestrator([], timeout_seconds=10.0)

        started = time.monotonic()
        report, _output = deliver_quietly(orchestrator, make_payload())
        elapsed = time.monotonic() - started

        self.assertFalse(report.delivered)
        self.assertEqual(report.outcomes, ())
        self.assertLess(elapsed, 0.5)

    def test_timed_out_adapter_falls_through_to_next(self) -> None:
        release = threading.Event()

        def hangs(payload: NotificationPayload, *, timeout_seconds: float) -> None:
            release.wait(5)

        def quick(payload: NotificationPayload, *, timeout_seconds: float) -> None:
            time.sleep(0.05)

        orchestrator = DeliveryOrchestrator(
            [ChannelAdapter(name="first", send=hangs), ChannelAdapter(name="second", send=quick)],
            timeout_seconds=0.3,
        )

        try:
            started = time.monotonic()
            report, _output = deliver_quietly(orchestrator, make_payload())
            elapsed = time.monotonic() - started
        finally:
            release.set()

        self.assertTrue(report.delivered)
        self.assertEqual(report.channel, "second")
        self.assertEqual(len(report.outcomes), 2)
        self.assertTrue(report.outcomes[0].timed_out)
        self.assertGreaterEqual(elapsed, 0.3)
        self.assertLess(elapsed, 2.0)

    def test_exhaustion_logs_failure_record_with_applicant_details(self) -> None:
        calls: list[str] = []
        orchestrator = DeliveryOrchestrator(
            [recording_adapter("smtp", calls, succeed=False)],
            timeout_seconds=1.0,
            environment="production",
            configured_channels={"smtp": True, "resend": False},
        )

        report, output = deliver_quietly(orchestrator, make_payload())

        self.assertIn("[DELIVERY FAILED]", output)
        self.assertIn("ada@acme.test", output)
        record = orchestrator.failure_record(make_payload(), report)
        self.assertEqual(record["applicant"]["Name"], "Ada Lovelace")
        self.assertEqual(record["channels"], {"configured": ["smtp"], "attempted": ["smtp"]})
        self.assertEqual(record["environment"]["name"], "production")
        self.assertFalse(record["environment"]["configured_channels"]["resend"])
        self.assertIn("smtp unavailable", record["attempts"][0]["detail"])
        json.dumps(record)

    def test_exhaustion_record_carries_caller_context(self) -> None:
        orchestrator = DeliveryOrchestrator([], timeout_seconds=1.0)
        output = io.StringIO()

        with contextlib.redirect_stdout(output):
            report = orchestrator.deliver(make_payload(), {"topic": "applications.created", "offset": 7})

        self.assertFalse(report.delivered)
        self.assertIn('"offset": 7', output.getvalue())
        record = orchestrator.failure_record(make_payload(), report, {"offset": 7})
        self.assertEqual(record["context"], {"offset": 7})
        self.assertEqual(orchestrator.failure_record(make_payload(), report)["context"], {})

    def test_success_does_not_log_failure_record(self) -> None:
        calls: list[str] = []
        orchestrator = DeliveryOrchestrator(
            [recording_adapter("smtp", calls, succeed=True)], timeout_seconds=1.0
        )

        _report, output = deliver_quietly(orchestrator, make_payload())

        self.assertIn("[DELIVERED]", output)
        self.assertNotIn("[DELIVERY FAILED]", output)

    def test_rejects_non_positive_timeout(self) -> None:
        with self.assertRaises(ValueError):
            DeliveryOrchestrator([], timeout_seconds=0)


if __name__ == "__main__":
    unittest.main()
