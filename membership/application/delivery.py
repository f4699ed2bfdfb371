"""Application orchestration for the notification fallback chain.

Mental model refresher:
- Application layer coordinates use-case flow across adapters.
- The orchestrator holds an ordered tuple of channel adapters and tries
  them one at a time; the first success ends the sequence.
- Each adapter gets exactly one attempt per event. A fully failed event is
  not re-queued: the failure record printed here is the only trace a human
  has to follow up on, so it carries everything needed to act.
- Attempts are never run concurrently; racing two channels could deliver
  the same notification twice.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

from ..adapters.channel import ChannelAdapter
from ..adapters.registry import build_adapter_registry
from ..config import AppConfig
from ..domain.delivery import DeliveryOutcome, DeliveryReport
from ..domain.notification import NotificationPayload

NEXT_STEPS = (
    "Check the admin dashboard for the new application",
    "Contact the applicant manually if needed",
    "Verify provider credentials and environment variables",
    "Check provider dashboards for quota limits",
    "Run the channel status check: GET /api/email-service-status",
)


class DeliveryOrchestrator:
    def __init__(
        self,
        adapters: Sequence[ChannelAdapter],
        *,
        timeout_seconds: float = 10.0,
        environment: str = "development",
        configured_channels: Mapping[str, bool] | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self.adapters = tuple(adapters)
        self.timeout_seconds = timeout_seconds
        self.environment = environment
        self.configured_channels = dict(
            configured_channels
            if configured_channels is not None
            else {adapter.name: True for adapter in self.adapters}
        )

    @classmethod
    def from_config(cls, config: AppConfig) -> DeliveryOrchestrator:
        return cls(
            build_adapter_registry(config),
            timeout_seconds=config.adapter_timeout_seconds,
            environment=config.environment,
            configured_channels=config.configured_channels(),
        )

    @property
    def channel_names(self) -> list[str]:
        return [adapter.name for adapter in self.adapters]

    def deliver(
        self,
        payload: NotificationPayload,
        context: Mapping[str, Any] | None = None,
    ) -> DeliveryReport:
        """Try each adapter in order until one delivers the payload.

        `context` is caller detail (request or Kafka record metadata) copied
        into the failure record on exhaustion.
        """
        print(
            "[DELIVERY START] "
            f"application_id={payload.application_id} environment={self.environment} "
            f"channels={','.join(self.channel_names) or '-'} "
            f"timeout_seconds={self.timeout_seconds:g}"
        )

        outcomes: list[DeliveryOutcome] = []
        for adapter in self.adapters:
            print(f"[ATTEMPT] application_id={payload.application_id} channel={adapter.name}")
            outcome = adapter.attempt(payload, self.timeout_seconds)
            outcomes.append(outcome)
            print(
                "[OUTCOME] "
                f"application_id={payload.application_id} channel={outcome.channel} "
                f"success={outcome.success} timed_out={outcome.timed_out} "
                f"elapsed_seconds={outcome.elapsed_seconds:.3f} detail={outcome.detail}"
            )
            if outcome.success:
                print(
                    "[DELIVERED] "
                    f"application_id={payload.application_id} channel={outcome.channel} "
                    f"attempts={len(outcomes)}"
                )
                return DeliveryReport(delivered=True, channel=outcome.channel, outcomes=tuple(outcomes))

        report = DeliveryReport(delivered=False, channel=None, outcomes=tuple(outcomes))
        self._log_exhaustion(payload, report, context)
        return report

    def failure_record(
        self,
        payload: NotificationPayload,
        report: DeliveryReport,
        context: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Everything a human needs to follow up on an undelivered notification."""
        return {
            "event": "notification_delivery_failed",
            "application_id": payload.application_id,
            "applicant": payload.field_map(),
            "subject": payload.subject,
            "recipients": list(payload.recipients),
            "environment": {
                "name": self.environment,
                "configured_channels": dict(self.configured_channels),
                "timeout_seconds": self.timeout_seconds,
            },
            "channels": {
                "configured": self.channel_names,
                "attempted": report.attempted_channels,
            },
            "attempts": [outcome.to_dict() for outcome in report.outcomes],
            "next_steps": list(NEXT_STEPS),
            "context": dict(context or {}),
        }

    def _log_exhaustion(
        self,
        payload: NotificationPayload,
        report: DeliveryReport,
        context: Mapping[str, Any] | None,
    ) -> None:
        print(
            "[DELIVERY FAILED] "
            f"application_id={payload.application_id} "
            f"attempted={len(report.outcomes)} configured={len(self.adapters)}"
        )
        print(json.dumps(self.failure_record(payload, report, context), indent=2, sort_keys=True))
