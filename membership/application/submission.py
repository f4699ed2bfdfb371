"""Submission use-case and notification dispatch.

Mental model refresher:
- The record is durably created before any notification work starts.
- Notification runs through an injected `notify` callable. Whatever it
  does (inline delivery, background thread, Kafka publish), a failure
  there is logged and never turns into a submission failure.
"""

from __future__ import annotations

import threading
from typing import Any, Mapping, Sequence

from ..adapters.payload import parse_application_form
from ..adapters.store import ApplicationStore
from ..config import AppConfig
from ..domain.delivery import DeliveryReport
from ..domain.notification import NotificationPayload, build_notification_payload
from ..domain.records import ApplicationRecord
from ..types import FormData, NotifyFn
from .delivery import DeliveryOrchestrator


class ApplicationNotifier:
    """Build the admin notification for a record and run the fallback chain."""

    def __init__(
        self,
        orchestrator: DeliveryOrchestrator,
        *,
        recipients: Sequence[str],
        society_name: str = "DYPS",
        dashboard_url: str = "",
    ) -> None:
        self.orchestrator = orchestrator
        self.recipients = tuple(recipients)
        self.society_name = society_name
        self.dashboard_url = dashboard_url

    @classmethod
    def from_config(cls, config: AppConfig, orchestrator: DeliveryOrchestrator | None = None) -> ApplicationNotifier:
        return cls(
            orchestrator or DeliveryOrchestrator.from_config(config),
            recipients=config.admin_emails,
            society_name=config.society_name,
            dashboard_url=config.dashboard_url,
        )

    def build_payload(self, record: ApplicationRecord) -> NotificationPayload:
        return build_notification_payload(
            record,
            recipients=self.recipients,
            society_name=self.society_name,
            dashboard_url=self.dashboard_url,
        )

    def __call__(self, record: ApplicationRecord, context: Mapping[str, Any] | None = None) -> DeliveryReport:
        return self.orchestrator.deliver(self.build_payload(record), context)


def submit_application(
    form: FormData,
    *,
    store: ApplicationStore,
    notify: NotifyFn | None = None,
) -> ApplicationRecord:
    """Validate and persist an application, then hand it to `notify`.

    Raises `ApplicationValidationError` for bad input; nothing else about
    notification can make this call fail.
    """
    draft = parse_application_form(form)
    record = store.create(draft)
    print(f"[SUBMITTED] application_id={record.id} email={record.email}")

    if notify is not None:
        try:
            notify(record)
        except Exception as exc:
            print(
                "[NOTIFY ERROR] "
                f"application_id={record.id} error={type(exc).__name__}: {exc}"
            )
    return record


def run_in_background(notify: NotifyFn) -> NotifyFn:
    """Wrap `notify` so it runs on a daemon thread and returns immediately."""

    def dispatch(record: ApplicationRecord) -> None:
        def target() -> None:
            try:
                notify(record)
            except Exception as exc:
                print(
                    "[NOTIFY ERROR] "
                    f"application_id={record.id} error={type(exc).__name__}: {exc}"
                )

        worker = threading.Thread(target=target, name=f"notify-{record.id}", daemon=True)
        worker.start()

    return dispatch


def build_dispatcher(config: AppConfig, notifier: ApplicationNotifier) -> NotifyFn:
    """Select how submissions reach the notifier, per NOTIFY_DISPATCH_MODE."""
    if config.dispatch_mode == "inline":
        return notifier
    if config.dispatch_mode == "kafka":
        from ..adapters.kafka_runtime import publish_application_created_event

        def publish(record: ApplicationRecord) -> None:
            publish_application_created_event(record)

        return publish
    return run_in_background(notifier)
