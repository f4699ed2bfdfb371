"""Compatibility facade for the membership notification service.

Module layout by abstraction layer:
- adapters: transport mapping, provider transports, storage, sessions, HTTP
- domain: record lifecycle, payload content, delivery values
- application: fallback orchestration, diagnostics, submission and review
"""

from .adapters.channel import ChannelAdapter
from .adapters.consumer_handler import handle_batch, handle_message
from .adapters.http_api import create_app
from .adapters.kafka_runtime import publish_application_created_event, run_notification_worker_forever
from .adapters.payload import parse_application_event, parse_application_form
from .adapters.registry import build_adapter_registry
from .application.admin import AdminSessionGate, review_application
from .application.delivery import DeliveryOrchestrator
from .application.diagnostics import check_channel_status, health_check
from .application.submission import ApplicationNotifier, submit_application
from .config import AppConfig, load_config
from .domain.notification import build_notification_payload

__all__ = [
    "AdminSessionGate",
    "AppConfig",
    "ApplicationNotifier",
    "ChannelAdapter",
    "DeliveryOrchestrator",
    "build_adapter_registry",
    "build_notification_payload",
    "check_channel_status",
    "create_app",
    "handle_batch",
    "handle_message",
    "health_check",
    "load_config",
    "parse_application_event",
    "parse_application_form",
    "publish_application_created_event",
    "review_application",
    "run_notification_worker_forever",
    "submit_application",
]
