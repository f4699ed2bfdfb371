"""Membership applications with fallback admin notification delivery."""

from .channels import (
    AdminSessionGate,
    AppConfig,
    ApplicationNotifier,
    ChannelAdapter,
    DeliveryOrchestrator,
    build_adapter_registry,
    build_notification_payload,
    check_channel_status,
    create_app,
    handle_batch,
    handle_message,
    health_check,
    load_config,
    parse_application_event,
    parse_application_form,
    publish_application_created_event,
    review_application,
    run_notification_worker_forever,
    submit_application,
)

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
