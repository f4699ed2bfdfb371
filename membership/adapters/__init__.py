"""Adapter layer: transport mapping, provider transports, storage and sessions."""

from .channel import ChannelAdapter
from .consumer_handler import handle_batch, handle_message
from .fake_senders import send_via_console
from .kafka_runtime import publish_application_created_event, run_notification_worker_forever
from .payload import (
    build_application_created_event,
    parse_application_event,
    parse_application_form,
)
from .registry import build_adapter_registry
from .sessions import AdminSession, InMemorySessionStore
from .store import ApplicationStore, MemoryApplicationStore, SqliteApplicationStore

__all__ = [
    "AdminSession",
    "ApplicationStore",
    "ChannelAdapter",
    "InMemorySessionStore",
    "MemoryApplicationStore",
    "SqliteApplicationStore",
    "build_adapter_registry",
    "build_application_created_event",
    "handle_batch",
    "handle_message",
    "parse_application_event",
    "parse_application_form",
    "publish_application_created_event",
    "run_notification_worker_forever",
    "send_via_console",
]
