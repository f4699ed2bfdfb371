"""Application layer: use-case orchestration across adapters."""

from .admin import AdminSessionGate, review_application
from .delivery import DeliveryOrchestrator
from .diagnostics import check_channel_status, health_check
from .submission import ApplicationNotifier, build_dispatcher, run_in_background, submit_application

__all__ = [
    "AdminSessionGate",
    "ApplicationNotifier",
    "DeliveryOrchestrator",
    "build_dispatcher",
    "check_channel_status",
    "health_check",
    "review_application",
    "run_in_background",
    "submit_application",
]
