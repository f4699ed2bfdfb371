"""Domain layer: record lifecycle, payload content and delivery values."""

from .delivery import DeliveryOutcome, DeliveryReport
from .notification import NotificationPayload, build_notification_payload
from .records import (
    STATUS_ACCEPTED,
    STATUS_PENDING,
    STATUS_REJECTED,
    STATUSES,
    ApplicationDraft,
    ApplicationRecord,
    check_transition,
    new_record,
    review_record,
)

__all__ = [
    "STATUS_ACCEPTED",
    "STATUS_PENDING",
    "STATUS_REJECTED",
    "STATUSES",
    "ApplicationDraft",
    "ApplicationRecord",
    "DeliveryOutcome",
    "DeliveryReport",
    "NotificationPayload",
    "build_notification_payload",
    "check_transition",
    "new_record",
    "review_record",
]
