"""Application record lifecycle rules.

Mental model refresher:
- A record is created `pending` and leaves that state exactly once.
- `accepted` and `rejected` are terminal.
- Stores call `review_record` so every backend applies the same rule.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from ..errors import InvalidStatusTransitionError

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"

STATUSES = (STATUS_PENDING, STATUS_ACCEPTED, STATUS_REJECTED)
TERMINAL_STATUSES = frozenset({STATUS_ACCEPTED, STATUS_REJECTED})


@dataclass(frozen=True)
class ApplicationDraft:
    """Validated applicant input, before the store assigns identity."""

    name: str
    company: str
    role: str
    email: str
    consent: bool
    linkedin: str | None = None


@dataclass(frozen=True)
class ApplicationRecord:
    id: str
    name: str
    company: str
    role: str
    email: str
    consent: bool
    submitted_at: datetime
    linkedin: str | None = None
    status: str = STATUS_PENDING
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "company": self.company,
            "role": self.role,
            "email": self.email,
            "linkedin": self.linkedin,
            "consent": self.consent,
            "status": self.status,
            "submitted_at": self.submitted_at.isoformat(),
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "reviewed_by": self.reviewed_by,
        }


def new_record(draft: ApplicationDraft, *, application_id: str, submitted_at: datetime) -> ApplicationRecord:
    return ApplicationRecord(
        id=application_id,
        name=draft.name,
        company=draft.company,
        role=draft.role,
        email=draft.email,
        consent=draft.consent,
        linkedin=draft.linkedin,
        submitted_at=submitted_at,
    )


def check_transition(record: ApplicationRecord, status: str) -> None:
    """Raise unless `record` may move to `status`."""
    if status not in TERMINAL_STATUSES or record.status != STATUS_PENDING:
        raise InvalidStatusTransitionError(record.id, record.status, status)


def review_record(
    record: ApplicationRecord,
    status: str,
    *,
    reviewed_by: str,
    reviewed_at: datetime,
) -> ApplicationRecord:
    """Return the reviewed copy of a pending record."""
    check_transition(record, status)
    return replace(record, status=status, reviewed_at=reviewed_at, reviewed_by=reviewed_by)
