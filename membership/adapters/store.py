"""Application store adapters.

Mental model refresher:
- The store owns application records: create, read, list and the single
  status transition out of `pending`.
- Both backends apply `review_record` so the lifecycle rule lives in one
  place; each backend makes the transition atomic per record.
- Listing is newest first.
"""

from __future__ import annotations

import sqlite3
import threading
import uuid
from datetime import UTC, datetime
from typing import Callable

from ..domain.records import (
    STATUS_ACCEPTED,
    STATUS_PENDING,
    STATUS_REJECTED,
    STATUSES,
    ApplicationDraft,
    ApplicationRecord,
    new_record,
    review_record,
)
from ..errors import ApplicationNotFoundError, InvalidStatusTransitionError

NowFn = Callable[[], datetime]
IdFn = Callable[[], str]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


class ApplicationStore:
    """Shared listing helpers; subclasses implement storage."""

    def create(self, draft: ApplicationDraft) -> ApplicationRecord:
        raise NotImplementedError

    def get(self, application_id: str) -> ApplicationRecord:
        raise NotImplementedError

    def list_applications(self, status: str | None = None) -> list[ApplicationRecord]:
        raise NotImplementedError

    def update_status(self, application_id: str, status: str, *, reviewed_by: str) -> ApplicationRecord:
        raise NotImplementedError

    def list_pending(self) -> list[ApplicationRecord]:
        return self.list_applications(STATUS_PENDING)

    def list_accepted(self) -> list[ApplicationRecord]:
        return self.list_applications(STATUS_ACCEPTED)

    def list_rejected(self) -> list[ApplicationRecord]:
        return self.list_applications(STATUS_REJECTED)


class MemoryApplicationStore(ApplicationStore):
    def __init__(self, *, now: NowFn = _utc_now, new_id: IdFn = _new_id) -> None:
        self._records: dict[str, ApplicationRecord] = {}
        self._order: dict[str, int] = {}
        self._lock = threading.Lock()
        self._now = now
        self._new_id = new_id

    def create(self, draft: ApplicationDraft) -> ApplicationRecord:
        record = new_record(draft, application_id=self._new_id(), submitted_at=self._now())
        with self._lock:
            self._records[record.id] = record
            self._order[record.id] = len(self._order)
        print(f"[STORE] created application_id={record.id} status={record.status}")
        return record

    def get(self, application_id: str) -> ApplicationRecord:
        with self._lock:
            record = self._records.get(application_id)
        if record is None:
            raise ApplicationNotFoundError(application_id)
        return record

    def list_applications(self, status: str | None = None) -> list[ApplicationRecord]:
        _check_status_filter(status)
        with self._lock:
            records = [
                record
                for record in self._records.values()
                if status is None or record.status == status
            ]
            order = dict(self._order)
        return sorted(records, key=lambda item: (item.submitted_at, order[item.id]), reverse=True)

    def update_status(self, application_id: str, status: str, *, reviewed_by: str) -> ApplicationRecord:
        with self._lock:
            record = self._records.get(application_id)
            if record is None:
                raise ApplicationNotFoundError(application_id)
            reviewed = review_record(record, status, reviewed_by=reviewed_by, reviewed_at=self._now())
            self._records[application_id] = reviewed
        print(
            f"[STORE] reviewed application_id={application_id} status={status} "
            f"reviewed_by={reviewed_by}"
        )
        return reviewed


class SqliteApplicationStore(ApplicationStore):
    """SQLite-backed store; one connection guarded by a lock."""

    def __init__(
        self,
        path: str = ":memory:",
        *,
        now: NowFn = _utc_now,
        new_id: IdFn = _new_id,
    ) -> None:
        self._connection = sqlite3.connect(path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._now = now
        self._new_id = new_id
        self._initialize_tables()

    def _initialize_tables(self) -> None:
        with self._lock, self._connection:
            self._connection.execute(
                """
                CREATE TABLE IF NOT EXISTS membership_applications (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    company TEXT NOT NULL,
                    role TEXT NOT NULL,
                    email TEXT NOT NULL,
                    linkedin TEXT,
                    consent INTEGER NOT NULL DEFAULT 0,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'accepted', 'rejected')),
                    submitted_at TEXT NOT NULL,
                    reviewed_at TEXT,
                    reviewed_by TEXT
                )
                """
            )
            self._connection.execute(
                "CREATE INDEX IF NOT EXISTS idx_applications_status "
                "ON membership_applications(status)"
            )

    def create(self, draft: ApplicationDraft) -> ApplicationRecord:
        record = new_record(draft, application_id=self._new_id(), submitted_at=self._now())
        with self._lock, self._connection:
            self._connection.execute(
                """
                INSERT INTO membership_applications
                (id, name, company, role, email, linkedin, consent, status, submitted_at,
                 reviewed_at, reviewed_by)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, NULL, NULL)
                """,
                (
                    record.id,
                    record.name,
                    record.company,
                    record.role,
                    record.email,
                    record.linkedin,
                    int(record.consent),
                    record.status,
                    record.submitted_at.isoformat(),
                ),
            )
        print(f"[STORE] created application_id={record.id} status={record.status}")
        return record

    def get(self, application_id: str) -> ApplicationRecord:
        with self._lock:
            row = self._fetch_row(application_id)
        if row is None:
            raise ApplicationNotFoundError(application_id)
        return _row_to_record(row)

    def list_applications(self, status: str | None = None) -> list[ApplicationRecord]:
        _check_status_filter(status)
        query = "SELECT * FROM membership_applications"
        params: tuple[str, ...] = ()
        if status is not None:
            query += " WHERE status = ?"
            params = (status,)
        query += " ORDER BY submitted_at DESC, rowid DESC"
        with self._lock:
            rows = self._connection.execute(query, params).fetchall()
        return [_row_to_record(row) for row in rows]

    def update_status(self, application_id: str, status: str, *, reviewed_by: str) -> ApplicationRecord:
        with self._lock, self._connection:
            row = self._fetch_row(application_id)
            if row is None:
                raise ApplicationNotFoundError(application_id)
            reviewed = review_record(
                _row_to_record(row), status, reviewed_by=reviewed_by, reviewed_at=self._now()
            )
            cursor = self._connection.execute(
                """
                UPDATE membership_applications
                SET status = ?, reviewed_at = ?, reviewed_by = ?
                WHERE id = ? AND status = 'pending'
                """,
                (status, reviewed.reviewed_at.isoformat(), reviewed_by, application_id),
            )
            if cursor.rowcount != 1:
                raise InvalidStatusTransitionError(application_id, row["status"], status)
        print(
            f"[STORE] reviewed application_id={application_id} status={status} "
            f"reviewed_by={reviewed_by}"
        )
        return reviewed

    def close(self) -> None:
        self._connection.close()

    def _fetch_row(self, application_id: str) -> sqlite3.Row | None:
        return self._connection.execute(
            "SELECT * FROM membership_applications WHERE id = ?", (application_id,)
        ).fetchone()


def _check_status_filter(status: str | None) -> None:
    if status is not None and status not in STATUSES:
        raise ValueError(f"Unknown application status: {status!r}")


def _row_to_record(row: sqlite3.Row) -> ApplicationRecord:
    return ApplicationRecord(
        id=row["id"],
        name=row["name"],
        company=row["company"],
        role=row["role"],
        email=row["email"],
        linkedin=row["linkedin"],
        consent=bool(row["consent"]),
        status=row["status"],
        submitted_at=datetime.fromisoformat(row["submitted_at"]),
        reviewed_at=datetime.fromisoformat(row["reviewed_at"]) if row["reviewed_at"] else None,
        reviewed_by=row["reviewed_by"],
    )
