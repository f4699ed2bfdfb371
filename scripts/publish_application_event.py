#!/usr/bin/env python3
"""Publish one `applications.created` event to Kafka for local testing."""

from __future__ import annotations

import argparse
import sys
import uuid
from datetime import UTC, datetime
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from membership.adapters.kafka_runtime import publish_application_created_event  # noqa: E402
from membership.config import load_env_file  # noqa: E402
from membership.domain.records import ApplicationRecord  # noqa: E402


def main() -> int:
    load_env_file(REPO_ROOT / ".env")
    args = parse_args()
    record = build_record(args)
    metadata = publish_application_created_event(record, topic=args.topic)

    print(f"application_id={record.id} applicant={record.email}")
    print(f"offset={metadata['offset']} event_id={metadata['event_id']}")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Publish one applications.created event for Kafka testing."
    )
    parser.add_argument("--email", required=True, help="Applicant email address.")
    parser.add_argument("--name", default="Demo Applicant", help="Applicant name.")
    parser.add_argument("--company", default="Acme", help="Applicant company.")
    parser.add_argument("--role", default="Analyst", help="Applicant role.")
    parser.add_argument("--linkedin", default=None, help="Optional LinkedIn profile URL.")
    parser.add_argument(
        "--application-id",
        default=None,
        help="Optional application id. Default: generated UUID.",
    )
    parser.add_argument(
        "--topic",
        default=None,
        help="Override Kafka topic (defaults to KAFKA_TOPIC_APPLICATIONS_CREATED).",
    )
    return parser.parse_args()


def build_record(args: argparse.Namespace) -> ApplicationRecord:
    return ApplicationRecord(
        id=args.application_id or str(uuid.uuid4()),
        name=args.name,
        company=args.company,
        role=args.role,
        email=args.email,
        linkedin=args.linkedin,
        consent=True,
        submitted_at=datetime.now(tz=UTC),
    )


if __name__ == "__main__":
    sys.exit(main())
