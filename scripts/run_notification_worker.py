#!/usr/bin/env python3
"""Run the Kafka notification worker.

This worker consumes `applications.created` and emails the admins through
the configured fallback chain.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from membership.adapters.kafka_runtime import run_notification_worker_forever  # noqa: E402
from membership.config import load_env_file  # noqa: E402


def main() -> int:
    argparse.ArgumentParser(
        description="Run Kafka consumer loop for admin notifications."
    ).parse_args()
    load_env_file(REPO_ROOT / ".env")
    return run_notification_worker_forever()


if __name__ == "__main__":
    sys.exit(main())
