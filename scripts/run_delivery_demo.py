#!/usr/bin/env python3
"""Run the notification fallback chain locally without real providers.

The demo chain is: a channel that always fails, a channel that hangs past
the timeout, then the console channel. Pass --use-config to run the chain
built from the environment (and .env) instead.
"""

from __future__ import annotations

import argparse
import sys
import threading
from datetime import UTC, datetime
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from membership.adapters.channel import ChannelAdapter  # noqa: E402
from membership.adapters.fake_senders import send_via_console  # noqa: E402
from membership.application.delivery import DeliveryOrchestrator  # noqa: E402
from membership.application.submission import ApplicationNotifier  # noqa: E402
from membership.config import load_config, load_env_file  # noqa: E402
from membership.domain.records import ApplicationRecord  # noqa: E402


def main() -> int:
    args = parse_args()
    if args.use_config:
        load_env_file(REPO_ROOT / ".env")
        notifier = ApplicationNotifier.from_config(load_config())
    else:
        orchestrator = DeliveryOrchestrator(demo_adapters(), timeout_seconds=args.timeout)
        notifier = ApplicationNotifier(
            orchestrator,
            recipients=["admin@example.com"],
            dashboard_url="http://localhost:5000/admin/dashboard",
        )

    report = notifier(sample_record())

    print("")
    print("[SUMMARY]")
    for outcome in report.outcomes:
        print(
            f"channel={outcome.channel} success={outcome.success} "
            f"timed_out={outcome.timed_out} detail={outcome.detail}"
        )
    print(f"delivered={report.delivered} channel={report.channel}")
    return 0 if report.delivered else 1


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Execute the admin notification fallback chain with a sample application."
    )
    parser.add_argument(
        "--use-config",
        action="store_true",
        help="Use the channels configured in the environment instead of the demo chain.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=1.0,
        help="Per-channel timeout in seconds for the demo chain.",
    )
    return parser.parse_args()


def demo_adapters() -> list[ChannelAdapter]:
    never = threading.Event()

    def always_fails(payload, *, timeout_seconds: float) -> None:
        raise RuntimeError("demo provider rejected the API key")

    def hangs(payload, *, timeout_seconds: float) -> None:
        never.wait(timeout_seconds * 2)

    return [
        ChannelAdapter(name="broken-api", send=always_fails),
        ChannelAdapter(name="slow-relay", send=hangs),
        ChannelAdapter(name="console", send=send_via_console),
    ]


def sample_record() -> ApplicationRecord:
    return ApplicationRecord(
        id="app-demo-1",
        name="Ada Lovelace",
        company="Acme",
        role="Engineer",
        email="ada@acme.test",
        consent=True,
        linkedin="https://www.linkedin.com/in/ada-demo",
        submitted_at=datetime(2026, 2, 20, 15, 0, tzinfo=UTC),
    )


if __name__ == "__main__":
    sys.exit(main())
