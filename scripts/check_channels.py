#!/usr/bin/env python3
"""Probe every configured notification channel and print the health report."""

from __future__ import annotations

import json
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from membership.adapters.registry import build_adapter_registry  # noqa: E402
from membership.application.diagnostics import check_channel_status  # noqa: E402
from membership.config import load_config, load_env_file  # noqa: E402


def main() -> int:
    load_env_file(REPO_ROOT / ".env")
    config = load_config()
    report = check_channel_status(build_adapter_registry(config), config.adapter_timeout_seconds)
    print(json.dumps(report, indent=2))
    return 0 if report["working_channels"] else 1


if __name__ == "__main__":
    sys.exit(main())
