#!/usr/bin/env python3
"""Serve the membership JSON API with Flask's development server."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from membership.adapters.http_api import create_app  # noqa: E402
from membership.config import load_config, load_env_file  # noqa: E402


def main() -> int:
    args = parse_args()
    load_env_file(REPO_ROOT / ".env")
    config = load_config()
    app = create_app(config)
    print(
        f"[SERVE] environment={config.environment} dispatch_mode={config.dispatch_mode} "
        f"host={args.host} port={args.port}"
    )
    app.run(host=args.host, port=args.port, debug=False)
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the membership API server.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    return parser.parse_args()


if __name__ == "__main__":
    sys.exit(main())
