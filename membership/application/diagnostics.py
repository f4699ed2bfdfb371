"""On-demand channel diagnostics.

`check_channel_status` is the detailed report behind the internal status
endpoint. `health_check` folds it into pass/degraded/fail for external
monitors.
"""

from __future__ import annotations

from typing import Sequence

from ..adapters.channel import ChannelAdapter
from ..types import StatusReport

LOGGING_ONLY = "logging-only"


def check_channel_status(adapters: Sequence[ChannelAdapter], timeout_seconds: float) -> StatusReport:
    """Probe every configured adapter in order and summarize the result."""
    channels = []
    for adapter in adapters:
        outcome = adapter.probe(timeout_seconds)
        channels.append(
            {
                "channel": adapter.name,
                "reachable": outcome.success,
                "timed_out": outcome.timed_out,
                "detail": outcome.detail,
            }
        )
        print(
            f"[CHANNEL CHECK] channel={adapter.name} reachable={outcome.success} "
            f"detail={outcome.detail}"
        )

    configured = len(channels)
    working = [item["channel"] for item in channels if item["reachable"]]
    health_score = int(round(100 * len(working) / configured)) if configured else 0

    report = {
        "channels": channels,
        "configured_channels": configured,
        "working_channels": working,
        "primary_channel": working[0] if working else LOGGING_ONLY,
        "health_score": health_score,
        "recommended_action": _recommended_action(configured, len(working)),
    }
    print(
        f"[CHANNEL SUMMARY] configured={configured} working={len(working)} "
        f"primary={report['primary_channel']} health_score={health_score}"
    )
    return report


def health_check(adapters: Sequence[ChannelAdapter], timeout_seconds: float) -> StatusReport:
    report = check_channel_status(adapters, timeout_seconds)
    configured = report["configured_channels"]
    working = len(report["working_channels"])
    if configured and working == configured:
        status = "pass"
    elif working:
        status = "degraded"
    else:
        status = "fail"
    return {
        "status": status,
        "configured_channels": configured,
        "working_channels": working,
    }


def _recommended_action(configured: int, working: int) -> str:
    if configured == 0:
        return (
            "Configure at least one notification channel "
            "(SMTP, Resend, SendGrid, Mailgun or Formspree)"
        )
    if working == 0:
        return "All channels are unreachable: check credentials, quotas and network access"
    if working < configured:
        return "Some channels are unreachable: fallback is active but redundancy is reduced"
    return "Notification delivery is operational with all fallbacks available"
