"""Delivery result values shared by adapters and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of exactly one adapter attempt."""

    channel: str
    success: bool
    detail: str
    timestamp: datetime
    elapsed_seconds: float = 0.0
    timed_out: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel,
            "success": self.success,
            "detail": self.detail,
            "timestamp": self.timestamp.isoformat(),
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "timed_out": self.timed_out,
        }


@dataclass(frozen=True)
class DeliveryReport:
    """Aggregate result of one notification event.

    `channel` names the delivering channel; it is None on exhaustion, in
    which case `outcomes` holds one failed outcome per attempted adapter.
    """

    delivered: bool
    channel: str | None
    outcomes: tuple[DeliveryOutcome, ...] = field(default_factory=tuple)

    @property
    def attempted_channels(self) -> list[str]:
        return [outcome.channel for outcome in self.outcomes]

    def to_dict(self) -> dict[str, Any]:
        return {
            "delivered": self.delivered,
            "channel": self.channel,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }
