"""Channel adapter contract.

Mental model refresher:
- A channel is one concrete transport (SMTP relay, Resend, Formspree, ...).
- `ChannelAdapter` wraps a transport function behind one contract:
  `attempt(payload, timeout_seconds) -> DeliveryOutcome`.
- `attempt` never raises. Exceptions and timeouts become failed outcomes.
- The transport runs on a daemon thread joined with the timeout. The
  transport also receives the timeout for its own socket calls, so an
  abandoned call unwinds by itself instead of being killed.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable

from ..domain.delivery import DeliveryOutcome
from ..domain.notification import NotificationPayload
from ..types import CheckFn, SendFn


class AttemptTimeout(Exception):
    pass


@dataclass(frozen=True)
class ChannelAdapter:
    name: str
    send: SendFn
    check: CheckFn | None = None

    def attempt(self, payload: NotificationPayload, timeout_seconds: float) -> DeliveryOutcome:
        """Make exactly one delivery attempt and describe how it went."""
        problem = _payload_problem(payload)
        if problem is not None:
            return _outcome(self.name, False, problem, datetime.now(tz=UTC), 0.0)

        return _run_attempt(
            self.name,
            lambda: self.send(payload, timeout_seconds=timeout_seconds),
            timeout_seconds,
            success_detail="delivered",
        )

    def probe(self, timeout_seconds: float) -> DeliveryOutcome:
        """Run the lightweight reachability check; never sends a message."""
        if self.check is None:
            return _outcome(self.name, True, "no reachability check available", datetime.now(tz=UTC), 0.0)

        check = self.check
        return _run_attempt(
            self.name,
            lambda: check(timeout_seconds=timeout_seconds),
            timeout_seconds,
            success_detail="reachable",
        )


def _run_attempt(
    name: str,
    call: Callable[[], None],
    timeout_seconds: float,
    *,
    success_detail: str,
) -> DeliveryOutcome:
    timestamp = datetime.now(tz=UTC)
    started = time.monotonic()
    try:
        _call_with_timeout(call, timeout_seconds, thread_name=f"channel-{name}")
    except AttemptTimeout:
        return _outcome(
            name,
            False,
            f"timed out after {timeout_seconds:g}s",
            timestamp,
            time.monotonic() - started,
            timed_out=True,
        )
    except Exception as exc:
        detail = str(exc) or type(exc).__name__
        return _outcome(name, False, detail, timestamp, time.monotonic() - started)

    return _outcome(name, True, success_detail, timestamp, time.monotonic() - started)


def _call_with_timeout(call: Callable[[], None], timeout_seconds: float, *, thread_name: str) -> None:
    errors: list[Exception] = []
    finished = threading.Event()

    def target() -> None:
        try:
            call()
        except Exception as exc:
            errors.append(exc)
        finally:
            finished.set()

    worker = threading.Thread(target=target, name=thread_name, daemon=True)
    worker.start()
    if not finished.wait(timeout_seconds):
        raise AttemptTimeout(thread_name)
    if errors:
        raise errors[0]


def _payload_problem(payload: NotificationPayload) -> str | None:
    if not payload.recipients:
        return "payload has no recipients"
    if not payload.subject.strip():
        return "payload subject is empty"
    return None


def _outcome(
    name: str,
    success: bool,
    detail: str,
    timestamp: datetime,
    elapsed_seconds: float,
    *,
    timed_out: bool = False,
) -> DeliveryOutcome:
    return DeliveryOutcome(
        channel=name,
        success=success,
        detail=detail,
        timestamp=timestamp,
        elapsed_seconds=elapsed_seconds,
        timed_out=timed_out,
    )
