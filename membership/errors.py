"""Exceptions raised by the store, review and submission use-cases.

Delivery failures are never raised: they travel as `DeliveryOutcome` values.
"""

from __future__ import annotations


class MembershipError(Exception):
    """Base class for membership application errors."""


class ApplicationValidationError(MembershipError, ValueError):
    """Submitted form data failed validation."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        summary = ", ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Validation failed: {summary}")


class ApplicationNotFoundError(MembershipError, LookupError):
    def __init__(self, application_id: str) -> None:
        self.application_id = application_id
        super().__init__(f"Application not found: {application_id}")


class InvalidStatusTransitionError(MembershipError):
    """A status change that would leave a terminal state, or is not a status at all."""

    def __init__(self, application_id: str, current: str, requested: str) -> None:
        self.application_id = application_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move application {application_id} from {current!r} to {requested!r}"
        )


class AdminAuthorizationError(MembershipError, PermissionError):
    """Status mutation attempted without a valid admin session."""

    def __init__(self, message: str = "Admin session required") -> None:
        super().__init__(message)
