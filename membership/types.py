"""Shared type aliases for the membership package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping

if TYPE_CHECKING:
    from .domain.records import ApplicationRecord

Event = Mapping[str, Any]
EventDict = dict[str, Any]
FormData = Mapping[str, Any]
RequestContext = Mapping[str, Any]
StatusReport = dict[str, Any]
HandlingResult = dict[str, Any]

# Transport senders take a built payload plus a socket timeout and raise
# RuntimeError on any vendor/network failure.
SendFn = Callable[..., None]
CheckFn = Callable[..., None]
NotifyFn = Callable[["ApplicationRecord"], None]
Clock = Callable[[], float]
