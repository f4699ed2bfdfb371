"""Declarative adapter registry, built once from configuration.

Order policy:
- production prefers the paid transactional APIs, then the form relay,
  then SMTP;
- every other environment prefers the locally configured SMTP relay first,
  and may end with the console adapter for development.
A channel is included only when its credentials are configured.
"""

from __future__ import annotations

from functools import partial

from ..config import AppConfig
from .channel import ChannelAdapter
from .fake_senders import check_console, send_via_console
from .real_senders import (
    check_formspree,
    check_mailgun,
    check_resend,
    check_sendgrid,
    check_smtp,
    send_via_formspree,
    send_via_mailgun,
    send_via_resend,
    send_via_sendgrid,
    send_via_smtp,
)

PRODUCTION_ORDER = ("resend", "sendgrid", "mailgun", "formspree", "smtp")
DEVELOPMENT_ORDER = ("smtp", "resend", "sendgrid", "mailgun", "formspree", "console")


def build_adapter_registry(config: AppConfig) -> tuple[ChannelAdapter, ...]:
    available = _configured_adapters(config)
    order = PRODUCTION_ORDER if config.is_production else DEVELOPMENT_ORDER
    return tuple(available[name] for name in order if name in available)


def _configured_adapters(config: AppConfig) -> dict[str, ChannelAdapter]:
    adapters: dict[str, ChannelAdapter] = {}
    if config.smtp is not None:
        adapters["smtp"] = ChannelAdapter(
            name="smtp",
            send=partial(send_via_smtp, settings=config.smtp),
            check=partial(check_smtp, settings=config.smtp),
        )
    if config.resend is not None:
        adapters["resend"] = ChannelAdapter(
            name="resend",
            send=partial(send_via_resend, settings=config.resend),
            check=partial(check_resend, settings=config.resend),
        )
    if config.sendgrid is not None:
        adapters["sendgrid"] = ChannelAdapter(
            name="sendgrid",
            send=partial(send_via_sendgrid, settings=config.sendgrid),
            check=partial(check_sendgrid, settings=config.sendgrid),
        )
    if config.mailgun is not None:
        adapters["mailgun"] = ChannelAdapter(
            name="mailgun",
            send=partial(send_via_mailgun, settings=config.mailgun),
            check=partial(check_mailgun, settings=config.mailgun),
        )
    if config.formspree is not None:
        adapters["formspree"] = ChannelAdapter(
            name="formspree",
            send=partial(send_via_formspree, settings=config.formspree),
            check=partial(check_formspree, settings=config.formspree),
        )
    if config.console_enabled and not config.is_production:
        adapters["console"] = ChannelAdapter(
            name="console",
            send=send_via_console,
            check=check_console,
        )
    return adapters
