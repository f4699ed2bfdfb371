"""Environment-variable configuration, read once at process start.

Presence of a channel's credentials is what turns that channel on. A process
with no credentials at all is still valid: its adapter registry is empty and
every delivery is an immediate exhaustion.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

DISPATCH_MODES = ("inline", "thread", "kafka")


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int
    username: str
    password: str
    from_email: str
    use_ssl: bool = True


@dataclass(frozen=True)
class ResendSettings:
    api_key: str
    from_email: str
    base_url: str = "https://api.resend.com"


@dataclass(frozen=True)
class SendGridSettings:
    api_key: str
    from_email: str
    from_name: str = "Membership System"
    base_url: str = "https://api.sendgrid.com"


@dataclass(frozen=True)
class MailgunSettings:
    api_key: str
    domain: str
    from_email: str
    base_url: str = "https://api.mailgun.net"


@dataclass(frozen=True)
class FormspreeSettings:
    endpoint: str


@dataclass(frozen=True)
class AppConfig:
    environment: str = "development"
    admin_emails: tuple[str, ...] = ()
    society_name: str = "DYPS"
    public_base_url: str = "http://localhost:5000"
    adapter_timeout_seconds: float = 10.0
    dispatch_mode: str = "thread"
    console_enabled: bool = False
    smtp: SmtpSettings | None = None
    resend: ResendSettings | None = None
    sendgrid: SendGridSettings | None = None
    mailgun: MailgunSettings | None = None
    formspree: FormspreeSettings | None = None
    admin_username: str | None = None
    admin_password: str | None = None
    session_ttl_seconds: float = 86400.0
    database_path: str | None = None
    secret_key: str = field(default="dev-secret-key", repr=False)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def dashboard_url(self) -> str:
        return f"{self.public_base_url.rstrip('/')}/admin/dashboard"

    def configured_channels(self) -> dict[str, bool]:
        """Credential presence per channel, for diagnostics and failure records."""
        return {
            "smtp": self.smtp is not None,
            "resend": self.resend is not None,
            "sendgrid": self.sendgrid is not None,
            "mailgun": self.mailgun is not None,
            "formspree": self.formspree is not None,
            "console": self.console_enabled,
        }


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Build an `AppConfig` from environment variables."""
    env = os.environ if environ is None else environ

    environment = (_optional(env, "APP_ENV") or "development").lower()
    dispatch_mode = (_optional(env, "NOTIFY_DISPATCH_MODE") or "thread").lower()
    if dispatch_mode not in DISPATCH_MODES:
        raise RuntimeError(
            f"NOTIFY_DISPATCH_MODE must be one of {', '.join(DISPATCH_MODES)}: {dispatch_mode!r}"
        )

    timeout_seconds = _env_float(env, "NOTIFY_ADAPTER_TIMEOUT_SECONDS", 10.0)
    if timeout_seconds <= 0:
        raise RuntimeError("NOTIFY_ADAPTER_TIMEOUT_SECONDS must be > 0")

    return AppConfig(
        environment=environment,
        admin_emails=_env_csv(env, "ADMIN_EMAIL"),
        society_name=_optional(env, "SOCIETY_NAME") or "DYPS",
        public_base_url=_optional(env, "PUBLIC_BASE_URL") or "http://localhost:5000",
        adapter_timeout_seconds=timeout_seconds,
        dispatch_mode=dispatch_mode,
        console_enabled=_env_bool(env, "NOTIFY_CONSOLE_ENABLED", default=False),
        smtp=_smtp_settings(env),
        resend=_resend_settings(env),
        sendgrid=_sendgrid_settings(env),
        mailgun=_mailgun_settings(env),
        formspree=_formspree_settings(env),
        admin_username=_optional(env, "ADMIN_USERNAME"),
        admin_password=_optional(env, "ADMIN_PASSWORD"),
        session_ttl_seconds=_env_float(env, "ADMIN_SESSION_TTL_SECONDS", 86400.0),
        database_path=_optional(env, "DATABASE_PATH"),
        secret_key=_optional(env, "SECRET_KEY") or "dev-secret-key",
    )


def load_env_file(path: Path) -> None:
    """Load KEY=VALUE lines into os.environ without overriding existing values."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#") or "=" not in text:
            continue
        key, value = text.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def _smtp_settings(env: Mapping[str, str]) -> SmtpSettings | None:
    username = _optional(env, "SMTP_USER")
    password = _optional(env, "SMTP_PASSWORD")
    if not (username and password):
        return None
    use_ssl = _env_bool(env, "SMTP_USE_SSL", default=True)
    return SmtpSettings(
        host=_optional(env, "SMTP_HOST") or "smtp.gmail.com",
        port=_env_int(env, "SMTP_PORT", 465 if use_ssl else 587),
        username=username,
        password=password,
        from_email=_optional(env, "SMTP_FROM_EMAIL") or username,
        use_ssl=use_ssl,
    )


def _resend_settings(env: Mapping[str, str]) -> ResendSettings | None:
    api_key = _optional(env, "RESEND_API_KEY")
    if not api_key:
        return None
    return ResendSettings(
        api_key=api_key,
        from_email=_optional(env, "RESEND_FROM_EMAIL") or "Membership <noreply@example.com>",
        base_url=(_optional(env, "RESEND_API_BASE_URL") or "https://api.resend.com").rstrip("/"),
    )


def _sendgrid_settings(env: Mapping[str, str]) -> SendGridSettings | None:
    api_key = _optional(env, "SENDGRID_API_KEY")
    if not api_key:
        return None
    return SendGridSettings(
        api_key=api_key,
        from_email=_optional(env, "SENDGRID_FROM_EMAIL") or "noreply@example.com",
        from_name=_optional(env, "SENDGRID_FROM_NAME") or "Membership System",
        base_url=(_optional(env, "SENDGRID_API_BASE_URL") or "https://api.sendgrid.com").rstrip("/"),
    )


def _mailgun_settings(env: Mapping[str, str]) -> MailgunSettings | None:
    api_key = _optional(env, "MAILGUN_API_KEY")
    domain = _optional(env, "MAILGUN_DOMAIN")
    from_email = _optional(env, "MAILGUN_FROM_EMAIL")
    if not (api_key and domain and from_email):
        return None
    return MailgunSettings(
        api_key=api_key,
        domain=domain,
        from_email=from_email,
        base_url=(_optional(env, "MAILGUN_API_BASE_URL") or "https://api.mailgun.net").rstrip("/"),
    )


def _formspree_settings(env: Mapping[str, str]) -> FormspreeSettings | None:
    endpoint = _optional(env, "FORMSPREE_ENDPOINT")
    if not endpoint:
        return None
    return FormspreeSettings(endpoint=endpoint)


def _optional(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_csv(env: Mapping[str, str], name: str) -> tuple[str, ...]:
    raw = _optional(env, name) or ""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _optional(env, name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid number for {name}: {raw!r}") from exc


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _optional(env, name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid integer for {name}: {raw!r}") from exc


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}: {raw!r}")
