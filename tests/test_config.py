from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from membership.config import load_config, load_env_file


class LoadConfigTests(unittest.TestCase):
    def test_defaults_without_environment(self) -> None:
        config = load_config({})

        self.assertEqual(config.environment, "development")
        self.assertEqual(config.admin_emails, ())
        self.assertEqual(config.adapter_timeout_seconds, 10.0)
        self.assertEqual(config.dispatch_mode, "thread")
        self.assertIsNone(config.smtp)
        self.assertIsNone(config.formspree)
        self.assertFalse(any(config.configured_channels().values()))

    def test_reads_admin_emails_and_dashboard(self) -> None:
        config = load_config(
            {
                "ADMIN_EMAIL": "a@example.com, b@example.com,,",
                "PUBLIC_BASE_URL": "https://dyps.test/",
            }
        )

        self.assertEqual(config.admin_emails, ("a@example.com", "b@example.com"))
        self.assertEqual(config.dashboard_url, "https://dyps.test/admin/dashboard")

    def test_smtp_requires_user_and_password(self) -> None:
        config = load_config({"SMTP_USER": "relay@example.com", "SMTP_PASSWORD": "pw"})

        assert config.smtp is not None
        self.assertEqual(config.smtp.host, "smtp.gmail.com")
        self.assertEqual(config.smtp.port, 465)
        self.assertEqual(config.smtp.from_email, "relay@example.com")

    def test_smtp_starttls_defaults_to_587(self) -> None:
        config = load_config(
            {"SMTP_USER": "u", "SMTP_PASSWORD": "p", "SMTP_USE_SSL": "false"}
        )

        assert config.smtp is not None
        self.assertFalse(config.smtp.use_ssl)
        self.assertEqual(config.smtp.port, 587)

    def test_invalid_values_raise(self) -> None:
        for env in (
            {"NOTIFY_CONSOLE_ENABLED": "maybe"},
            {"NOTIFY_ADAPTER_TIMEOUT_SECONDS": "soon"},
            {"NOTIFY_ADAPTER_TIMEOUT_SECONDS": "0"},
            {"NOTIFY_DISPATCH_MODE": "carrier-pigeon"},
            {"SMTP_USER": "u", "SMTP_PASSWORD": "p", "SMTP_PORT": "smtp"},
        ):
            with self.subTest(env=env):
                with self.assertRaises(RuntimeError):
                    load_config(env)

    @mock.patch.dict(os.environ, {"APP_ENV": "Production"}, clear=True)
    def test_reads_process_environment_by_default(self) -> None:
        self.assertTrue(load_config().is_production)


class LoadEnvFileTests(unittest.TestCase):
    @mock.patch.dict(os.environ, {"EXISTING": "keep"}, clear=True)
    def test_loads_values_without_overriding(self) -> None:
        with tempfile.TemporaryDirectory() as directory:
            path = Path(directory) / ".env"
            path.write_text(
                "# comment\nEXISTING=override\nRESEND_API_KEY='re_123'\nBROKEN LINE\n",
                encoding="utf-8",
            )

            load_env_file(path)

            self.assertEqual(os.environ["EXISTING"], "keep")
            self.assertEqual(os.environ["RESEND_API_KEY"], "re_123")

    def test_missing_file_is_ignored(self) -> None:
        load_env_file(Path("/nonexistent/.env"))


if __name__ == "__main__":
    unittest.main()
