from __future__ import annotations

import contextlib
import io
import unittest
from typing import Any

from membership.adapters.channel import ChannelAdapter
from membership.adapters.http_api import HEALTH_PROBE_TIMEOUT_SECONDS, SESSION_COOKIE, create_app
from membership.adapters.store import MemoryApplicationStore
from membership.config import AppConfig
from membership.domain.records import ApplicationRecord


def valid_form(**overrides: Any) -> dict[str, Any]:
    base: dict[str, Any] = {
        "name": "Ada Lovelace",
        "company": "Acme",
        "role": "Engineer",
        "email": "ada@acme.test",
        "linkedin": "https://linkedin.com/in/ada",
        "consent": True,
    }
    return base | overrides


class HttpApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self._stdout = contextlib.redirect_stdout(io.StringIO())
        self._stdout.__enter__()
        self.addCleanup(self._stdout.__exit__, None, None, None)

        self.notified: list[ApplicationRecord] = []
        self.store = MemoryApplicationStore()
        self.app = create_app(
            AppConfig(admin_username="admin", admin_password="pw", dispatch_mode="inline"),
            store=self.store,
            notify=self.notified.append,
            adapters=[],
        )
        self.client = self.app.test_client()

    def submit(self, **overrides: Any) -> dict[str, Any]:
        response = self.client.post("/api/membership-applications", json=valid_form(**overrides))
        self.assertEqual(response.status_code, 200)
        return response.get_json()["application"]

    def login(self) -> None:
        response = self.client.post("/api/admin/login", json={"username": "admin", "password": "pw"})
        self.assertEqual(response.status_code, 200)

    def test_submission_stores_pending_record_and_notifies(self) -> None:
        application = self.submit()

        self.assertEqual(application["status"], "pending")
        self.assertEqual(self.store.get(application["id"]).email, "ada@acme.test")
        self.assertEqual([record.id for record in self.notified], [application["id"]])

    def test_invalid_submission_returns_field_errors(self) -> None:
        response = self.client.post(
            "/api/membership-applications", json=valid_form(email="nope", consent=False)
        )

        self.assertEqual(response.status_code, 400)
        body = response.get_json()
        self.assertEqual(set(body["errors"]), {"email", "consent"})
        self.assertEqual(self.store.list_applications(), [])
        self.assertEqual(self.notified, [])

    def test_login_rejects_bad_credentials(self) -> None:
        response = self.client.post("/api/admin/login", json={"username": "admin", "password": "wrong"})

        self.assertEqual(response.status_code, 401)
        self.assertFalse(self.client.get("/api/admin/session").get_json()["authenticated"])

    def test_login_sets_http_only_session_cookie(self) -> None:
        response = self.client.post("/api/admin/login", json={"username": "admin", "password": "pw"})

        self.assertEqual(response.status_code, 200)
        cookie_header = response.headers["Set-Cookie"]
        self.assertIn(f"{SESSION_COOKIE}=", cookie_header)
        self.assertIn("HttpOnly", cookie_header)
        session = self.client.get("/api/admin/session").get_json()
        self.assertEqual(session, {"authenticated": True, "operator": "admin"})

    def test_unauthorized_status_change_leaves_record_pending(self) -> None:
        application = self.submit()

        response = self.client.patch(
            f"/api/admin/applications/{application['id']}/status", json={"status": "accepted"}
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.store.get(application["id"]).status, "pending")

    def test_admin_listing_requires_session(self) -> None:
        self.submit()

        self.assertEqual(self.client.get("/api/admin/pending").status_code, 401)
        self.login()
        response = self.client.get("/api/admin/pending")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.get_json()["applications"]), 1)

    def test_review_is_terminal(self) -> None:
        application = self.submit()
        self.login()
        url = f"/api/admin/applications/{application['id']}/status"

        accepted = self.client.patch(url, json={"status": "accepted"})
        again = self.client.patch(url, json={"status": "rejected"})

        self.assertEqual(accepted.status_code, 200)
        self.assertEqual(accepted.get_json()["application"]["reviewed_by"], "admin")
        self.assertEqual(again.status_code, 409)
        self.assertEqual(self.store.get(application["id"]).status, "accepted")
        accepted_list = self.client.get("/api/admin/accepted").get_json()["applications"]
        self.assertEqual([item["id"] for item in accepted_list], [application["id"]])
        self.assertEqual(self.client.get("/api/admin/pending").get_json()["applications"], [])

    def test_unknown_application_returns_404(self) -> None:
        self.login()

        response = self.client.patch("/api/admin/applications/missing/status", json={"status": "accepted"})

        self.assertEqual(response.status_code, 404)

    def test_unknown_status_filter_returns_400(self) -> None:
        self.login()

        response = self.client.get("/api/admin/applications?status=archived")

        self.assertEqual(response.status_code, 400)

    def test_logout_revokes_session(self) -> None:
        self.login()

        self.client.post("/api/admin/logout")

        self.assertEqual(self.client.get("/api/admin/pending").status_code, 401)

    def test_health_fails_without_channels(self) -> None:
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.get_json()["status"], "fail")

    def test_email_service_status_reports_channels(self) -> None:
        adapter = ChannelAdapter(
            name="console",
            send=lambda _payload, timeout_seconds: "ok",
            check=lambda timeout_seconds: "ready",
        )
        app = create_app(
            AppConfig(admin_username="admin", admin_password="pw", dispatch_mode="inline"),
            store=self.store,
            notify=self.notified.append,
            adapters=[adapter],
        )
        client = app.test_client()

        self.assertEqual(client.get("/api/email-service-status").status_code, 401)
        client.post("/api/admin/login", json={"username": "admin", "password": "pw"})
        status = client.get("/api/email-service-status").get_json()

        self.assertEqual(status["working_channels"], ["console"])
        self.assertEqual(status["primary_channel"], "console")
        self.assertEqual(client.get("/health").status_code, 200)

    def test_non_object_json_bodies_are_treated_as_empty(self) -> None:
        application = self.submit()

        login = self.client.post("/api/admin/login", json=["admin", "pw"])
        review = self.client.patch(
            f"/api/admin/applications/{application['id']}/status", json=["accepted"]
        )

        self.assertEqual(login.status_code, 401)
        self.assertEqual(review.status_code, 401)
        self.assertEqual(self.store.get(application["id"]).status, "pending")

    def test_health_probes_are_cached_with_short_timeout(self) -> None:
        timeouts: list[float] = []

        def check(*, timeout_seconds: float) -> str:
            timeouts.append(timeout_seconds)
            return "ready"

        adapter = ChannelAdapter(name="smtp", send=lambda _payload, timeout_seconds: None, check=check)
        app = create_app(
            AppConfig(adapter_timeout_seconds=10.0, dispatch_mode="inline"),
            store=self.store,
            notify=self.notified.append,
            adapters=[adapter],
        )
        client = app.test_client()

        first = client.get("/health")
        second = client.get("/health")

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.get_json(), first.get_json())
        self.assertEqual(timeouts, [HEALTH_PROBE_TIMEOUT_SECONDS])


if __name__ == "__main__":
    unittest.main()
