"""End-to-end tests for the gateway's HTTP surface."""

from unittest.mock import AsyncMock, patch

import httpx

from password_gateway.core.errors import StoreError
from password_gateway.services.probe import DependencyProbe
from password_gateway.services.user_store import UserStore
from tests.conftest import THUNDER_URL

UPDATE_URL = "/api/thunder/users/me/update-credentials"


class TestCheckPasswordStatus:
    def test_uninitialized_user_must_change_password(self, client):
        response = client.post("/api/check-password-status", json={"email": "alice@example.com"})

        assert response.status_code == 200
        assert response.json() == {
            "email": "alice@example.com",
            "password_initialized": False,
            "must_change_password": True,
        }

    def test_initialized_user(self, client):
        response = client.post("/api/check-password-status", json={"email": "dave@example.com"})

        assert response.status_code == 200
        assert response.json()["password_initialized"] is True
        assert response.json()["must_change_password"] is False

    def test_missing_email(self, client):
        response = client.post("/api/check-password-status", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Email required"}

    def test_invalid_json_body(self, client):
        response = client.post(
            "/api/check-password-status",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    def test_email_without_at_rejected_without_store(self, client):
        with patch.object(UserStore, "find_user", AsyncMock()) as find_user:
            response = client.post("/api/check-password-status", json={"email": "alice"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid email format"}
        find_user.assert_not_awaited()

    def test_disabled_user_not_found(self, client):
        response = client.post("/api/check-password-status", json={"email": "carol@example.com"})

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_unknown_user_not_found(self, client):
        response = client.post("/api/check-password-status", json={"email": "zed@example.com"})

        assert response.status_code == 404

    def test_container_not_ready_never_queries_store(self, client, container_ready):
        container_ready.return_value = False
        with patch.object(UserStore, "find_user", AsyncMock()) as find_user:
            response = client.post("/api/check-password-status", json={"email": "alice@example.com"})

        assert response.status_code == 503
        assert response.json() == {"error": "Service not ready, please try again"}
        find_user.assert_not_awaited()

    def test_database_not_ready_never_queries_store(self, client):
        with patch.object(
            DependencyProbe, "check_database_ready", AsyncMock(return_value=False)
        ), patch.object(UserStore, "find_user", AsyncMock()) as find_user:
            response = client.post("/api/check-password-status", json={"email": "alice@example.com"})

        assert response.status_code == 503
        assert response.json() == {"error": "Database not ready, please try again"}
        find_user.assert_not_awaited()

    def test_store_failure_is_500(self, client):
        with patch.object(
            UserStore, "find_user", AsyncMock(side_effect=StoreError("user store find_user failed"))
        ):
            response = client.post("/api/check-password-status", json={"email": "alice@example.com"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to check password status",
            "details": "user store find_user failed",
        }


class TestThunderProxy:
    def test_json_response_forwarded(self, client, thunder):
        thunder.reply = lambda request: httpx.Response(200, json={"x": 1})

        response = client.get("/api/thunder/users/me?fields=email", headers={"Authorization": "Bearer t"})

        assert response.status_code == 200
        assert response.json() == {"x": 1}
        sent = thunder.requests[0]
        assert str(sent.url) == f"{THUNDER_URL}/users/me?fields=email"
        assert sent.headers["authorization"] == "Bearer t"

    def test_no_content_passed_on_without_body(self, client, thunder):
        thunder.reply = lambda request: httpx.Response(204)

        response = client.post("/api/thunder/users/me/sessions/revoke", json={})

        assert response.status_code == 204
        assert response.content == b""

    def test_zero_length_reply_gets_success_body(self, client, thunder):
        thunder.reply = lambda request: httpx.Response(
            202, headers={"Content-Length": "0"}, content=b""
        )

        response = client.post("/api/thunder/users/me/sessions/revoke", json={})

        assert response.status_code == 202
        assert response.json() == {"success": True, "message": "Operation completed successfully"}

    def test_upstream_error_status_passed_through(self, client, thunder):
        thunder.reply = lambda request: httpx.Response(401, json={"code": "AUTH-401"})

        response = client.post("/api/thunder/auth/credentials", json={"username": "alice"})

        assert response.status_code == 401
        assert response.json() == {"code": "AUTH-401"}

    def test_transport_failure_is_structured_500(self, client, thunder):
        def refuse(request):
            raise httpx.ConnectError("Connection refused")

        thunder.reply = refuse

        response = client.post("/api/thunder/auth/credentials", json={})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Proxy request failed",
            "message": "Connection refused",
            "target": f"{THUNDER_URL}/auth/credentials",
        }

    def test_non_json_upstream_is_500(self, client, thunder):
        thunder.reply = lambda request: httpx.Response(502, text="Bad Gateway")

        response = client.get("/api/thunder/users/me")

        assert response.status_code == 500
        assert response.json()["error"] == "Invalid upstream response"
        assert response.json()["target"] == f"{THUNDER_URL}/users/me"


class TestCredentialSyncEndToEnd:
    def test_successful_update_marks_user_initialized(self, client, thunder, read_initialized):
        thunder.reply = lambda request: httpx.Response(200, json={"id": "bob"})

        response = client.post(UPDATE_URL, json={"email": "bob@example.com", "attributes": {}})

        assert response.status_code == 200
        assert response.json() == {"id": "bob"}
        assert read_initialized("bob") is True

    def test_empty_success_marks_user_initialized(self, client, thunder, read_initialized):
        thunder.reply = lambda request: httpx.Response(204)

        response = client.post(UPDATE_URL, json={"email": "bob@example.com"})

        assert response.status_code == 204
        assert read_initialized("bob") is True

    def test_rejected_update_leaves_user_untouched(self, client, thunder, read_initialized):
        thunder.reply = lambda request: httpx.Response(400, json={"code": "USR-1001"})

        response = client.post(UPDATE_URL, json={"email": "bob@example.com"})

        assert response.status_code == 400
        assert read_initialized("bob") is False

    def test_sync_failure_does_not_change_response(self, client, thunder, read_initialized):
        thunder.reply = lambda request: httpx.Response(200, json={"id": "bob"})

        with patch.object(
            UserStore, "mark_initialized", AsyncMock(side_effect=StoreError("database is locked"))
        ):
            response = client.post(UPDATE_URL, json={"email": "bob@example.com"})

        assert response.status_code == 200
        assert response.json() == {"id": "bob"}
        assert read_initialized("bob") is False

    def test_dependencies_down_skip_sync_but_not_response(self, client, thunder, container_ready):
        thunder.reply = lambda request: httpx.Response(200, json={"id": "bob"})
        container_ready.return_value = False

        with patch.object(UserStore, "mark_initialized", AsyncMock()) as mark:
            response = client.post(UPDATE_URL, json={"email": "bob@example.com"})

        assert response.status_code == 200
        assert response.json() == {"id": "bob"}
        mark.assert_not_awaited()

    def test_update_without_email_does_not_sync(self, client, thunder):
        thunder.reply = lambda request: httpx.Response(200, json={})

        with patch.object(UserStore, "mark_initialized", AsyncMock()) as mark:
            response = client.post(UPDATE_URL, json={"attributes": {"password": "x"}})

        assert response.status_code == 200
        mark.assert_not_awaited()


class TestHealth:
    def test_all_ready(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == "change-password-ui"
        assert body["dependencies"] == {"container": True, "database": True}
        assert "timestamp" in body

    def test_not_ready_is_503_with_snapshot(self, client, container_ready):
        container_ready.return_value = False

        response = client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unavailable"
        assert body["dependencies"] == {"container": False, "database": False}

    def test_liveness_never_probes(self, client, container_ready):
        container_ready.reset_mock()

        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}
        container_ready.assert_not_awaited()


class TestServing:
    def test_root_serves_ui(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "Change password" in response.text

    def test_request_id_echoed(self, client):
        response = client.get("/health/live", headers={"X-Request-ID": "req-1"})

        assert response.headers["X-Request-ID"] == "req-1"
        assert response.headers["X-Correlation-ID"] == "req-1"
