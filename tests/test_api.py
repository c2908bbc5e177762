"""HTTP tests for admin, client and legacy routes."""

import pytest

from conftest import ADMIN_SECRET, DAY, DEVICE_KEY, START


def _create(client, headers, username="alice", password="pw1", days=30):
    return client.post(
        "/api/admin/users/create",
        data={"username": username, "password": password, "days": str(days)},
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Admin authentication
# ---------------------------------------------------------------------------

class TestAdminAuth:
    @pytest.mark.parametrize(
        "headers",
        [{}, {"X-Admin-Secret": "wrong"}, {"Authorization": "Bearer wrong"}],
    )
    def test_rejects_missing_or_wrong_secret(self, client, headers):
        response = _create(client, headers)
        assert response.status_code == 401
        assert response.json() == {"status": "error", "message": "Unauthorized"}

    def test_accepts_bearer_secret(self, client):
        response = _create(client, {"Authorization": f"Bearer {ADMIN_SECRET}"})
        assert response.status_code == 200

    def test_unset_secret_blocks_admin_routes(self, make_client):
        client = make_client(ADMIN_SECRET="")
        response = client.get("/api/admin/users", headers={"X-Admin-Secret": ""})
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# Admin operations
# ---------------------------------------------------------------------------

class TestAdminRoutes:
    def test_create_with_form_body(self, client, admin_headers):
        response = _create(client, admin_headers)
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "username": "alice",
            "expiresAt": None,
            "trialDays": 30,
        }

    def test_create_with_json_body(self, make_client, admin_headers):
        client = make_client(ACTIVATION_POLICY="immediate")
        response = client.post(
            "/api/admin/users/create",
            json={"username": "bob", "password": "pw", "days": 2},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["expiresAt"] == START + 2 * DAY

    def test_duplicate_create_conflicts(self, client, admin_headers):
        _create(client, admin_headers)
        response = _create(client, admin_headers, username="ALICE")
        assert response.status_code == 409
        assert response.json()["status"] == "error"

    @pytest.mark.parametrize(
        "data",
        [
            {"username": "alice", "password": "pw", "days": "0"},
            {"username": "alice", "password": "pw", "days": "many"},
            {"username": "alice", "password": "pw"},
            {"username": "", "password": "pw", "days": "3"},
        ],
    )
    def test_invalid_create(self, client, admin_headers, data):
        response = client.post("/api/admin/users/create", data=data, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["status"] == "error"

    def test_malformed_json_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/admin/users/create",
            content=b"{not json",
            headers={**admin_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400

    def test_renew_accepts_days_alias(self, client, admin_headers):
        _create(client, admin_headers)
        response = client.post(
            "/api/admin/users/renew",
            data={"username": "alice", "days": "10"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["trialDays"] == 40

    def test_renew_unknown_user(self, client, admin_headers):
        response = client.post(
            "/api/admin/users/renew",
            json={"username": "ghost", "extraDays": 1},
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "user_not_found"}

    def test_delete_with_device_key_is_idempotent(self, client, admin_headers):
        _create(client, admin_headers)
        headers = {"X-Device-Key": DEVICE_KEY}
        first = client.post("/api/admin/users/delete", data={"usernameToDelete": "alice"}, headers=headers)
        assert first.json() == {"status": "ok", "username": "alice", "deleted": 1}
        second = client.post("/api/admin/users/delete", data={"username": "alice"}, headers=headers)
        assert second.status_code == 200
        assert second.json()["deleted"] == 0

    def test_delete_requires_credentials(self, client):
        response = client.post("/api/admin/users/delete", data={"username": "alice"})
        assert response.status_code == 401

    def test_list_accounts(self, client, admin_headers, clock):
        _create(client, admin_headers, username="alice")
        _create(client, admin_headers, username="bob")
        response = client.get("/api/admin/users", headers=admin_headers)
        body = response.json()
        assert body["status"] == "ok"
        assert [user["username"] for user in body["users"]] == ["alice", "bob"]
        assert body["users"][0]["expired"] is False
        assert "cursor" not in body

    def test_list_single_page(self, client, admin_headers):
        for name in ("a", "b", "c"):
            _create(client, admin_headers, username=name)
        response = client.get("/api/admin/users", params={"limit": 2}, headers=admin_headers)
        body = response.json()
        assert [user["username"] for user in body["users"]] == ["a", "b"]
        assert body["cursor"] == "user:b"

    def test_reset_device(self, client, admin_headers):
        _create(client, admin_headers)
        client.post("/api/client/login", data={"username": "alice", "password": "pw1", "deviceId": "d1"})
        response = client.post("/api/admin/users/reset-device", json={"username": "alice"}, headers=admin_headers)
        assert response.json() == {"status": "ok", "username": "alice"}
        relogin = client.post("/api/client/login", data={"username": "alice", "password": "pw1", "deviceId": "d2"})
        assert relogin.json()["status"] == "login"


# ---------------------------------------------------------------------------
# Client operations
# ---------------------------------------------------------------------------

class TestClientRoutes:
    def test_login_binds_then_re_logins(self, client, admin_headers):
        _create(client, admin_headers)
        first = client.post("/api/client/login", data={"username": "alice", "password": "pw1", "deviceId": "d1"})
        assert first.json() == {"status": "login", "user": "alice", "expired_date": "30"}

        second = client.post("/api/client/login", json={"username": "alice", "password": "pw1", "deviceId": "d1"})
        assert second.json() == {
            "status": "re_login",
            "user": "alice",
            "expired_date": str((START + 30 * DAY) * 1000),
            "deviceId": "d1",
        }

        conflict = client.post("/api/client/login", data={"username": "alice", "password": "pw1", "deviceId": "d2"})
        assert conflict.status_code == 200
        assert conflict.json() == {"status": "fail", "message": "device_conflict"}

    def test_login_without_device_binding(self, make_client, admin_headers, clock):
        client = make_client()
        _create(client, admin_headers)
        first = client.post("/api/client/login", data={"username": "alice", "password": "pw1"})
        assert first.json()["expired_date"] == "30"
        clock.advance(days=31)
        expired = client.post("/api/client/login", data={"username": "alice", "password": "pw1"})
        assert expired.json() == {"status": "fail", "message": "expired"}

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"username": "alice", "password": "bad", "deviceId": "d1"}, "wrong_password"),
            ({"username": "ghost", "password": "pw1"}, "user_not_found"),
            ({"username": "alice"}, "missing_params"),
        ],
    )
    def test_login_failures(self, client, admin_headers, data, message):
        _create(client, admin_headers)
        response = client.post("/api/client/login", data=data)
        assert response.status_code == 200
        assert response.json() == {"status": "fail", "message": message}

    def test_exists(self, client, admin_headers):
        missing = client.post("/api/client/exists", data={"username": "alice"})
        assert missing.json() == {"status": "fail", "message": "user_not_found"}

        _create(client, admin_headers)
        found = client.post("/api/client/exists", data={"username": "alice"}).json()
        assert found["status"] == "success"
        assert found["active"] is True
        assert found["expiresAt"] is None
        assert found["createdAt"] == START

    def test_exists_requires_username(self, client):
        response = client.post("/api/client/exists", data={})
        assert response.status_code == 400

    def test_reactivate(self, client, admin_headers):
        _create(client, admin_headers)
        response = client.post(
            "/api/client/reactivate",
            data={"username": "alice", "deviceId": "d7", "expiredDateMillis": "1800000000500"},
        )
        assert response.json() == {"status": "ok", "username": "alice", "expiresAt": 1_800_000_000}
        login = client.post("/api/client/login", data={"username": "alice", "password": "pw1", "deviceId": "d7"})
        assert login.json()["status"] == "re_login"

    def test_reactivate_rejects_bad_expiry(self, client, admin_headers):
        _create(client, admin_headers)
        response = client.post(
            "/api/client/reactivate",
            json={"username": "alice", "deviceId": "d7", "expiredDateMillis": 0},
        )
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Legacy paths and plumbing
# ---------------------------------------------------------------------------

def test_legacy_php_paths(client, admin_headers):
    created = client.post(
        "/create.php", data={"username": "alice", "password": "pw1", "days": "3"}, headers=admin_headers
    )
    assert created.json()["status"] == "ok"
    assert client.post("/create.php", data={"username": "x", "password": "y", "days": "1"}).status_code == 401

    login = client.post("/login.php", data={"username": "alice", "password": "pw1", "deviceId": "d1"})
    assert login.json() == {"status": "login", "user": "alice", "expired_date": "3"}

    exists = client.post("/user_exist.php", data={"username": "alice"})
    assert exists.json()["active"] is True

    listed = client.post("/list.php", headers=admin_headers)
    assert [user["username"] for user in listed.json()["users"]] == ["alice"]


def test_unknown_path(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Not found", "path": "/nope", "method": "GET"}


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
