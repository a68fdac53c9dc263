from __future__ import annotations

from fastapi.testclient import TestClient

from eventreco.app import app
from eventreco.auth.users import authenticate

client = TestClient(app)


def _login_client(c):
    c.post("/auth/login", json={"username": "client", "password": "client123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


# ── Credentials ──────────────────────────────────────────────────────────


def test_authenticate_returns_client_id():
    user = authenticate("client", "client123")
    assert user == {"username": "client", "role": "client", "client_id": 1}


def test_authenticate_rejects_wrong_password():
    assert authenticate("client", "nope") is None


# ── Login / Logout ───────────────────────────────────────────────────────


def test_login_success_client():
    resp = client.post("/auth/login", json={"username": "client", "password": "client123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"]["username"] == "client"
    assert body["user"]["role"] == "client"
    assert body["user"]["client_id"] == 1


def test_login_success_admin():
    resp = client.post("/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"
    assert resp.json()["user"]["client_id"] is None


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"username": "client", "password": "wrong"})
    assert resp.status_code == 401


def test_login_unknown_user():
    resp = client.post("/auth/login", json={"username": "nobody", "password": "x"})
    assert resp.status_code == 401


def test_auth_me_when_logged_in():
    _login_client(client)
    resp = client.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["username"] == "client"


def test_auth_me_not_logged_in():
    c = TestClient(app)  # fresh client, no session
    resp = c.get("/auth/me")
    assert resp.status_code == 401


def test_logout():
    _login_client(client)
    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["status"] == "logged_out"
    resp = client.get("/auth/me")
    assert resp.status_code == 401


# ── Route protection ─────────────────────────────────────────────────────


def test_feedback_requires_login():
    c = TestClient(app)
    resp = c.post("/feedback", json={"package_id": 1, "is_positive": True})
    assert resp.status_code == 401


def test_feedback_requires_client_account():
    c = TestClient(app)
    _login_admin(c)
    resp = c.post("/feedback", json={"package_id": 1, "is_positive": True})
    assert resp.status_code == 403


def test_preferences_requires_login():
    c = TestClient(app)
    assert c.get("/preferences/me").status_code == 401


def test_analytics_requires_admin():
    _login_client(client)
    resp = client.get("/analytics")
    assert resp.status_code == 403


def test_analytics_allowed_for_admin():
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200


def test_feedback_stats_requires_admin():
    c = TestClient(app)
    _login_client(c)
    assert c.get("/feedback/stats").status_code == 403


def test_cache_endpoints_require_admin():
    c = TestClient(app)
    _login_client(c)
    assert c.get("/cache/stats").status_code == 403
    assert c.delete("/cache").status_code == 403


# ── Public endpoints stay public ─────────────────────────────────────────


def test_health_is_public():
    c = TestClient(app)
    assert c.get("/health").status_code == 200


def test_metadata_is_public():
    c = TestClient(app)
    assert c.get("/metadata").status_code == 200
