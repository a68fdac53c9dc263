from __future__ import annotations

from fastapi.testclient import TestClient

from eventreco.analytics.feedback import clear_feedback, get_feedback
from eventreco.app import app

client = TestClient(app)


def _login_client(c):
    c.post("/auth/login", json={"username": "client", "password": "client123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_feedback_records_positive():
    clear_feedback()
    _login_client(client)
    resp = client.post("/feedback", json={
        "package_id": 1,
        "event_type": "wedding",
        "is_positive": True,
    })
    assert resp.status_code == 200
    assert resp.json()["status"] == "recorded"
    assert resp.json()["total_feedback"] == 1
    assert get_feedback()[0]["username"] == "client"


def test_feedback_records_negative():
    clear_feedback()
    _login_client(client)
    resp = client.post("/feedback", json={"package_id": 2, "is_positive": False})
    assert resp.status_code == 200
    assert resp.json()["status"] == "recorded"
    assert get_feedback()[0]["is_positive"] is False


def test_feedback_validation_rejects_bad_package_id():
    _login_client(client)
    resp = client.post("/feedback", json={"package_id": 0, "is_positive": True})
    assert resp.status_code == 422


def test_feedback_stats():
    clear_feedback()
    _login_client(client)
    client.post("/feedback", json={"package_id": 1, "is_positive": True})
    client.post("/feedback", json={"package_id": 2, "is_positive": True})
    client.post("/feedback", json={"package_id": 3, "is_positive": False})
    _login_admin(client)
    resp = client.get("/feedback/stats")
    body = resp.json()
    assert body["total"] == 3
    assert body["positive"] == 2
    assert body["negative"] == 1
    assert body["satisfaction_rate"] == 66.7
