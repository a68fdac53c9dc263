from __future__ import annotations

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from eventreco.app import app
from eventreco.recommendations.cache import (
    InMemoryCacheStore,
    ResultCache,
    clear_cache,
    get_cache_stats,
    make_key,
)
from eventreco.recommendations.models import RecommendationRequest

client = TestClient(app)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _criteria(**kwargs) -> RecommendationRequest:
    return RecommendationRequest(**kwargs)


# ── Key derivation ───────────────────────────────────────────────────────


def test_same_criteria_same_key():
    a = _criteria(type="wedding", budget=50000, guests=100, theme="rustic")
    b = _criteria(theme="rustic", guests=100, budget=50000, type="wedding")
    assert make_key(a) == make_key(b)


def test_key_ignores_preference_order_case_and_whitespace():
    a = _criteria(type="Wedding ", theme="  Rustic  Garden", preferences=["Music", "flowers "])
    b = _criteria(type="wedding", theme="rustic garden", preferences=["flowers", "music"])
    assert make_key(a) == make_key(b)


def test_key_normalizes_numbers():
    assert make_key(_criteria(budget=50000)) == make_key(_criteria(budget=50000.0))
    assert make_key(_criteria(guests="100")) == make_key(_criteria(guests=100))


def test_different_criteria_different_key():
    assert make_key(_criteria(type="wedding")) != make_key(_criteria(type="birthday"))
    assert make_key(_criteria(limit=3)) != make_key(_criteria(limit=5))


def test_budgets_that_score_differently_get_different_keys():
    assert make_key(_criteria(budget=45000)) != make_key(_criteria(budget=44999.999))


def test_key_has_prefix():
    assert make_key(_criteria()).startswith("recommendations_")


# ── Store / retrieve ─────────────────────────────────────────────────────


def test_put_then_get_round_trip():
    cache = ResultCache(InMemoryCacheStore())
    criteria = _criteria(type="wedding", budget=50000)
    result = [{"id": 1, "score": 70}]
    assert cache.put(criteria, result) is True
    assert cache.get(criteria) == result


def test_miss_returns_none():
    cache = ResultCache(InMemoryCacheStore())
    assert cache.get(_criteria(type="debut")) is None
    assert cache.stats()["misses"] == 1


def test_last_write_wins():
    cache = ResultCache(InMemoryCacheStore())
    criteria = _criteria(type="wedding")
    cache.put(criteria, ["old"])
    cache.put(criteria, ["new"])
    assert cache.get(criteria) == ["new"]


def test_entry_expires_after_ttl():
    clock = FakeClock()
    cache = ResultCache(InMemoryCacheStore(clock=clock), ttl=600)
    criteria = _criteria(type="wedding")
    cache.put(criteria, ["x"])
    clock.now += 599
    assert cache.get(criteria) == ["x"]
    clock.now += 1
    assert cache.get(criteria) is None


def test_forget_and_clear_all():
    store = InMemoryCacheStore()
    cache = ResultCache(store)
    wedding, debut = _criteria(type="wedding"), _criteria(type="debut")
    cache.put(wedding, ["w"])
    cache.put(debut, ["d"])
    assert cache.forget(wedding) is True
    assert cache.get(wedding) is None
    assert cache.get(debut) == ["d"]
    assert cache.clear_all() is True
    assert cache.get(debut) is None


def test_store_failure_degrades_to_miss():
    store = MagicMock()
    store.get.side_effect = ConnectionError("cache down")
    store.set.side_effect = ConnectionError("cache down")
    cache = ResultCache(store)
    criteria = _criteria(type="wedding")

    assert cache.put(criteria, ["x"]) is False
    assert cache.get(criteria) is None
    stats = cache.stats()
    assert stats["errors"] == 2
    assert stats["misses"] == 1


def test_stats_hit_rate():
    cache = ResultCache(InMemoryCacheStore(), ttl=900)
    criteria = _criteria(type="wedding")
    cache.get(criteria)
    cache.put(criteria, ["x"])
    cache.get(criteria)
    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 50.0
    assert stats["ttl"] == 900
    assert stats["prefix"] == "recommendations_"


# ── Through the API ──────────────────────────────────────────────────────


def test_cache_miss_then_hit():
    clear_cache()
    c = TestClient(app)
    body = {"type": "wedding", "budget": 50000, "guests": 100}
    resp1 = c.post("/recommendations", json=body)
    assert resp1.status_code == 200
    assert resp1.json()["cached"] is False

    resp2 = c.post("/recommendations", json={**body, "type": "WEDDING"})
    assert resp2.status_code == 200
    assert resp2.json()["cached"] is True
    assert resp2.json()["recommendations"] == resp1.json()["recommendations"]

    stats = get_cache_stats()
    assert stats["misses"] >= 1
    assert stats["hits"] >= 1


def test_cache_stats_endpoint():
    clear_cache()
    client.post("/recommendations", json={"type": "debut", "limit": 3})
    client.post("/recommendations", json={"type": "debut", "limit": 3})
    _login_admin(client)
    resp = client.get("/cache/stats")
    assert resp.status_code == 200
    body = resp.json()
    assert body["hits"] >= 1
    assert "hit_rate" in body


def test_flush_cache_endpoint():
    client.post("/recommendations", json={"type": "birthday"})
    _login_admin(client)
    resp = client.delete("/cache")
    assert resp.status_code == 200
    assert resp.json() == {"status": "cleared"}
    assert get_cache_stats()["hits"] == 0
    again = client.post("/recommendations", json={"type": "birthday"})
    assert again.json()["cached"] is False
