"""
Recommendation result cache.

Responsibilities:
- Derive a stable fingerprint from request criteria (field order, case,
  whitespace and preference order do not matter).
- Store formatted top-N results under that fingerprint with a fixed TTL.
- Degrade to "always miss" when the backing store fails.
"""
from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from typing import Any, Callable, Protocol

from .config import DEFAULT_RECOMMENDATION_CONFIG
from .models import RecommendationRequest
from .scoring import normalize_text

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: int) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryCacheStore:
    """Thread-safe dict-backed store with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def _norm_text(value: Any) -> str | None:
    return normalize_text(value) or None


def _norm_number(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_criteria(criteria: RecommendationRequest) -> dict[str, Any]:
    """Canonical, order-independent view of the criteria used for keying.

    Text goes through the same normalization the scorer matches with, so two
    criteria share a key only when they score identically.
    """
    guests = _norm_number(criteria.guests)
    preferences = criteria.preferences if isinstance(criteria.preferences, (list, tuple)) else []
    return {
        "type": _norm_text(criteria.event_type),
        "budget": _norm_number(criteria.budget),
        "guests": int(guests) if guests is not None and guests.is_integer() else guests,
        "theme": _norm_text(criteria.theme),
        "preferences": sorted(p for p in (_norm_text(x) for x in preferences) if p),
        "limit": criteria.limit,
    }


def make_key(criteria: RecommendationRequest, prefix: str = DEFAULT_RECOMMENDATION_CONFIG.cache_prefix) -> str:
    normalized = json.dumps(normalize_criteria(criteria), sort_keys=True, default=str)
    return prefix + hashlib.sha256(normalized.encode()).hexdigest()[:16]


class ResultCache:
    def __init__(
        self,
        store: CacheStore | None = None,
        ttl: int = DEFAULT_RECOMMENDATION_CONFIG.cache_ttl,
        prefix: str = DEFAULT_RECOMMENDATION_CONFIG.cache_prefix,
    ) -> None:
        self.store = store if store is not None else InMemoryCacheStore()
        self.ttl = ttl
        self.prefix = prefix
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._errors = 0

    def key_for(self, criteria: RecommendationRequest) -> str:
        return make_key(criteria, self.prefix)

    def _count(self, attr: str) -> None:
        with self._lock:
            setattr(self, attr, getattr(self, attr) + 1)

    def get(self, criteria: RecommendationRequest) -> Any | None:
        """Return the cached result for ``criteria`` or ``None`` on a miss."""
        key = self.key_for(criteria)
        try:
            cached = self.store.get(key)
        except Exception:
            logger.error("Error reading recommendation cache for key %s", key, exc_info=True)
            self._count("_errors")
            self._count("_misses")
            return None
        if cached is None:
            logger.debug("Recommendation cache miss for key %s", key)
            self._count("_misses")
            return None
        logger.debug("Recommendation cache hit for key %s", key)
        self._count("_hits")
        return cached

    def put(self, criteria: RecommendationRequest, result: Any, ttl: int | None = None) -> bool:
        """Store ``result`` for ``criteria``; last write wins."""
        key = self.key_for(criteria)
        ttl = self.ttl if ttl is None else ttl
        try:
            self.store.set(key, result, ttl)
        except Exception:
            logger.error("Error storing recommendation cache for key %s", key, exc_info=True)
            self._count("_errors")
            return False
        logger.debug("Recommendation cache stored for key %s (ttl=%ss)", key, ttl)
        return True

    def forget(self, criteria: RecommendationRequest) -> bool:
        key = self.key_for(criteria)
        try:
            self.store.delete(key)
        except Exception:
            logger.error("Error forgetting recommendation cache for key %s", key, exc_info=True)
            return False
        return True

    def clear_all(self) -> bool:
        try:
            self.store.clear()
        except Exception:
            logger.error("Error clearing recommendation cache", exc_info=True)
            return False
        logger.info("Recommendation cache cleared")
        return True

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = self._misses = self._errors = 0

    def stats(self) -> dict:
        with self._lock:
            hits, misses, errors = self._hits, self._misses, self._errors
        total = hits + misses
        return {
            "hits": hits,
            "misses": misses,
            "errors": errors,
            "hit_rate": round(hits / total * 100, 1) if total > 0 else 0.0,
            "ttl": self.ttl,
            "prefix": self.prefix,
        }


_default_cache = ResultCache()


def get_result_cache() -> ResultCache:
    return _default_cache


def get_cache_stats() -> dict:
    return _default_cache.stats()


def clear_cache() -> None:
    _default_cache.clear_all()
    _default_cache.reset_stats()
