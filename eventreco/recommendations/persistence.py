from __future__ import annotations

import threading
from typing import Iterable, Protocol

from .models import EventPreference, Recommendation, RecommendationRequest


class RecommendationSink(Protocol):
    def save_recommendations(self, records: Iterable[Recommendation]) -> None: ...

    def upsert_preference(self, profile: EventPreference) -> None: ...


class InMemoryRecommendationStore:
    """Recommendation rows and one preference profile per client."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._recommendations: list[Recommendation] = []
        self._preferences: dict[int, EventPreference] = {}

    def save_recommendations(self, records: Iterable[Recommendation]) -> None:
        records = list(records)
        with self._lock:
            self._recommendations.extend(records)

    def upsert_preference(self, profile: EventPreference) -> None:
        with self._lock:
            self._preferences[profile.client_id] = profile

    def get_for_client(self, client_id: int) -> list[Recommendation]:
        """Most recent first."""
        with self._lock:
            rows = [r for r in self._recommendations if r.client_id == client_id]
        return list(reversed(rows))

    def get_preference(self, client_id: int) -> EventPreference | None:
        with self._lock:
            return self._preferences.get(client_id)

    def clear(self) -> None:
        with self._lock:
            self._recommendations.clear()
            self._preferences.clear()


def build_preference(
    criteria: RecommendationRequest,
    client_id: int,
    user_id: str | None = None,
) -> EventPreference:
    return EventPreference(
        client_id=client_id,
        user_id=user_id,
        preferred_event_type=criteria.event_type,
        preferred_budget=criteria.budget,
        preferred_theme=criteria.theme,
        preferred_guest_count=criteria.guests,
        preferences=list(criteria.preferences),
    )


_default_store = InMemoryRecommendationStore()


def get_recommendation_store() -> InMemoryRecommendationStore:
    return _default_store
