from __future__ import annotations

import logging
import time
from typing import Sequence

from ..analytics.store import record_event
from ..catalog.store import get_packages
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import explain_matches
from .cache import ResultCache, get_result_cache
from .models import (
    Package,
    Recommendation,
    RecommendationItem,
    RecommendationRequest,
    RecommendationResponse,
    ScoredCandidate,
)
from .persistence import RecommendationSink, build_preference, get_recommendation_store
from .scoring import describe_match, format_results, normalize_text, score_packages

logger = logging.getLogger(__name__)


def filter_by_event_type(
    packages: Sequence[Package],
    event_type: str | None,
) -> tuple[list[Package], bool]:
    """Keep packages of the requested category.

    Returns ``(candidates, fell_back)``. When nothing matches, every package
    stays a candidate so the client still gets the closest alternatives.
    """
    packages = list(packages)
    wanted = normalize_text(event_type)
    if not wanted:
        return packages, False
    matching = [p for p in packages if normalize_text(p.category) == wanted]
    if matching or not packages:
        return matching, False
    return packages, True


class RecommendationService:
    def __init__(
        self,
        cache: ResultCache | None = None,
        sink: RecommendationSink | None = None,
        llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    ) -> None:
        self.cache = cache if cache is not None else get_result_cache()
        self.sink = sink if sink is not None else get_recommendation_store()
        self.llm_config = llm_config

    def _explain(
        self,
        criteria: RecommendationRequest,
        items: list[RecommendationItem],
    ) -> list[RecommendationItem]:
        reasons = explain_matches(
            criteria.model_dump(),
            [item.model_dump() for item in items],
            config=self.llm_config,
        )
        if not reasons:
            return items
        return [item.model_copy(update={"ai_reason": reasons.get(item.id)}) for item in items]

    def _persist(
        self,
        criteria: RecommendationRequest,
        top: list[ScoredCandidate],
        client_id: int,
        user_id: str | None,
    ) -> None:
        records = [
            Recommendation(
                client_id=client_id,
                package_id=c.package.id,
                score=c.score,
                reason=describe_match(c),
            )
            for c in top
        ]
        try:
            self.sink.save_recommendations(records)
        except Exception:
            logger.warning("Could not persist recommendations for client %s", client_id, exc_info=True)

        try:
            self.sink.upsert_preference(build_preference(criteria, client_id, user_id))
        except Exception:
            logger.warning("Could not update preference profile for client %s", client_id, exc_info=True)

    def recommend(
        self,
        criteria: RecommendationRequest,
        packages: Sequence[Package],
        client_id: int | None = None,
        user_id: str | None = None,
    ) -> RecommendationResponse:
        start_time = time.time()

        # --- Category filter (falls back to everything) ---
        candidates, fell_back = filter_by_event_type(packages, criteria.event_type)
        if fell_back:
            logger.info(
                "No %r packages in catalog, scoring all %d packages instead",
                criteria.event_type, len(candidates),
            )

        # --- Cache check ---
        cached = self.cache.get(criteria)
        scored: list[ScoredCandidate] | None = None
        if cached is not None:
            items = [item.model_copy() for item in cached]
        else:
            scored = score_packages(candidates, criteria)
            items = self._explain(criteria, format_results(scored, criteria.limit))
            self.cache.put(criteria, items)

        # --- Signed-in client side effects ---
        if client_id is not None:
            if scored is None:
                # Only formatted items are cached; raw scores are recomputed.
                scored = score_packages(candidates, criteria)
            self._persist(criteria, scored[: criteria.limit], client_id, user_id)

        if not items:
            message = "No packages available yet"
        elif fell_back:
            message = (
                f"No {criteria.event_type} packages found; "
                f"top {len(items)} packages from the full catalog"
            )
        else:
            message = f"Top {len(items)} packages based on your criteria"

        response = RecommendationResponse(
            recommendations=items,
            total_candidates=len(candidates),
            message=message,
            cached=cached is not None,
        )

        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        record_event("search", {
            "event_type": criteria.event_type,
            "budget": criteria.budget,
            "guests": criteria.guests,
            "theme": criteria.theme,
            "preferences": list(criteria.preferences),
            "client_id": client_id,
            "total_candidates": len(candidates),
            "results_returned": len(items),
            "response_time_ms": elapsed_ms,
            "cache_hit": cached is not None,
            "fallback": fell_back,
        })

        return response


_default_service = RecommendationService()


def get_recommendations(
    request: RecommendationRequest,
    client_id: int | None = None,
    user_id: str | None = None,
) -> RecommendationResponse:
    """Recommend from the full package catalog using the shared service."""
    return _default_service.recommend(
        request, get_packages(), client_id=client_id, user_id=user_id,
    )
