from __future__ import annotations

import os

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.feedback import record_feedback, summarize_feedback
from .analytics.store import get_events
from .auth.dependencies import get_current_user, require_admin, require_client, require_user
from .auth.users import authenticate
from .catalog.store import get_categories, get_dataframe
from .logging_config import setup_logging
from .recommendations.cache import clear_cache, get_cache_stats
from .recommendations.models import (
    FeedbackRequest,
    FeedbackResponse,
    LoginRequest,
    RecommendationRequest,
    RecommendationResponse,
)
from .recommendations.persistence import get_recommendation_store
from .recommendations.service import get_recommendations

setup_logging()

app = FastAPI(title="Event Package Recommendation API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "event-reco-secret-change-in-production"),
)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    df = get_dataframe()
    prices = df["price"].dropna()
    capacities = df["capacity"].dropna()
    return {
        "categories": get_categories(),
        "price_range": {
            "min": float(prices.min()) if not prices.empty else None,
            "max": float(prices.max()) if not prices.empty else None,
        },
        "max_capacity": int(capacities.max()) if not capacities.empty else None,
        "total_packages": len(df),
    }


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    user: dict | None = Depends(get_current_user),
) -> RecommendationResponse:
    # Anonymous visitors get results only; signed-in clients also get them saved.
    client_id = user.get("client_id") if user else None
    username = user.get("username") if user else None
    return get_recommendations(body, client_id=client_id, user_id=username)


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Client endpoints ─────────────────────────────────────────────────────


@app.get("/recommendations/history")
def recommendation_history(user: dict = Depends(require_client)) -> dict:
    rows = get_recommendation_store().get_for_client(user["client_id"])
    return {
        "client_id": user["client_id"],
        "recommendations": [r.model_dump(mode="json") for r in rows],
    }


@app.get("/preferences/me")
def my_preferences(user: dict = Depends(require_client)) -> dict:
    profile = get_recommendation_store().get_preference(user["client_id"])
    return {
        "client_id": user["client_id"],
        "preferences": profile.model_dump(mode="json") if profile else None,
    }


@app.post("/feedback", response_model=FeedbackResponse)
def feedback(
    body: FeedbackRequest,
    user: dict = Depends(require_client),
) -> FeedbackResponse:
    total = record_feedback(
        body.package_id,
        body.is_positive,
        event_type=body.event_type,
        username=user.get("username"),
    )
    return FeedbackResponse(status="recorded", total_feedback=total)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


@app.get("/feedback/stats")
def feedback_stats(user: dict = Depends(require_admin)) -> dict:
    return summarize_feedback()


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()


@app.delete("/cache")
def flush_cache(user: dict = Depends(require_admin)) -> dict:
    clear_cache()
    return {"status": "cleared"}
