from __future__ import annotations

from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .config import DEFAULT_RECOMMENDATION_CONFIG


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecommendationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("event_type", "eventType", "type"),
        description="Package category to filter on, e.g. wedding",
    )
    budget: float | None = Field(default=None, ge=0.0)
    guests: int | None = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("guests", "guestCount", "guest_count"),
    )
    theme: str | None = Field(
        default=None, description='Motif or comma-separated motifs, e.g. "rustic, garden"'
    )
    preferences: list[str] = Field(default_factory=list)
    limit: int = Field(default=DEFAULT_RECOMMENDATION_CONFIG.default_limit, ge=1, le=20)

    @field_validator("preferences", mode="before")
    @classmethod
    def _none_means_no_preferences(cls, value):
        return [] if value is None else value


class Package(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    category: str = ""
    price: float | None = None
    capacity: int | None = None
    theme: str = ""
    description: str = ""
    inclusions: str = ""


class ScoredCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    package: Package
    score: int
    justification: str
    contributions: dict[str, int] = Field(default_factory=dict)


class RecommendationItem(BaseModel):
    id: int
    name: str
    category: str
    description: str
    price: float | None
    capacity: int | None
    score: int
    justification: str
    summary: str
    ai_reason: str | None = None


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendationItem]
    total_candidates: int
    message: str = ""
    cached: bool = False


class Recommendation(BaseModel):
    client_id: int
    package_id: int
    score: int
    reason: str
    created_at: datetime = Field(default_factory=_utcnow)


class EventPreference(BaseModel):
    client_id: int
    user_id: str | None = None
    preferred_event_type: str | None = None
    preferred_budget: float | None = None
    preferred_theme: str | None = None
    preferred_guest_count: int | None = None
    preferences: list[str] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=_utcnow)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class FeedbackRequest(BaseModel):
    package_id: int = Field(..., ge=1)
    event_type: str | None = None
    is_positive: bool


class FeedbackResponse(BaseModel):
    status: str
    total_feedback: int
