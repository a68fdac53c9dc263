"""
Package scoring.

Responsibilities:
- Score each catalog package against a client's criteria using fixed,
  independent per-criterion contributions.
- Rank packages (score descending, package id ascending on ties).
- Render the top-N as API items with a justification per package.

Everything here is pure: no I/O, no shared state.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Iterable

from .config import DEFAULT_RECOMMENDATION_CONFIG
from .models import Package, RecommendationItem, RecommendationRequest, ScoredCandidate

TYPE_POINTS = 40
WITHIN_BUDGET_POINTS = 30
OVER_BUDGET_POINTS = 10
PERFECT_CAPACITY_POINTS = 25
GOOD_CAPACITY_POINTS = 15
ANY_CAPACITY_POINTS = 5
THEME_FIRST_POINTS = 15
THEME_EXTRA_POINTS = 5
THEME_MAX_POINTS = 25
PREFERENCE_POINTS = 5

DEFAULT_LIMIT = DEFAULT_RECOMMENDATION_CONFIG.default_limit
NO_MATCH_JUSTIFICATION = "No matches found"

_MATCH_LABELS = {
    "type": "event type",
    "budget": "budget",
    "capacity": "guest count",
    "theme": "theme",
    "preferences": "preferences",
}


def normalize_text(value: str | None) -> str:
    """Lowercase ``value`` and collapse runs of whitespace; non-strings become ``""``."""
    return " ".join(value.split()).lower() if isinstance(value, str) else ""


def _positive_number(value) -> Decimal | None:
    """Return ``value`` as a Decimal when it is a usable positive number."""
    try:
        number = Decimal(str(value))
    except (TypeError, ValueError, InvalidOperation):
        return None
    if not number.is_finite() or number <= 0:
        return None
    return number


def _package_text(package: Package) -> str:
    """Normalized searchable text of a package."""
    parts = [package.name, package.theme, package.description, package.inclusions]
    return normalize_text(" ".join(p for p in parts if p))


def split_themes(theme: str | None) -> list[str]:
    """Split a comma-separated theme string into lowercased motifs, dropping blanks."""
    if not isinstance(theme, str):
        return []
    return [t for t in (normalize_text(part) for part in theme.split(",")) if t]


def _score_type(package: Package, event_type: str | None) -> tuple[int, str]:
    wanted = normalize_text(event_type)
    if wanted and normalize_text(package.category) == wanted:
        return TYPE_POINTS, f"Type match (+{TYPE_POINTS})"
    return 0, ""


def _score_budget(package: Package, budget: float | None) -> tuple[int, str]:
    budget = _positive_number(budget)
    price = _positive_number(package.price)
    if budget is None or price is None:
        return 0, ""
    if price <= budget:
        return WITHIN_BUDGET_POINTS, f"Within budget (+{WITHIN_BUDGET_POINTS})"
    # up to 20% over budget, inclusive
    if price * 5 <= budget * 6:
        return OVER_BUDGET_POINTS, f"Slightly over budget (+{OVER_BUDGET_POINTS})"
    return 0, ""


def _score_capacity(package: Package, guests: int | None) -> tuple[int, str]:
    guests = _positive_number(guests)
    capacity = _positive_number(package.capacity)
    if guests is None or capacity is None:
        return 0, ""
    if capacity < guests:
        return 0, ""
    if capacity * 10 <= guests * 12:
        return PERFECT_CAPACITY_POINTS, f"Perfect capacity match (+{PERFECT_CAPACITY_POINTS})"
    if capacity * 2 <= guests * 3:
        return GOOD_CAPACITY_POINTS, f"Good capacity match (+{GOOD_CAPACITY_POINTS})"
    return ANY_CAPACITY_POINTS, f"Can accommodate guests (+{ANY_CAPACITY_POINTS})"


def _score_theme(text: str, theme: str | None) -> tuple[int, str]:
    matches = sum(1 for motif in split_themes(theme) if motif in text)
    if not matches:
        return 0, ""
    points = min(THEME_MAX_POINTS, THEME_FIRST_POINTS + THEME_EXTRA_POINTS * (matches - 1))
    return points, f"{matches} motif/theme match(es) (+{points})"


def _score_preferences(text: str, preferences: Iterable[str]) -> tuple[int, str]:
    # Duplicated keywords count once per occurrence in the request.
    if isinstance(preferences, str):
        preferences = [preferences]
    elif not isinstance(preferences, (list, tuple)):
        preferences = []
    matches = 0
    for pref in preferences:
        keyword = normalize_text(pref)
        if keyword and keyword in text:
            matches += 1
    if not matches:
        return 0, ""
    points = matches * PREFERENCE_POINTS
    return points, f"{matches} preference match(es) (+{points})"


def score_package(package: Package, criteria: RecommendationRequest) -> ScoredCandidate:
    """Compute the score and justification of a single package."""
    text = _package_text(package)
    parts = {
        "type": _score_type(package, criteria.event_type),
        "budget": _score_budget(package, criteria.budget),
        "capacity": _score_capacity(package, criteria.guests),
        "theme": _score_theme(text, criteria.theme),
        "preferences": _score_preferences(text, criteria.preferences),
    }
    contributions = {name: points for name, (points, _) in parts.items() if points > 0}
    fragments = [fragment for points, fragment in parts.values() if points > 0]
    return ScoredCandidate(
        package=package,
        score=sum(contributions.values()),
        justification=", ".join(fragments) or NO_MATCH_JUSTIFICATION,
        contributions=contributions,
    )


def score_packages(
    packages: Iterable[Package],
    criteria: RecommendationRequest,
) -> list[ScoredCandidate]:
    """Score every package and rank them best first.

    Returns exactly one candidate per input package. Equal scores are
    ordered by ascending package id.
    """
    scored = [score_package(p, criteria) for p in packages]
    return sorted(scored, key=lambda c: (-c.score, c.package.id))


def describe_match(candidate: ScoredCandidate) -> str:
    """One-sentence summary of which criteria a candidate matched."""
    labels = [_MATCH_LABELS[name] for name in _MATCH_LABELS if name in candidate.contributions]
    if not labels:
        return "No strong match for your criteria"
    if len(labels) == 1:
        return f"Matches your {labels[0]}"
    return f"Matches your {', '.join(labels[:-1])} and {labels[-1]}"


def format_results(
    scored: list[ScoredCandidate],
    limit: int = DEFAULT_LIMIT,
) -> list[RecommendationItem]:
    """Render the first ``limit`` ranked candidates as API items."""
    items: list[RecommendationItem] = []
    for candidate in scored[: max(limit, 0)]:
        pkg = candidate.package
        items.append(RecommendationItem(
            id=pkg.id,
            name=pkg.name,
            category=pkg.category,
            description=pkg.description,
            price=pkg.price,
            capacity=pkg.capacity,
            score=candidate.score,
            justification=candidate.justification,
            summary=describe_match(candidate),
        ))
    return items
