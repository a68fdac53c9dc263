from __future__ import annotations

from collections import Counter
from typing import Any

from .feedback import summarize_feedback


def _top(counter: Counter[str], n: int = 10) -> list[dict[str, Any]]:
    return [{"name": name, "count": count} for name, count in counter.most_common(n)]


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top event types and themes
    type_counter: Counter[str] = Counter()
    theme_counter: Counter[str] = Counter()
    keyword_counter: Counter[str] = Counter()
    for s in searches:
        type_counter[(s.get("event_type") or "any").lower()] += 1
        for motif in (s.get("theme") or "").split(","):
            if motif.strip():
                theme_counter[motif.strip().lower()] += 1
        for keyword in s.get("preferences", []) or []:
            if keyword.strip():
                keyword_counter[keyword.strip().lower()] += 1

    # Filter usage rates
    filter_counts = {"event_type": 0, "budget": 0, "guests": 0, "theme": 0, "preferences": 0}
    for s in searches:
        for key in filter_counts:
            if s.get(key):
                filter_counts[key] += 1
    filter_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in filter_counts.items()
    }

    budgets = [s["budget"] for s in searches if s.get("budget")]
    fallbacks = sum(1 for s in searches if s.get("fallback"))

    # Cache stats
    cache_hits = sum(1 for s in searches if s.get("cache_hit"))
    cache_misses = total - cache_hits

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "top_event_types": _top(type_counter),
        "top_themes": _top(theme_counter),
        "top_preferences": _top(keyword_counter),
        "filter_usage": filter_usage,
        "avg_budget": round(sum(budgets) / len(budgets), 2) if budgets else None,
        "category_fallbacks": fallbacks,
        "cache_stats": {
            "hits": cache_hits,
            "misses": cache_misses,
            "hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
        },
        "feedback_summary": summarize_feedback(),
    }
