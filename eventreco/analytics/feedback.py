from __future__ import annotations

import threading
import time
from typing import Any

_feedback: list[dict[str, Any]] = []
_lock = threading.Lock()


def record_feedback(
    package_id: int,
    is_positive: bool,
    event_type: str | None = None,
    username: str | None = None,
) -> int:
    """Store a thumbs-up/down on a recommended package; returns the new total."""
    with _lock:
        _feedback.append({
            "package_id": package_id,
            "event_type": event_type,
            "is_positive": is_positive,
            "username": username,
            "timestamp": time.time(),
        })
        return len(_feedback)


def get_feedback() -> list[dict[str, Any]]:
    with _lock:
        return list(_feedback)


def summarize_feedback(feedback: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    fb = get_feedback() if feedback is None else feedback
    positive = sum(1 for f in fb if f["is_positive"])
    return {
        "total": len(fb),
        "positive": positive,
        "negative": len(fb) - positive,
        "satisfaction_rate": round(positive / len(fb) * 100, 1) if fb else 0.0,
    }


def clear_feedback() -> None:
    with _lock:
        _feedback.clear()
