from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an event planning assistant. "
    "Given a client's event criteria and a short list of event packages that "
    "were already ranked for them, write one warm, specific sentence per "
    "package explaining why it suits the client's event.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"explanations": [{"id": <package_id>, "reason": "<one sentence>"}]}\n'
    "Only mention packages from the provided list. Do not invent inclusions."
)


def _format_money(value: Any) -> str:
    if value is None:
        return "N/A"
    return f"{float(value):,.2f}"


def _build_user_message(
    criteria: dict[str, Any],
    packages: list[dict[str, Any]],
) -> str:
    lines = ["## Client Criteria"]
    if criteria.get("event_type"):
        lines.append(f"- Event type: {criteria['event_type']}")
    if criteria.get("budget"):
        lines.append(f"- Budget: {_format_money(criteria['budget'])}")
    if criteria.get("guests"):
        lines.append(f"- Guests: {criteria['guests']}")
    if criteria.get("theme"):
        lines.append(f"- Theme / motif: {criteria['theme']}")
    if criteria.get("preferences"):
        lines.append(f"- Preferences: {', '.join(criteria['preferences'])}")

    lines.append("\n## Ranked Packages")
    lines.append("| ID | Name | Category | Price | Capacity | Description | Why it ranked |")
    lines.append("|---|---|---|---|---|---|---|")
    for p in packages:
        lines.append(
            f"| {p['id']} | {p['name']} | {p.get('category', '?')} "
            f"| {_format_money(p.get('price'))} | {p.get('capacity') or 'N/A'} "
            f"| {p.get('description', '')} | {p.get('justification', '')} |"
        )

    return "\n".join(lines)


def explain_matches(
    criteria: dict[str, Any],
    packages: list[dict[str, Any]],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> dict[int, str]:
    """
    Ask Groq for a one-sentence explanation of each ranked package.

    Returns a dict mapping package id -> explanation.
    Returns empty dict on any failure (timeout, bad JSON, API error) so the
    heuristic justification stands on its own.
    """
    if not config.enabled or not config.api_key:
        return {}

    if not packages:
        return {}

    known_ids = {int(p["id"]) for p in packages}

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _build_user_message(criteria, packages),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        parsed = json.loads(content)

        results: dict[int, str] = {}
        for item in parsed.get("explanations", []):
            try:
                pid = int(item.get("id"))
            except (TypeError, ValueError):
                continue
            reason = str(item.get("reason") or "").strip()
            if pid in known_ids and reason:
                results[pid] = reason

        return results

    except Exception:
        logger.warning("Groq explanation call failed, keeping heuristic justifications", exc_info=True)
        return {}
