from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class RecommendationConfig:
    cache_ttl: int = int(os.getenv("RECOMMENDATION_CACHE_TTL", "900"))  # 15 minutes
    cache_prefix: str = "recommendations_"
    default_limit: int = 5


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
