from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

SERVICE_NAME = "ms-travel-planner"


def _csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass(frozen=True)
class ServiceConfig:
    destinations_url: str = "http://localhost:3001"
    pricing_url: str = "http://localhost:3002"
    itineraries_url: str = "http://localhost:3003"
    # Only the first page of cities/seasons is read.
    destinations_page_limit: int = 100
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            destinations_url=os.getenv("DESTINATIONS_MS_URL", "http://localhost:3001").rstrip("/"),
            pricing_url=os.getenv("PRICING_MS_URL", "http://localhost:3002").rstrip("/"),
            itineraries_url=os.getenv("ITINERARIES_MS_URL", "http://localhost:3003").rstrip("/"),
            destinations_page_limit=int(os.getenv("DESTINATIONS_PAGE_LIMIT", "100")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_origins=_csv(os.getenv("CORS_ORIGINS", "*")),
        )
