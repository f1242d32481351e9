from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from shared.http_client import UpstreamClient
from .config import ServiceConfig


@dataclass
class UpstreamServices:
    """
    One client per upstream microservice.
    """

    destinations: UpstreamClient
    pricing: UpstreamClient
    itineraries: UpstreamClient
    destinations_page_limit: int = 100

    @classmethod
    def from_config(
        cls,
        cfg: ServiceConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "UpstreamServices":
        return cls(
            destinations=UpstreamClient("destinations", cfg.destinations_url, transport=transport),
            pricing=UpstreamClient("pricing", cfg.pricing_url, transport=transport),
            itineraries=UpstreamClient("itineraries", cfg.itineraries_url, transport=transport),
            destinations_page_limit=cfg.destinations_page_limit,
        )

    async def close(self) -> None:
        await self.destinations.close()
        await self.pricing.close()
        await self.itineraries.close()
