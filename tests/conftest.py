import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import ServiceConfig
from app.main import create_app
from app.orchestrator import CompositeOrchestrator
from app.services import UpstreamServices

DESTINATIONS = "destinations.test"
PRICING = "pricing.test"
ITINERARIES = "itineraries.test"

CITIES = {
    "paris": {"id": "paris", "name": "Paris", "country_code": "FR", "currency": "EUR"},
    "rome": {"id": "rome", "name": "Rome", "country_code": "IT", "currency": "EUR"},
    "tokyo": {"id": "tokyo", "name": "Tokyo", "country_code": "JP", "currency": "JPY"},
}


class FakeUpstream:
    """
    In-memory stand-in for the three upstream services.

    Answers are registered per (method, host, path). An answer is either a
    JSON payload, an httpx.Response, or a (sync or async) callable taking the
    request and returning one of those. Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str, str], Any] = {}
        self.calls: List[httpx.Request] = []

    def add(self, method: str, host: str, path: str, answer: Any = None, status_code: int = 200) -> None:
        if status_code != 200:
            answer = httpx.Response(status_code, json={"error": "upstream"})
        self.routes[(method, host, path)] = answer

    def calls_to(self, host: Optional[str] = None, method: Optional[str] = None) -> List[httpx.Request]:
        return [
            r
            for r in self.calls
            if (host is None or r.url.host == host) and (method is None or r.method == method)
        ]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, request.url.host, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"error": "not found"})

        answer = self.routes[key]
        if callable(answer):
            answer = answer(request)
            if asyncio.iscoroutine(answer):
                answer = await answer
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    # common fixtures for the destinations and pricing services
    def with_cities(self, *city_ids: str) -> "FakeUpstream":
        for city_id in city_ids:
            self.add("GET", DESTINATIONS, f"/cities/{city_id}", CITIES[city_id])
        return self

    def with_lodging_classes(self, classes: List[Any]) -> "FakeUpstream":
        self.add("GET", PRICING, "/lodging-classes", classes)
        return self

    def with_rates(self, rates_by_city: Dict[str, List[Dict[str, Any]]]) -> "FakeUpstream":
        def answer(request: httpx.Request) -> Any:
            return rates_by_city.get(request.url.params.get("city_id"), [])

        self.add("GET", PRICING, "/rates", answer)
        return self


def body_of(request: httpx.Request) -> Any:
    return json.loads(request.content)


@pytest.fixture
def fake() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def config() -> ServiceConfig:
    return ServiceConfig(
        destinations_url=f"http://{DESTINATIONS}",
        pricing_url=f"http://{PRICING}",
        itineraries_url=f"http://{ITINERARIES}",
    )


@pytest.fixture
def services(fake: FakeUpstream, config: ServiceConfig) -> UpstreamServices:
    return UpstreamServices.from_config(config, transport=httpx.MockTransport(fake.handle))


@pytest.fixture
def orchestrator(services: UpstreamServices) -> CompositeOrchestrator:
    return CompositeOrchestrator(services)


@pytest.fixture
def run(services: UpstreamServices) -> Callable[[Any], Any]:
    """Drive one coroutine to completion, then release the upstream clients."""

    def _run(coro: Any) -> Any:
        async def _go() -> Any:
            try:
                return await coro
            finally:
                await services.close()

        return asyncio.run(_go())

    return _run


@pytest.fixture
def client(config: ServiceConfig, services: UpstreamServices):
    with TestClient(create_app(config, services)) as c:
        yield c
