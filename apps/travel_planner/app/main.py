from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.http_client import TRACE_HEADER, trace_id_var
from shared.logging import configure_logging, get_logger
from travel_schemas.api_schemas import (
    CompositeItineraryIn,
    ErrorResponse,
    HealthResponse,
    QuoteSummary,
    ValidationErrorResponse,
)

from .config import SERVICE_NAME, ServiceConfig
from .dependencies import get_orchestrator
from .errors import (
    CompositeError,
    handle_composite_error,
    handle_http_exception,
    handle_request_validation,
    upstream_boundary,
)
from .orchestrator import CompositeOrchestrator
from .services import UpstreamServices

logger = get_logger(__name__)

router = APIRouter(
    prefix="/composite",
    tags=["composite"],
    responses={500: {"model": ErrorResponse, "description": "Upstream failure"}},
)


@router.get("/itineraries/{itinerary_id}")
async def get_composite_itinerary(
    itinerary_id: str,
    orchestrator: CompositeOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    with upstream_boundary("fetching composite itinerary", "Failed to fetch composite itinerary"):
        return await orchestrator.get_itinerary(itinerary_id)


@router.get("/destinations")
async def get_destinations(
    orchestrator: CompositeOrchestrator = Depends(get_orchestrator),
) -> List[Dict[str, Any]]:
    with upstream_boundary("fetching destinations", "Failed to fetch destinations"):
        return await orchestrator.get_destinations()


@router.post(
    "/itineraries",
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ValidationErrorResponse, "description": "Invalid itinerary or segments"}},
)
async def create_composite_itinerary(
    body: Optional[CompositeItineraryIn] = None,
    orchestrator: CompositeOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    body = body or CompositeItineraryIn()
    with upstream_boundary("creating composite itinerary", "Failed to create composite itinerary"):
        return await orchestrator.create_itinerary(body.itinerary, body.segment_list())


@router.get(
    "/quotes/{itinerary_id}",
    response_model=QuoteSummary,
    response_model_exclude_unset=True,
    responses={422: {"model": ErrorResponse, "description": "Segments priced in more than one currency"}},
)
async def get_quotes(
    itinerary_id: str,
    orchestrator: CompositeOrchestrator = Depends(get_orchestrator),
) -> QuoteSummary:
    with upstream_boundary("calculating quotes", "Failed to calculate quotes"):
        return await orchestrator.get_quotes(itinerary_id)


def create_app(
    config: Optional[ServiceConfig] = None,
    services: Optional[UpstreamServices] = None,
) -> FastAPI:
    """
    Build the HTTP app. `services` is injected in tests; otherwise the
    upstream clients are built from `config` at startup.
    """
    cfg = config or ServiceConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(cfg.log_level)
        if app.state.services is None:
            app.state.services = UpstreamServices.from_config(cfg)
        logger.info("%s starting", SERVICE_NAME)
        logger.info("upstream destinations=%s", app.state.services.destinations.base_url)
        logger.info("upstream pricing=%s", app.state.services.pricing.base_url)
        logger.info("upstream itineraries=%s", app.state.services.itineraries.base_url)
        yield
        await app.state.services.close()

    app = FastAPI(title="travel-planner", version="0.1.0", lifespan=lifespan)
    app.state.config = cfg
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def trace_requests(request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        token = trace_id_var.set(trace_id)
        started = time.time()
        try:
            response = await call_next(request)
        finally:
            trace_id_var.reset(token)
        elapsed_ms = int((time.time() - started) * 1000)
        response.headers[TRACE_HEADER] = trace_id
        logger.info(
            "%s %s %s latency_ms=%s trace_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            trace_id,
        )
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service=SERVICE_NAME)

    app.include_router(router)

    app.add_exception_handler(CompositeError, handle_composite_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    return app


app = create_app()
