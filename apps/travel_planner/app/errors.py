from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.logging import get_logger
from travel_schemas.api_schemas import SegmentValidationDetail

logger = get_logger(__name__)


class CompositeError(Exception):
    """
    Error raised by a composite operation that maps onto a client-facing
    status code and an {"error": ...} body.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class MissingItineraryError(CompositeError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self) -> None:
        super().__init__("Missing itinerary data")


class InvalidRequestBody(CompositeError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self) -> None:
        super().__init__("Invalid request body")


class SegmentValidationFailed(CompositeError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, details: List[SegmentValidationDetail]):
        super().__init__("Segment validation failed")
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "details": [d.model_dump() for d in self.details]}


class MixedCurrencyError(CompositeError):
    status_code = 422

    def __init__(self, currencies: List[str]):
        super().__init__(f"Itinerary mixes currencies: {', '.join(currencies)}")
        self.currencies = currencies


async def handle_composite_error(request: Request, exc: CompositeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("composite_error path=%s err=%s", request.url.path, exc.message)
    else:
        logger.info("request_rejected path=%s status=%s err=%s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await handle_composite_error(request, InvalidRequestBody())


def server_error(exc: Exception, fallback: str) -> CompositeError:
    """Wrap an unexpected upstream/transport failure for the client."""
    return CompositeError(str(exc) or fallback)


@contextmanager
def upstream_boundary(action: str, fallback: str) -> Iterator[None]:
    """
    Turns anything a composite operation did not expect (upstream non-2xx,
    transport errors, malformed bodies) into a 500 for the client.
    """
    try:
        yield
    except CompositeError:
        raise
    except Exception as e:
        logger.exception("Error %s", action)
        raise server_error(e, fallback) from e
