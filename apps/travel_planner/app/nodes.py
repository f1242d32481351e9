# apps/travel_planner/app/nodes.py

from typing import Any, Dict

from langchain_core.runnables import RunnableConfig

from shared.concurrency import join_all
from shared.logging import get_logger
from travel_schemas.api_schemas import SegmentValidationDetail

from .services import UpstreamServices
from .state import CreateItineraryState
from .validation import validate_segment

logger = get_logger(__name__)


def _services(config: RunnableConfig) -> UpstreamServices:
    return config["configurable"]["services"]


async def validate_segments(state: CreateItineraryState, config: RunnableConfig) -> Dict[str, Any]:
    """
    Validates every segment concurrently before anything is written.
    Invalid segments are reported in input order.
    """
    services = _services(config)
    segments = state.get("segments") or []

    results = await join_all(*(validate_segment(services, seg) for seg in segments))
    invalid = [
        SegmentValidationDetail(segment_index=index, errors=result.errors)
        for index, result in enumerate(results)
        if not result.valid
    ]
    if invalid:
        logger.info("segment_validation_failed invalid=%s total=%s", len(invalid), len(segments))
    return {"validation_errors": invalid}


async def create_itinerary(state: CreateItineraryState, config: RunnableConfig) -> Dict[str, Any]:
    created = await _services(config).itineraries.post("/itineraries", state["itinerary"])
    logger.info("itinerary_created id=%s", (created or {}).get("id"))
    return {"created_itinerary": created}


async def create_segments(state: CreateItineraryState, config: RunnableConfig) -> Dict[str, Any]:
    """
    Creates the segments under the new itinerary. The itinerary is not
    removed if this step fails.
    """
    segments = state.get("segments") or []
    if not segments:
        return {"created_segments": []}

    itinerary_id = (state.get("created_itinerary") or {}).get("id")
    itineraries = _services(config).itineraries
    try:
        created = await join_all(
            *(itineraries.post(f"/itineraries/{itinerary_id}/segments", seg) for seg in segments)
        )
    except Exception:
        logger.error("segment_creation_failed itinerary_id=%s left_without_rollback=true", itinerary_id)
        raise
    return {"created_segments": created}
