from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from shared.concurrency import join_all
from shared.http_client import UpstreamClient, UpstreamError
from travel_schemas.api_schemas import ReferenceCheck, SegmentValidation
from travel_schemas.models import lodging_class_name

from .dates import parse_instant
from .services import UpstreamServices


async def validate_city_exists(destinations: UpstreamClient, city_id: Any) -> ReferenceCheck:
    """
    A 404 from the destinations service means the reference is invalid.
    Any other failure means we could not check, and is raised.
    """
    try:
        await destinations.get(f"/cities/{city_id}")
    except UpstreamError as e:
        if e.not_found:
            return ReferenceCheck(valid=False, error=f"City with ID '{city_id}' does not exist")
        raise
    return ReferenceCheck(valid=True)


async def validate_lodging_class(pricing: UpstreamClient, lodging_class: str) -> ReferenceCheck:
    classes = await pricing.get("/lodging-classes") or []
    if any(lodging_class_name(lc) == lodging_class for lc in classes):
        return ReferenceCheck(valid=True)
    return ReferenceCheck(valid=False, error=f"Lodging class '{lodging_class}' does not exist")


async def _passed() -> ReferenceCheck:
    return ReferenceCheck(valid=True)


async def validate_segment(services: UpstreamServices, segment: Dict[str, Any]) -> SegmentValidation:
    """
    Collect every problem with one segment instead of stopping at the first.

    Reference lookups are only made for fields that are present; the city
    and lodging class lookups run concurrently.
    """
    city_id = segment.get("city_id")
    lodging_class = segment.get("lodging_class")

    city_check, lodging_check = await join_all(
        validate_city_exists(services.destinations, city_id) if city_id else _passed(),
        validate_lodging_class(services.pricing, lodging_class) if lodging_class else _passed(),
    )

    errors: List[str] = []
    if not city_id:
        errors.append("Segment missing city_id")
    elif not city_check.valid:
        errors.append(city_check.error)

    if not lodging_class:
        errors.append("Segment missing lodging_class")
    elif not lodging_check.valid:
        errors.append(lodging_check.error)

    start = _segment_date(segment, "start_date", errors)
    end = _segment_date(segment, "end_date", errors)
    if start is not None and end is not None and end <= start:
        errors.append("end_date must be after start_date")

    return SegmentValidation(valid=not errors, errors=errors)


def _segment_date(segment: Dict[str, Any], field: str, errors: List[str]) -> Optional[datetime]:
    value = segment.get(field)
    if not value:
        errors.append(f"Segment missing {field}")
        return None
    try:
        return parse_instant(value)
    except ValueError:
        errors.append(f"Segment has invalid {field}")
        return None
