from __future__ import annotations
from typing import Any, List, Optional, Union
from pydantic import BaseModel, ConfigDict, ValidationError

# Upstream entities. Only the fields this service reads are declared;
# everything else is carried through untouched.

class City(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int, None] = None
    name: Optional[str] = None
    country_code: Optional[str] = None
    currency: Optional[str] = None

class Season(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int, None] = None
    city_id: Union[str, int, None] = None

class LodgingClass(BaseModel):
    model_config = ConfigDict(extra="allow")

    class_name: Optional[str] = None

class Rate(BaseModel):
    model_config = ConfigDict(extra="allow")

    city_id: Union[str, int, None] = None
    lodging_class: Optional[str] = None
    price_per_night: Union[str, float, int]

class Segment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int, None] = None
    itinerary_id: Union[str, int, None] = None
    city_id: Union[str, int, None] = None
    lodging_class: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class Page(BaseModel):
    """Paginated envelope some upstreams wrap their lists in."""
    model_config = ConfigDict(extra="allow")

    data: List[Any]


class UnexpectedPayloadError(ValueError):
    pass


def unwrap_page(payload: Any) -> List[Any]:
    """
    Normalise a list response that may arrive bare or as {"data": [...]}.
    """
    if isinstance(payload, list):
        return payload
    try:
        return Page.model_validate(payload).data
    except ValidationError as e:
        raise UnexpectedPayloadError(
            f"Expected a list or a {{data: [...]}} page, got {type(payload).__name__}"
        ) from e


def lodging_class_name(entry: Any) -> Optional[str]:
    """Lodging classes come back as bare strings or {"class_name": ...} objects."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        return LodgingClass.model_validate(entry).class_name
    return None
