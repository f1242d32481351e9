from __future__ import annotations
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field

# Validation results
class ReferenceCheck(BaseModel):
    valid: bool
    error: Optional[str] = None

class SegmentValidation(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)

class SegmentValidationDetail(BaseModel):
    segment_index: int
    errors: List[str]

# Requests
class CompositeItineraryIn(BaseModel):
    # forwarded as-is; only an absent or falsy scalar value counts as missing
    itinerary: Optional[Any] = None
    # anything other than a list is treated as "no segments"
    segments: Optional[Any] = None

    def segment_list(self) -> List[Dict[str, Any]]:
        if isinstance(self.segments, list):
            return [s if isinstance(s, dict) else {} for s in self.segments]
        return []

# Quotes
class SegmentQuote(BaseModel):
    segment_id: Union[str, int, None] = None
    city_name: Optional[str] = None
    lodging_class: Optional[str] = None
    nights: int
    price_per_night: float
    currency: Optional[str] = None
    total: float

class QuoteSummary(BaseModel):
    itinerary_id: Optional[str] = None
    currency: Optional[str] = None
    total: float = 0
    segments: List[SegmentQuote] = Field(default_factory=list)

# Errors / misc
class ErrorResponse(BaseModel):
    error: str

class ValidationErrorResponse(ErrorResponse):
    details: List[SegmentValidationDetail]

class HealthResponse(BaseModel):
    status: str = "ok"
    service: str
