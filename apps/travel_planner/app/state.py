# apps/travel_planner/app/state.py

from typing import TypedDict, List, Any, Dict, Optional

from travel_schemas.api_schemas import SegmentValidationDetail


# State passed between the nodes of the create-itinerary workflow.
# Each node returns only the keys it fills in.
class CreateItineraryState(TypedDict, total=False):
    # Input state
    itinerary: Any
    segments: List[Dict[str, Any]]

    # Populated by validate_segments; non-empty stops the workflow
    validation_errors: List[SegmentValidationDetail]

    # Populated by the write nodes
    created_itinerary: Optional[Dict[str, Any]]
    created_segments: List[Any]
