from __future__ import annotations

from typing import Any, Dict, List

from shared.concurrency import join_all
from shared.logging import get_logger
from travel_schemas.api_schemas import QuoteSummary, SegmentQuote
from travel_schemas.models import City, Rate, Season, Segment, unwrap_page

from .dates import nights_between
from .errors import MissingItineraryError, MixedCurrencyError, SegmentValidationFailed
from .graph import create_itinerary_flow
from .services import UpstreamServices

logger = get_logger(__name__)


class CompositeOrchestrator:
    """
    Composite operations over the destinations, pricing and itineraries
    services. Holds no per-request state; every call builds its own.
    """

    def __init__(self, services: UpstreamServices):
        self.services = services

    async def _city_and_rates(self, segment: Dict[str, Any]) -> List[Any]:
        city_id = segment.get("city_id")
        return await join_all(
            self.services.destinations.get(f"/cities/{city_id}"),
            self.services.pricing.get(
                "/rates",
                params={"city_id": city_id, "lodging_class": segment.get("lodging_class")},
            ),
        )

    # GET /composite/itineraries/{id}
    async def get_itinerary(self, itinerary_id: str) -> Dict[str, Any]:
        itineraries = self.services.itineraries
        itinerary, segments = await join_all(
            itineraries.get(f"/itineraries/{itinerary_id}"),
            itineraries.get(f"/itineraries/{itinerary_id}/segments"),
        )
        enriched = await join_all(*(self._enrich_segment(seg) for seg in segments or []))
        return {**itinerary, "segments": enriched}

    async def _enrich_segment(self, segment: Dict[str, Any]) -> Dict[str, Any]:
        raw_city, rates = await self._city_and_rates(segment)
        city = City.model_validate(raw_city)
        return {
            **segment,
            "city_name": city.name,
            "country_code": city.country_code,
            "currency": city.currency,
            "rates": rates or [],
        }

    # GET /composite/destinations
    async def get_destinations(self) -> List[Dict[str, Any]]:
        page = {"limit": self.services.destinations_page_limit}
        cities_payload, seasons_payload = await join_all(
            self.services.destinations.get("/cities", params=page),
            self.services.destinations.get("/seasons", params=page),
        )
        cities = unwrap_page(cities_payload)
        seasons = unwrap_page(seasons_payload)

        seasons_by_city: Dict[str, List[Dict[str, Any]]] = {}
        for season in seasons:
            seasons_by_city.setdefault(str(Season.model_validate(season).city_id), []).append(season)

        return [{**city, "seasons": seasons_by_city.get(str(city.get("id")), [])} for city in cities]

    # POST /composite/itineraries
    async def create_itinerary(
        self,
        itinerary: Any,
        segments: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Validates all segments, then creates the itinerary and its segments.

        Nothing is written when any segment is invalid. A failure while
        creating segments leaves the already-created itinerary in place.
        """
        if _missing(itinerary):
            raise MissingItineraryError()

        result = await create_itinerary_flow.ainvoke(
            {"itinerary": itinerary, "segments": segments},
            config={"configurable": {"services": self.services}},
        )
        if result.get("validation_errors"):
            raise SegmentValidationFailed(result["validation_errors"])

        return {**(result.get("created_itinerary") or {}), "segments": result.get("created_segments", [])}

    # GET /composite/quotes/{itinerary_id}
    async def get_quotes(self, itinerary_id: str) -> QuoteSummary:
        segments = await self.services.itineraries.get(f"/itineraries/{itinerary_id}/segments") or []
        if not segments:
            return QuoteSummary(total=0, segments=[])

        quotes: List[SegmentQuote] = await join_all(*(self._quote_segment(seg) for seg in segments))

        currencies = sorted({q.currency for q in quotes if q.currency})
        if len(currencies) > 1:
            logger.warning("quote_rejected itinerary_id=%s currencies=%s", itinerary_id, currencies)
            raise MixedCurrencyError(currencies)

        return QuoteSummary(
            itinerary_id=itinerary_id,
            currency=currencies[0] if currencies else None,
            total=sum(q.total for q in quotes),
            segments=quotes,
        )

    async def _quote_segment(self, raw: Dict[str, Any]) -> SegmentQuote:
        raw_city, rates = await self._city_and_rates(raw)
        segment = Segment.model_validate(raw)
        city = City.model_validate(raw_city)

        nights = nights_between(segment.start_date, segment.end_date)
        # first matching rate wins; no rate means a zero price
        price_per_night = 0.0
        if isinstance(rates, list) and rates:
            price_per_night = float(Rate.model_validate(rates[0]).price_per_night)

        return SegmentQuote(
            segment_id=segment.id,
            city_name=city.name,
            lodging_class=segment.lodging_class,
            nights=nights,
            price_per_night=price_per_night,
            currency=city.currency,
            total=price_per_night * nights,
        )


def _missing(value: Any) -> bool:
    # an empty object or list is still an itinerary
    return value is None or (not isinstance(value, (dict, list)) and not value)
