"""
Offer Normalizer - Maps raw Amadeus flight-offer payloads into the domain model

Pure transformation: no I/O, and the same input always yields the same
output (the search timestamp is an input).
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from flight_search.core.exceptions import NormalizationError
from flight_search.models.flight import (
    Airline,
    CabinClass,
    Direction,
    FlightOffer,
    FlightPoint,
    FlightSearchResult,
    Itinerary,
    Price,
    SearchMeta,
    SearchSummary,
    Segment,
    parse_duration
)
from flight_search.models.request import FlightSearchParams
from flight_search.services.credentials import Clock, utc_now

logger = logging.getLogger(__name__)


class CodeDictionary:
    """
    Total code -> name lookup over a response dictionary

    Unknown codes resolve to the code itself.
    """

    def __init__(self, entries: Optional[Mapping[str, Any]] = None):
        self._entries = dict(entries or {})

    def name_for(self, code: str) -> str:
        value = self._entries.get(code)
        if isinstance(value, str) and value:
            return value
        return code

    def get(self, code: str) -> Optional[Any]:
        return self._entries.get(code)

    def __contains__(self, code: str) -> bool:
        return code in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class Dictionaries:
    """The carrier, aircraft and location dictionaries of one response"""

    def __init__(self, raw: Optional[Mapping[str, Any]] = None):
        raw = raw or {}
        self.carriers = CodeDictionary(raw.get("carriers"))
        self.aircraft = CodeDictionary(raw.get("aircraft"))
        self.locations = CodeDictionary(raw.get("locations"))

    def airline(self, code: str) -> Airline:
        return Airline(code=code, name=self.carriers.name_for(code))


def _duration(value: Any):
    try:
        return parse_duration(value)
    except ValueError as e:
        raise NormalizationError(str(e))


class OfferNormalizer:
    """
    Transforms the provider response into FlightSearchResult

    Key rules:
    - per-traveler price divides by the number of traveler pricings
    - unresolved dictionary codes fall back to the raw code
    - an offer is non-stop only if every itinerary is direct
    - operating_airline is left out when the segment reports none
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or utc_now

    def normalize(
        self,
        raw: Mapping[str, Any],
        params: FlightSearchParams,
        searched_at: Optional[datetime] = None
    ) -> FlightSearchResult:
        """
        Normalize a flight-offers response

        Args:
            raw: Raw provider payload with data, dictionaries and meta
            params: Parameters the search was issued with
            searched_at: Timestamp to record (defaults to the clock)

        Returns:
            FlightSearchResult with normalized offers

        Raises:
            NormalizationError: If the payload or any offer is malformed
        """
        if not isinstance(raw, Mapping):
            raise NormalizationError("Flight offers payload must be a JSON object")

        data = raw.get("data", [])
        if not isinstance(data, list):
            raise NormalizationError("Flight offers payload 'data' must be a list")

        dictionaries = Dictionaries(raw.get("dictionaries"))
        offers = [self.normalize_offer(offer, dictionaries) for offer in data]

        meta = raw.get("meta") or {}
        total_count = meta.get("count", len(offers)) if isinstance(meta, Mapping) else len(offers)
        if isinstance(total_count, bool) or not isinstance(total_count, int) or total_count < 0:
            raise NormalizationError(
                "Flight offers payload 'meta.count' must be a non-negative integer",
                details=repr(total_count)
            )

        return FlightSearchResult(
            offers=offers,
            meta=SearchMeta(
                total_count=total_count,
                search_params=SearchSummary(
                    origin=params.origin_location_code,
                    destination=params.destination_location_code,
                    departure_date=params.departure_date,
                    return_date=params.return_date,
                    passengers=params.passengers
                ),
                searched_at=searched_at or self._clock()
            )
        )

    def normalize_offer(self, offer: Mapping[str, Any], dictionaries: Dictionaries) -> FlightOffer:
        """Transform a single raw offer into FlightOffer"""
        offer_id = offer.get("id", "?") if isinstance(offer, Mapping) else "?"

        try:
            itineraries = [
                self.normalize_itinerary(itinerary, index, dictionaries)
                for index, itinerary in enumerate(offer["itineraries"])
            ]
            traveler_pricings = offer.get("travelerPricings") or []

            validating_codes = offer.get("validatingAirlineCodes") or []
            validating_code = (
                validating_codes[0] if validating_codes
                else itineraries[0].first_segment.airline.code
            )

            return FlightOffer(
                id=str(offer["id"]),
                price=self.normalize_price(offer["price"], len(traveler_pricings)),
                itineraries=itineraries,
                validating_airline=dictionaries.airline(validating_code),
                booking_class=self._cabin(traveler_pricings),
                seats_available=offer.get("numberOfBookableSeats", 0),
                last_ticketing_date=offer.get("lastTicketingDate")
            )

        except NormalizationError as e:
            raise NormalizationError(f"Malformed flight offer {offer_id}: {e.message}", details=e.details)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            raise NormalizationError(f"Malformed flight offer {offer_id}: {e!r}")

    def normalize_price(self, price: Mapping[str, Any], priced_travelers: int) -> Price:
        """
        Derive Price from the provider price block

        The divisor is the number of traveler pricings, not the passenger
        count: a lap infant may have no pricing entry of its own.
        """
        if priced_travelers < 1:
            raise NormalizationError("Offer has no traveler pricings")

        total = float(price.get("grandTotal", price.get("total")))
        return Price(
            total=total,
            base=float(price["base"]),
            currency=price["currency"],
            per_traveler=total / priced_travelers
        )

    def normalize_itinerary(
        self,
        itinerary: Mapping[str, Any],
        index: int,
        dictionaries: Dictionaries
    ) -> Itinerary:
        return Itinerary(
            direction=Direction.OUTBOUND if index == 0 else Direction.INBOUND,
            duration=_duration(itinerary["duration"]),
            segments=[self.normalize_segment(segment, dictionaries) for segment in itinerary["segments"]]
        )

    def normalize_segment(self, segment: Mapping[str, Any], dictionaries: Dictionaries) -> Segment:
        carrier_code = segment["carrierCode"]
        operating = segment.get("operating") or {}
        operating_code = operating.get("carrierCode")

        return Segment(
            id=str(segment["id"]),
            departure=self._point(segment["departure"], dictionaries),
            arrival=self._point(segment["arrival"], dictionaries),
            duration=_duration(segment["duration"]),
            flight_number=f"{carrier_code}{segment['number']}",
            airline=dictionaries.airline(carrier_code),
            operating_airline=dictionaries.airline(operating_code) if operating_code else None,
            aircraft=dictionaries.aircraft.name_for(segment["aircraft"]["code"]),
            stops=segment.get("numberOfStops", 0)
        )

    def _point(self, point: Mapping[str, Any], dictionaries: Dictionaries) -> FlightPoint:
        airport_code = point["iataCode"]
        location = dictionaries.locations.get(airport_code) or {}
        at = point["at"]
        moment = datetime.fromisoformat(at)

        return FlightPoint(
            airport_code=airport_code,
            city_code=location.get("cityCode") or airport_code,
            country_code=location.get("countryCode") or "",
            terminal=point.get("terminal"),
            date_time=at,
            time=moment.strftime("%H:%M"),
            date=moment.date().isoformat()
        )

    @staticmethod
    def _cabin(traveler_pricings: List[Dict[str, Any]]) -> CabinClass:
        try:
            cabin = traveler_pricings[0]["fareDetailsBySegment"][0]["cabin"]
        except (IndexError, KeyError, TypeError):
            return CabinClass.ECONOMY
        return CabinClass(cabin or CabinClass.ECONOMY.value)
