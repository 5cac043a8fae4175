"""
Filter Engine - Narrows a result set by stops, airlines, price, times and duration

Bounds are always computed from the unfiltered offers, so narrowing one
dimension never shrinks the range offered for another.
"""

import math
from typing import Dict, List, Sequence

from flight_search.models.filters import FilterCriteria, FilterOptions, StopCategory
from flight_search.models.flight import Airline, FlightOffer


def _round_up(value: float, step: int) -> int:
    return int(math.ceil(value / step) * step)


class FilterEngine:
    """
    Evaluates FilterCriteria against normalized offers

    Criteria are AND-combined across dimensions:
    - Stops: every itinerary's stop category must be allowed
    - Airlines: at least one outbound segment must use an allowed airline
    - Price: total within [min, max]
    - Departure/arrival hour: outbound first departure and last arrival
    - Duration: outbound total minutes up to the maximum
    """

    DURATION_STEP = 30  # minutes
    EMPTY_MAX_PRICE = 1000
    EMPTY_MAX_DURATION = 1440

    def compute_filter_bounds(self, offers: Sequence[FlightOffer]) -> FilterOptions:
        """
        Derive the available filter options from an unfiltered result set

        Args:
            offers: All offers of the search, before any filtering

        Returns:
            FilterOptions with airlines, price bounds, max duration and which
            stop categories occur
        """
        if not offers:
            return FilterOptions(
                min_price=0,
                max_price=self.EMPTY_MAX_PRICE,
                max_duration=self.EMPTY_MAX_DURATION
            )

        airlines: Dict[str, Airline] = {}
        categories = set()
        prices = []
        max_duration = 0

        for offer in offers:
            for segment in offer.outbound.segments:
                airlines.setdefault(segment.airline.code, segment.airline)

            prices.append(offer.price.total)
            max_duration = max(max_duration, offer.outbound.duration.total_minutes)

            for itinerary in offer.itineraries:
                categories.add(StopCategory.from_stops(itinerary.stops))

        return FilterOptions(
            airlines=tuple(airlines.values()),
            min_price=math.floor(min(prices)),
            max_price=math.ceil(max(prices)),
            max_duration=_round_up(max_duration, self.DURATION_STEP),
            has_non_stop=StopCategory.NON_STOP in categories,
            has_one_stop=StopCategory.ONE_STOP in categories,
            has_two_plus_stops=StopCategory.TWO_PLUS in categories
        )

    def apply(self, offers: Sequence[FlightOffer], criteria: FilterCriteria) -> List[FlightOffer]:
        """
        Return the offers matching every dimension of the criteria

        Input order is preserved.
        """
        return [offer for offer in offers if self.matches(offer, criteria)]

    def matches(self, offer: FlightOffer, criteria: FilterCriteria) -> bool:
        return (
            self._meets_stops(offer, criteria)
            and self._meets_airlines(offer, criteria)
            and self._meets_price(offer, criteria)
            and self._meets_times(offer, criteria)
            and self._meets_duration(offer, criteria)
        )

    def default_criteria(self, options: FilterOptions) -> FilterCriteria:
        """The cleared filter state for a result set"""
        return FilterCriteria(
            price_range=(options.min_price, options.max_price),
            max_duration_minutes=options.max_duration
        )

    def active_filter_count(self, criteria: FilterCriteria, options: FilterOptions) -> int:
        """Number of dimensions narrowed relative to the bounds"""
        count = 0
        if criteria.stops:
            count += 1
        if criteria.airlines:
            count += 1
        low, high = criteria.price_range
        if low > options.min_price or high < options.max_price:
            count += 1
        if criteria.departure_hour_range != (0, 24):
            count += 1
        if criteria.arrival_hour_range != (0, 24):
            count += 1
        if criteria.max_duration_minutes is not None and criteria.max_duration_minutes < options.max_duration:
            count += 1
        return count

    @staticmethod
    def _meets_stops(offer: FlightOffer, criteria: FilterCriteria) -> bool:
        if not criteria.stops:
            return True
        # Round trips: both directions must be allowed
        return all(
            StopCategory.from_stops(itinerary.stops) in criteria.stops
            for itinerary in offer.itineraries
        )

    @staticmethod
    def _meets_airlines(offer: FlightOffer, criteria: FilterCriteria) -> bool:
        if not criteria.airlines:
            return True
        # Outbound only; inbound carriers are not considered
        return any(segment.airline.code in criteria.airlines for segment in offer.outbound.segments)

    @staticmethod
    def _meets_price(offer: FlightOffer, criteria: FilterCriteria) -> bool:
        low, high = criteria.price_range
        return low <= offer.price.total <= high

    @staticmethod
    def _meets_times(offer: FlightOffer, criteria: FilterCriteria) -> bool:
        outbound = offer.outbound
        departure_hour = outbound.first_segment.departure.hour
        arrival_hour = outbound.last_segment.arrival.hour

        dep_low, dep_high = criteria.departure_hour_range
        arr_low, arr_high = criteria.arrival_hour_range
        return dep_low <= departure_hour <= dep_high and arr_low <= arrival_hour <= arr_high

    @staticmethod
    def _meets_duration(offer: FlightOffer, criteria: FilterCriteria) -> bool:
        if criteria.max_duration_minutes is None:
            return True
        return offer.outbound.duration.total_minutes <= criteria.max_duration_minutes
