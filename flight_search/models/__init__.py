"""
Models package - Pydantic schemas for data validation
"""

from .flight import (
    Airline,
    CabinClass,
    Direction,
    Duration,
    FlightOffer,
    FlightPoint,
    FlightSearchResult,
    Itinerary,
    Price,
    SearchMeta,
    SearchSummary,
    Segment,
    format_offer_summary,
    parse_duration
)
from .request import FlightSearchParams
from .location import LocationEntry, LocationKind
from .filters import FilterCriteria, FilterOptions, StopCategory

__all__ = [
    "Airline",
    "CabinClass",
    "Direction",
    "Duration",
    "FlightOffer",
    "FlightPoint",
    "FlightSearchResult",
    "Itinerary",
    "Price",
    "SearchMeta",
    "SearchSummary",
    "Segment",
    "format_offer_summary",
    "parse_duration",
    "FlightSearchParams",
    "LocationEntry",
    "LocationKind",
    "FilterCriteria",
    "FilterOptions",
    "StopCategory"
]
