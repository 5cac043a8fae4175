"""
Services package - Business logic and external API integrations
"""

from .transport import RequestsTransport, Transport
from .credentials import Credential, CredentialCache, CredentialState
from .amadeus import AmadeusClient
from .locations import LocationDirectory, group_locations
from .normalizer import CodeDictionary, OfferNormalizer
from .filters import FilterEngine
from .highlights import Highlight, HighlightKind, HighlightSelector
from .search import FlightSearchService, build_flight_search_service, get_flight_search_service

__all__ = [
    "RequestsTransport",
    "Transport",
    "Credential",
    "CredentialCache",
    "CredentialState",
    "AmadeusClient",
    "LocationDirectory",
    "group_locations",
    "CodeDictionary",
    "OfferNormalizer",
    "FilterEngine",
    "Highlight",
    "HighlightKind",
    "HighlightSelector",
    "FlightSearchService",
    "build_flight_search_service",
    "get_flight_search_service"
]
