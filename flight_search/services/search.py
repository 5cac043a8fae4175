"""
Flight Search Service - Orchestrates one search invocation end to end

Fetch (with retries by error category) -> normalize -> filter -> highlight.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from flight_search.core.config import Settings, get_settings
from flight_search.core.exceptions import ApiError, AuthError, ConfigError, NetworkError
from flight_search.models.filters import FilterCriteria, FilterOptions
from flight_search.models.flight import FlightOffer, FlightSearchResult
from flight_search.models.location import LocationEntry
from flight_search.models.request import FlightSearchParams
from flight_search.services.amadeus import AmadeusClient
from flight_search.services.credentials import CredentialCache
from flight_search.services.filters import FilterEngine
from flight_search.services.highlights import Highlight, HighlightSelector
from flight_search.services.locations import LocationDirectory
from flight_search.services.normalizer import OfferNormalizer
from flight_search.services.transport import RequestsTransport

logger = logging.getLogger(__name__)

Backoff = Callable[[int], float]
Sleep = Callable[[float], Awaitable[None]]


def exponential_backoff(base_seconds: float) -> Backoff:
    """Delay before retry n (1-based): base * 2**(n-1)"""
    def backoff(attempt: int) -> float:
        return base_seconds * (2 ** (attempt - 1))
    return backoff


class FlightSearchService:
    """
    Entry point used by the presentation layer

    Retry policy:
    - ConfigError: never retried
    - AuthError: retried at most max_auth_retries times
    - ApiError / NetworkError: retried up to max_api_retries times with backoff
    - NormalizationError: never retried
    """

    def __init__(
        self,
        client: AmadeusClient,
        locations: Optional[LocationDirectory] = None,
        normalizer: Optional[OfferNormalizer] = None,
        filter_engine: Optional[FilterEngine] = None,
        highlight_selector: Optional[HighlightSelector] = None,
        max_api_retries: int = 2,
        max_auth_retries: int = 1,
        backoff: Optional[Backoff] = None,
        sleep: Optional[Sleep] = None
    ):
        self.client = client
        self.locations = locations or LocationDirectory(client)
        self.normalizer = normalizer or OfferNormalizer()
        self.filter_engine = filter_engine or FilterEngine()
        self.highlight_selector = highlight_selector or HighlightSelector()
        self.max_api_retries = max_api_retries
        self.max_auth_retries = max_auth_retries
        self._backoff = backoff or exponential_backoff(0.5)
        self._sleep = sleep or asyncio.sleep
        self._latest_search = 0
        self._latest_result: Optional[FlightSearchResult] = None

    @property
    def latest_result(self) -> Optional[FlightSearchResult]:
        """Result of the most recently started search, once it has landed"""
        return self._latest_result

    async def search(self, params: FlightSearchParams) -> FlightSearchResult:
        """
        Search and normalize flight offers

        Args:
            params: Validated search parameters

        Returns:
            FlightSearchResult for these parameters

        Raises:
            ConfigError, AuthError, ApiError, NetworkError: After retries
            NormalizationError: If the provider payload is malformed
        """
        self._latest_search += 1
        search_id = self._latest_search

        raw = await self._fetch_with_retries(params)
        result = self.normalizer.normalize(raw, params)

        logger.info(
            f"Found {len(result.offers)} offer(s) for "
            f"{params.origin_location_code} -> {params.destination_location_code}"
        )

        if search_id == self._latest_search:
            self._latest_result = result
        else:
            logger.debug("Search was superseded by a newer one, keeping the newer result")

        return result

    def filter_options(self, offers: Sequence[FlightOffer]) -> FilterOptions:
        return self.filter_engine.compute_filter_bounds(offers)

    def apply_filters(self, offers: Sequence[FlightOffer], criteria: FilterCriteria) -> List[FlightOffer]:
        return self.filter_engine.apply(offers, criteria)

    def highlights(self, offers: Sequence[FlightOffer]) -> List[Highlight]:
        return self.highlight_selector.select_highlights(offers)

    async def search_locations(self, keyword: str, max_results: Optional[int] = None) -> List[LocationEntry]:
        return await self.locations.search(keyword, max_results)

    async def resolve_location(self, code: str) -> Optional[LocationEntry]:
        return await self.locations.resolve_by_code(code)

    async def _fetch_with_retries(self, params: FlightSearchParams) -> dict:
        auth_failures = 0
        transient_failures = 0

        while True:
            try:
                return await self.client.search_flight_offers(params)

            except ConfigError:
                raise

            except AuthError as e:
                auth_failures += 1
                if auth_failures > self.max_auth_retries:
                    raise
                logger.warning(f"Authentication failed ({e.message}), retrying with a fresh token")

            except (ApiError, NetworkError) as e:
                transient_failures += 1
                if transient_failures > self.max_api_retries:
                    raise
                delay = self._backoff(transient_failures)
                logger.warning(
                    f"{e.code} on flight search ({e.message}), "
                    f"retry {transient_failures}/{self.max_api_retries} in {delay:.2f}s"
                )
                await self._sleep(delay)


def build_flight_search_service(settings: Settings) -> FlightSearchService:
    """
    Wire a FlightSearchService from settings

    Args:
        settings: Application settings

    Returns:
        FlightSearchService with its own credential and location caches
    """
    transport = RequestsTransport(settings.amadeus_base_url, timeout=settings.api_timeout)
    credentials = CredentialCache(
        transport,
        settings.amadeus_client_id,
        settings.amadeus_client_secret,
        expiry_buffer=settings.token_expiry_buffer
    )
    client = AmadeusClient(transport, credentials)

    return FlightSearchService(
        client,
        locations=LocationDirectory(
            client,
            min_keyword_length=settings.location_min_keyword_length,
            default_max_results=settings.default_location_results
        ),
        max_api_retries=settings.max_api_retries,
        max_auth_retries=settings.max_auth_retries,
        backoff=exponential_backoff(settings.retry_backoff_seconds)
    )


# Singleton pattern for easy reuse
_service_instance: Optional[FlightSearchService] = None


def get_flight_search_service() -> FlightSearchService:
    """
    Get singleton FlightSearchService instance

    Returns:
        FlightSearchService built from Settings
    """
    global _service_instance

    if _service_instance is None:
        _service_instance = build_flight_search_service(get_settings())

    return _service_instance
