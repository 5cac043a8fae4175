"""
Location Directory - Airport and city search with grouping and a by-code cache
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from flight_search.core.exceptions import ConfigError, FlightSearchError, NormalizationError
from flight_search.models.location import LocationEntry, LocationKind
from flight_search.services.amadeus import AmadeusClient

logger = logging.getLogger(__name__)


def normalize_location(record: Dict[str, Any]) -> LocationEntry:
    """
    Map one raw location record to a LocationEntry

    Raises:
        NormalizationError: If required fields are missing or invalid
    """
    try:
        address = record.get("address") or {}
        travelers = (record.get("analytics") or {}).get("travelers") or {}
        return LocationEntry(
            id=record["id"],
            kind=record["subType"],
            code=record["iataCode"],
            name=record.get("name", ""),
            city_name=address.get("cityName", ""),
            city_code=address.get("cityCode", ""),
            country_name=address.get("countryName", ""),
            country_code=address.get("countryCode", ""),
            detailed_name=record.get("detailedName", ""),
            score=travelers.get("score")
        )
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise NormalizationError(f"Malformed location record: {e}", details=str(record)[:200])


def group_locations(records: Iterable[Dict[str, Any]]) -> List[LocationEntry]:
    """
    Normalize and group locations so cities contain their airports

    Cities come first, by descending popularity score. Airports whose city is
    not in the result follow, in their original order.
    """
    cities: Dict[str, LocationEntry] = {}
    airports: List[LocationEntry] = []

    for record in records:
        entry = normalize_location(record)
        if entry.kind == LocationKind.CITY:
            cities[entry.code] = entry
        else:
            airports.append(entry)

    nested: Dict[str, List[LocationEntry]] = {code: [] for code in cities}
    standalone: List[LocationEntry] = []
    for airport in airports:
        if airport.city_code in nested:
            nested[airport.city_code].append(airport)
        else:
            standalone.append(airport)

    ordered_cities = sorted(cities.values(), key=lambda city: -(city.score or 0))
    return [city.with_airports(nested[city.code]) for city in ordered_cities] + standalone


class LocationDirectory:
    """
    Location search with a session-wide cache keyed by IATA code

    Searches fail soft: short keywords return [] without touching the
    network, and provider failures are logged and turned into [].
    """

    def __init__(
        self,
        client: AmadeusClient,
        min_keyword_length: int = 2,
        default_max_results: int = 10
    ):
        self._client = client
        self.min_keyword_length = min_keyword_length
        self.default_max_results = default_max_results
        self._cache: Dict[str, LocationEntry] = {}
        self._latest_search = 0

    async def search(
        self,
        keyword: str,
        max_results: Optional[int] = None,
        sub_type: str = "AIRPORT,CITY"
    ) -> List[LocationEntry]:
        """
        Search for airports and cities

        Args:
            keyword: City name, airport name or code fragment
            max_results: Page size (defaults to the directory setting)
            sub_type: "AIRPORT", "CITY" or "AIRPORT,CITY"

        Returns:
            Grouped location entries, or [] for short keywords and failures

        Raises:
            ConfigError: If API credentials are not configured
        """
        keyword = (keyword or "").strip()
        if len(keyword) < self.min_keyword_length:
            return []

        self._latest_search += 1
        search_id = self._latest_search

        try:
            entries = await self._fetch(keyword, max_results or self.default_max_results, sub_type)
        except ConfigError:
            raise
        except FlightSearchError as e:
            logger.warning(f"Location search for {keyword!r} failed: {e.message}")
            return []

        if search_id == self._latest_search:
            self.cache_locations(entries)
        else:
            logger.debug(f"Location search for {keyword!r} was superseded, not caching")

        return entries

    async def resolve_by_code(self, code: str) -> Optional[LocationEntry]:
        """
        Get a location by its IATA code

        Looks in the cache first, then searches for the code. Prefers an
        exact match (including airports nested under cities), then the first
        result. Never raises. Resolved entries are cached even when a keyword
        search started meanwhile: they are keyed by the code that was asked
        for, not by what the user is currently typing.

        Args:
            code: IATA code (e.g., 'JFK', 'NYC')

        Returns:
            LocationEntry or None if not found
        """
        code = (code or "").strip().upper()
        if len(code) < 2:
            return None

        cached = self._cache.get(code)
        if cached is not None:
            return cached

        try:
            results = await self._fetch(code, 5, "AIRPORT,CITY")
        except FlightSearchError as e:
            logger.warning(f"Failed to fetch location by code {code}: {e.message}")
            return None

        self.cache_locations(results)

        for result in results:
            if result.code == code:
                return result
            for airport in result.airports or ():
                if airport.code == code:
                    return airport

        # Best effort
        return results[0] if results else None

    def get_cached(self, code: str) -> Optional[LocationEntry]:
        return self._cache.get((code or "").strip().upper())

    def cache_locations(self, entries: Iterable[LocationEntry]) -> None:
        """Cache entries and their nested airports, replacing existing codes"""
        updates: Dict[str, LocationEntry] = {}
        for entry in entries:
            updates[entry.code] = entry
            for airport in entry.airports or ():
                updates[airport.code] = airport

        if updates:
            self._cache = {**self._cache, **updates}

    def clear_cache(self) -> None:
        self._cache = {}

    @property
    def cached_codes(self) -> List[str]:
        return list(self._cache)

    async def _fetch(self, keyword: str, limit: int, sub_type: str) -> List[LocationEntry]:
        records = await self._client.search_locations(keyword, sub_type=sub_type, limit=limit)
        return group_locations(records)
