"""
Amadeus API Client - Authenticated access to flight-offer and location search
Wraps the Amadeus Self-Service API with a clean interface
"""

import logging
from typing import Any, Dict, List, Optional

from flight_search.core.exceptions import ApiError, AuthError, FlightSearchError, HTTPStatusError
from flight_search.models.request import FlightSearchParams
from flight_search.services.credentials import CredentialCache
from flight_search.services.transport import Transport

logger = logging.getLogger(__name__)


class AmadeusClient:
    """
    Client for the Amadeus Self-Service API

    Features:
    - Bearer token from a shared CredentialCache
    - 401 responses invalidate the token before surfacing as AuthError
    - Other non-2xx responses surface as ApiError with status and body
    """

    FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"
    LOCATIONS_PATH = "/v1/reference-data/locations"

    def __init__(self, transport: Transport, credentials: CredentialCache):
        self._transport = transport
        self.credentials = credentials

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Make authenticated GET request to the Amadeus API

        Args:
            path: API endpoint path (without base URL)
            params: Optional query parameters

        Returns:
            Decoded JSON response

        Raises:
            AuthError: If the token is rejected (the token is invalidated first)
            ApiError: For any other non-2xx response
            NetworkError: If the request cannot be sent
        """
        token = await self.credentials.get_valid_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json"
        }

        try:
            return await self._transport.request("GET", path, headers=headers, query=params)

        except HTTPStatusError as e:
            if e.status == 401:
                self.credentials.invalidate(token)
                raise AuthError("Authentication token expired", details=e.body, status=401)

            logger.error(f"Amadeus API HTTP error: {e.status} - {e.body[:200]}")
            raise ApiError(
                f"Request failed with status {e.status}",
                details=e.body,
                status=e.status
            )

    async def search_flight_offers(self, params: FlightSearchParams) -> Dict[str, Any]:
        """
        Fetch raw flight offers for the given search

        Args:
            params: Validated search parameters

        Returns:
            Raw provider payload (data, dictionaries, meta)

        Example:
            raw = await client.search_flight_offers(FlightSearchParams(
                origin_location_code="JFK",
                destination_location_code="LAX",
                departure_date="2026-06-15",
            ))
        """
        logger.info(
            f"Searching offers: {params.origin_location_code} -> "
            f"{params.destination_location_code} on {params.departure_date}"
        )
        raw = await self.get(self.FLIGHT_OFFERS_PATH, params.to_query())
        if not isinstance(raw, dict):
            raise ApiError("Unexpected flight offers payload", details=str(raw)[:200])
        return raw

    async def search_locations(
        self,
        keyword: str,
        sub_type: str = "AIRPORT,CITY",
        limit: int = 10
    ) -> List[Dict[str, Any]]:
        """
        Fetch raw location records matching a keyword

        Returns:
            Flat list of typed location records
        """
        raw = await self.get(
            self.LOCATIONS_PATH,
            {
                "keyword": keyword,
                "subType": sub_type,
                "page[limit]": limit,
                "view": "FULL"
            }
        )
        records = raw.get("data", []) if isinstance(raw, dict) else []
        if not isinstance(records, list):
            raise ApiError("Unexpected locations payload", details=str(raw)[:200])
        return records

    async def health_check(self) -> bool:
        """
        Check if credentials are accepted by the token endpoint

        Returns:
            True if a fresh token could be obtained, False otherwise
        """
        self.credentials.invalidate()
        try:
            await self.credentials.refresh()
            return True
        except FlightSearchError as e:
            logger.warning(f"Amadeus health check failed: {e.message}")
            return False
