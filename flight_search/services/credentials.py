"""
Credential Cache - OAuth client-credentials token acquisition and caching

Concurrent callers share a single in-flight refresh, so a burst of searches
never produces more than one token request.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from flight_search.core.exceptions import (
    ApiError,
    AuthError,
    ConfigError,
    FlightSearchError,
    HTTPStatusError
)
from flight_search.services.transport import Transport

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _collect_failure(task: "asyncio.Task") -> None:
    # Every waiter may have been cancelled; the failure is still consumed here
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"Token refresh finished with {type(task.exception()).__name__}")


class CredentialState(str, Enum):
    EMPTY = "EMPTY"
    FETCHING = "FETCHING"
    VALID = "VALID"


class Credential(BaseModel):
    """Bearer token and the instant it expires"""
    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: datetime

    def is_usable(self, now: datetime, buffer_seconds: int = 60) -> bool:
        return now < self.expires_at - timedelta(seconds=buffer_seconds)


class CredentialCache:
    """
    Cache for the provider access token

    Features:
    - Returns the cached token without I/O while it is outside the expiry buffer
    - Single-flight refresh: late callers attach to the in-flight future
    - invalidate() for 401 responses from downstream calls
    - Injected clock for deterministic expiry tests
    """

    TOKEN_PATH = "/v1/security/oauth2/token"
    TOKEN_EXPIRY_BUFFER = 60  # seconds
    DEFAULT_EXPIRES_IN = 1799

    def __init__(
        self,
        transport: Transport,
        client_id: Optional[str],
        client_secret: Optional[str],
        clock: Optional[Clock] = None,
        expiry_buffer: int = TOKEN_EXPIRY_BUFFER
    ):
        """
        Initialize credential cache

        Args:
            transport: Transport used to reach the token endpoint
            client_id: OAuth client ID (None means not configured)
            client_secret: OAuth client secret (None means not configured)
            clock: Callable returning the current aware datetime
            expiry_buffer: Seconds before expiry at which a token is refreshed
        """
        self._transport = transport
        self.client_id = client_id
        self.client_secret = client_secret
        self._clock = clock or utc_now
        self.expiry_buffer = expiry_buffer
        self._credential: Optional[Credential] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    @property
    def state(self) -> CredentialState:
        if self._inflight is not None and not self._inflight.done():
            return CredentialState.FETCHING
        if self.is_token_valid():
            return CredentialState.VALID
        return CredentialState.EMPTY

    def is_token_valid(self) -> bool:
        """Check if the cached token can still be used"""
        credential = self._credential
        return credential is not None and credential.is_usable(self._clock(), self.expiry_buffer)

    async def get_valid_token(self) -> str:
        """
        Get a usable access token, refreshing if needed

        Returns:
            Access token string

        Raises:
            ConfigError: If client credentials are not configured
            AuthError: If the token endpoint rejects the request
            NetworkError: If the token endpoint cannot be reached
        """
        credential = self._credential
        if credential is not None and credential.is_usable(self._clock(), self.expiry_buffer):
            return credential.token

        return await self.refresh()

    async def refresh(self) -> str:
        """
        Fetch a new token, or join the refresh already in flight

        Returns:
            Access token string
        """
        if self._inflight is None:
            if not self.client_id or not self.client_secret:
                raise ConfigError("Amadeus API credentials not configured")
            self._inflight = asyncio.create_task(self._fetch_and_store())
            self._inflight.add_done_callback(_collect_failure)

        # shield: a cancelled waiter must not cancel the shared refresh
        credential = await asyncio.shield(self._inflight)
        return credential.token

    def invalidate(self, token: Optional[str] = None) -> None:
        """
        Drop the cached token

        Args:
            token: If given, only clear the cache when it still holds this
                token, so a late 401 cannot discard a newer credential
        """
        current = self._credential
        if current is None:
            return
        if token is not None and current.token != token:
            logger.debug("Ignoring invalidation of a token that was already replaced")
            return
        self._credential = None
        logger.info("Access token invalidated")

    async def _fetch_and_store(self) -> Credential:
        try:
            credential = await self._fetch()
        except FlightSearchError:
            self._credential = None
            raise
        finally:
            self._inflight = None

        self._credential = credential
        return credential

    async def _fetch(self) -> Credential:
        form = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret
        }

        try:
            token_data = await self._transport.request("POST", self.TOKEN_PATH, form=form)
        except HTTPStatusError as e:
            logger.error(f"Failed to obtain Amadeus access token: HTTP {e.status}")
            raise AuthError(
                "Failed to authenticate with Amadeus API",
                details=e.body,
                status=e.status
            )
        except ApiError as e:
            logger.error(f"Token endpoint returned an unreadable body: {e.message}")
            raise AuthError("Failed to authenticate with Amadeus API", details=e.details)

        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            raise AuthError("Token endpoint returned no access_token")

        raw_expires_in = token_data.get("expires_in", self.DEFAULT_EXPIRES_IN)
        try:
            expires_in = int(raw_expires_in)
        except (TypeError, ValueError):
            raise AuthError(
                "Token endpoint returned an invalid expires_in",
                details=repr(raw_expires_in)
            )
        expires_at = self._clock() + timedelta(seconds=expires_in)

        logger.info(f"Obtained new Amadeus access token, expires in {expires_in}s")
        return Credential(token=access_token, expires_at=expires_at)
