"""
Error taxonomy for the flight search pipeline

Every failure the pipeline surfaces derives from FlightSearchError so callers
can decide on retries by category rather than by message.
"""

from typing import Optional


class FlightSearchError(Exception):
    """Base class for all pipeline errors"""

    code = "FLIGHT_SEARCH_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.status = status

    def to_dict(self) -> dict:
        """Serialize the error for display or logging"""
        payload = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        if self.status is not None:
            payload["status"] = self.status
        return payload


class ConfigError(FlightSearchError):
    """Client credentials are not configured. Never retried."""

    code = "CONFIG_ERROR"


class AuthError(FlightSearchError):
    """The token endpoint rejected us, or a downstream call returned 401"""

    code = "AUTH_ERROR"


class ApiError(FlightSearchError):
    """Non-2xx response (other than 401) from a provider endpoint"""

    code = "API_ERROR"


class NetworkError(FlightSearchError):
    """Transport failure: connection refused, timeout, DNS, ..."""

    code = "NETWORK_ERROR"


class NormalizationError(FlightSearchError):
    """Provider payload could not be mapped into the domain model"""

    code = "NORMALIZATION_ERROR"


class HTTPStatusError(Exception):
    """
    Raised by the transport for any non-2xx response

    Carries the status code and raw body so the client layer can tell a 401
    apart from other failures.
    """

    def __init__(self, status: int, body: str = ""):
        super().__init__(f"HTTP {status}: {body[:200]}")
        self.status = status
        self.body = body
