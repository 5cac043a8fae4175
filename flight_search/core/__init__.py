"""
Core package - Configuration and cross-cutting concerns
"""

from .config import Settings, get_settings, reload_settings
from .exceptions import (
    FlightSearchError,
    ConfigError,
    AuthError,
    ApiError,
    NetworkError,
    NormalizationError,
    HTTPStatusError
)

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "FlightSearchError",
    "ConfigError",
    "AuthError",
    "ApiError",
    "NetworkError",
    "NormalizationError",
    "HTTPStatusError"
]
