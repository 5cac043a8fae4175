"""
Core Configuration - Environment variables and app settings
Uses Pydantic BaseSettings for type-safe configuration management
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables

    Amadeus credentials are optional here: a missing client identity is
    reported as a ConfigError the first time a token is requested.
    """

    # Application settings
    app_name: str = Field(default="Flight Search", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")

    # Amadeus API Configuration
    amadeus_client_id: Optional[str] = Field(default=None, description="Amadeus OAuth client ID")
    amadeus_client_secret: Optional[str] = Field(default=None, description="Amadeus OAuth client secret")
    amadeus_base_url: str = Field(
        default="https://test.api.amadeus.com",
        description="Amadeus API base URL (test environment by default)"
    )

    # API Configuration
    api_timeout: int = Field(default=30, ge=1, description="API request timeout in seconds")
    token_expiry_buffer: int = Field(
        default=60,
        ge=0,
        le=600,
        description="Seconds before expiry at which a cached token stops being used"
    )

    # Retry policy
    max_api_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries for API and network errors on flight searches"
    )
    max_auth_retries: int = Field(
        default=1,
        ge=0,
        le=3,
        description="Retries after an authentication error"
    )
    retry_backoff_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Base delay for exponential backoff between retries"
    )

    # Location search
    location_min_keyword_length: int = Field(
        default=2,
        ge=1,
        description="Keywords shorter than this never reach the API"
    )
    default_location_results: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Default page size for location searches"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value"""
        allowed = ["development", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @field_validator("amadeus_base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"

    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment == "development"

    def has_credentials(self) -> bool:
        """Check if an Amadeus client identity is configured"""
        return bool(self.amadeus_client_id and self.amadeus_client_secret)

    def get_log_config(self) -> dict:
        """Get logging configuration"""
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": self.log_format
                },
                "json": {
                    "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                    "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": self.log_level,
                    "formatter": "json" if self.is_production() else "default",
                    "stream": "ext://sys.stderr"
                }
            },
            "root": {
                "level": self.log_level,
                "handlers": ["console"]
            }
        }


# Singleton settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton)

    Returns:
        Settings instance

    Raises:
        ValueError: If environment values fail validation
    """
    global _settings

    if _settings is None:
        try:
            _settings = Settings()
        except Exception as e:
            raise ValueError(
                f"Failed to load settings. Please check your .env file. Error: {str(e)}"
            )

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing)

    Returns:
        New Settings instance
    """
    global _settings
    _settings = None
    return get_settings()


if __name__ == "__main__":
    print("🧪 Testing Configuration\n")
    print("=" * 60)

    try:
        settings = get_settings()

        print("\n📋 Application Settings:")
        print(f"  App Name: {settings.app_name}")
        print(f"  Version: {settings.app_version}")
        print(f"  Environment: {settings.environment}")

        print("\n✈️  Amadeus API:")
        print(f"  Base URL: {settings.amadeus_base_url}")
        print(f"  Credentials: {'configured' if settings.has_credentials() else 'MISSING'}")

        print("\n🔁 Retry Policy:")
        print(f"  API retries: {settings.max_api_retries}")
        print(f"  Auth retries: {settings.max_auth_retries}")
        print(f"  Backoff: {settings.retry_backoff_seconds}s")

        print("\n📝 Logging:")
        print(f"  Level: {settings.log_level}")

        print("\n✅ Configuration loaded successfully!")

    except ValueError as e:
        print(f"\n❌ Configuration Error: {str(e)}")
        print("\nMake sure your .env file contains:")
        print("  - AMADEUS_CLIENT_ID")
        print("  - AMADEUS_CLIENT_SECRET")
