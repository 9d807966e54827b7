from functools import lru_cache
from threading import Lock
from typing import Optional
import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr, model_validator

# Environment Constants
ENV_PRODUCTION = "production"
ENV_STAGING = "staging"
ENV_DEVELOPMENT = "development"
ENV_LOCAL = "local"


@lru_cache
def get_settings() -> "Settings":
    """Returns a singleton instance of the application settings."""
    return Settings()


_settings_reload_lock = Lock()


def reload_settings_from_environment() -> "Settings":
    """
    Atomically rebuild and replace cached settings from environment values.

    This avoids mutating the cached singleton instance in-place.
    """
    logger = structlog.get_logger()
    with _settings_reload_lock:
        logger.info("settings_reload_started")
        get_settings.cache_clear()
        refreshed = get_settings()
        logger.info("settings_reload_completed")
        return refreshed


class Settings(BaseSettings):
    """
    Driver configuration.
    Uses Pydantic-Settings for environment variable parsing from .env.
    """

    APP_NAME: str = "cloudhandle"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    # ENVIRONMENT options: local, development, staging, production
    ENVIRONMENT: str = ENV_DEVELOPMENT
    TESTING: bool = False

    # GCP scope used when a connection is built without explicit credentials
    GCP_PROJECT_ID: Optional[str] = None
    GCP_REGION: str = "us-central1"
    GCP_SERVICE_ACCOUNT_JSON: Optional[SecretStr] = None

    # Mock driver
    MOCK_REGION: str = "mock-region"

    # Create settle polling (seconds)
    CREATE_SETTLE_TIMEOUT_SECONDS: float = 60.0
    CREATE_POLL_MIN_WAIT_SECONDS: float = 0.5
    CREATE_POLL_MAX_WAIT_SECONDS: float = 8.0

    # Transient provider error retries
    PROVIDER_CALL_MAX_ATTEMPTS: int = 3
    PROVIDER_RETRY_MIN_WAIT_SECONDS: float = 2.0
    PROVIDER_RETRY_MAX_WAIT_SECONDS: float = 10.0

    # Long-running provider operations (insert/delete)
    OPERATION_TIMEOUT_SECONDS: float = 120.0

    @model_validator(mode="after")
    def validate_all_config(self) -> "Settings":
        if self.TESTING and self.ENVIRONMENT in {ENV_PRODUCTION, ENV_STAGING}:
            raise ValueError(
                "TESTING must be false in staging/production runtime environments."
            )
        self._validate_wait_config()
        return self

    def _validate_wait_config(self) -> None:
        positive = {
            "CREATE_SETTLE_TIMEOUT_SECONDS": self.CREATE_SETTLE_TIMEOUT_SECONDS,
            "CREATE_POLL_MIN_WAIT_SECONDS": self.CREATE_POLL_MIN_WAIT_SECONDS,
            "CREATE_POLL_MAX_WAIT_SECONDS": self.CREATE_POLL_MAX_WAIT_SECONDS,
            "PROVIDER_RETRY_MIN_WAIT_SECONDS": self.PROVIDER_RETRY_MIN_WAIT_SECONDS,
            "PROVIDER_RETRY_MAX_WAIT_SECONDS": self.PROVIDER_RETRY_MAX_WAIT_SECONDS,
            "OPERATION_TIMEOUT_SECONDS": self.OPERATION_TIMEOUT_SECONDS,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{name} must be greater than zero.")

        if self.PROVIDER_CALL_MAX_ATTEMPTS < 1:
            raise ValueError("PROVIDER_CALL_MAX_ATTEMPTS must be at least 1.")
        if self.CREATE_POLL_MIN_WAIT_SECONDS > self.CREATE_POLL_MAX_WAIT_SECONDS:
            raise ValueError(
                "CREATE_POLL_MIN_WAIT_SECONDS must not exceed CREATE_POLL_MAX_WAIT_SECONDS."
            )
        if self.PROVIDER_RETRY_MIN_WAIT_SECONDS > self.PROVIDER_RETRY_MAX_WAIT_SECONDS:
            raise ValueError(
                "PROVIDER_RETRY_MIN_WAIT_SECONDS must not exceed PROVIDER_RETRY_MAX_WAIT_SECONDS."
            )

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)
