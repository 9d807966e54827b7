from typing import Any, Optional

import structlog

from cloudhandle.services.handlers.base import CloudConnection
from cloudhandle.services.handlers.mock import MockConnection, MockResourceStore
from cloudhandle.shared.core.config import get_settings
from cloudhandle.shared.core.credentials import GCPCredentials
from cloudhandle.shared.core.exceptions import ConfigurationError

logger = structlog.get_logger()


class CloudConnectionFactory:
    """
    Factory to instantiate the correct CloudConnection for a driver name.
    """
    @staticmethod
    def get_connection(
        provider: str,
        *,
        mock_name: Optional[str] = None,
        store: Optional[MockResourceStore] = None,
        credentials: Optional[GCPCredentials] = None,
        **clients: Any,
    ) -> CloudConnection:
        provider_key = str(provider or "").strip().lower()

        if provider_key == "mock":
            if not mock_name:
                raise ConfigurationError("mock driver requires a mock_name")
            return MockConnection(mock_name, store=store)

        elif provider_key == "gcp":
            from cloudhandle.services.handlers.gcp import GCPConnection

            if credentials is None:
                settings = get_settings()
                if not settings.GCP_PROJECT_ID:
                    raise ConfigurationError("gcp driver requires credentials or GCP_PROJECT_ID")
                credentials = GCPCredentials(
                    project_id=settings.GCP_PROJECT_ID,
                    region=settings.GCP_REGION,
                    service_account_json=settings.GCP_SERVICE_ACCOUNT_JSON,
                )
            return GCPConnection(credentials, **clients)

        logger.error("unsupported_driver", provider=provider)
        raise ConfigurationError(f"Unsupported driver: {provider}")
