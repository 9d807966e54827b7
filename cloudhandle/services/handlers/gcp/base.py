import asyncio
import concurrent.futures
import json
import re
from collections.abc import Mapping
from typing import Any, Callable, TypeVar, cast

import requests
import structlog
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.auth.credentials import Credentials as GoogleCredentials
from google.oauth2 import service_account

from cloudhandle.shared.core.config import get_settings
from cloudhandle.shared.core.credentials import GCPCredentials
from cloudhandle.shared.core.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    OperationTimeoutError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from cloudhandle.shared.core.retry import call_with_retry

logger = structlog.get_logger()
T = TypeVar("T")

# Retried with backoff before surfacing as BackendUnavailableError
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.TooManyRequests,
)

PROJECT_ID_PATTERN = re.compile(r"^[a-z][a-z0-9\-]{4,28}[a-z0-9]$")


def validate_project_id(project_id: str) -> bool:
    """Validate GCP project ID format."""
    return bool(PROJECT_ID_PATTERN.match(project_id))


def raw_name(raw: Any) -> str:
    """Best-effort name of a raw provider item, for omission reports."""
    if isinstance(raw, Mapping):
        return str(raw.get("name") or "<unnamed>")
    return str(getattr(raw, "name", "") or "<unnamed>")


def last_path_segment(value: str) -> str:
    """'projects/p/zones/z/instances/vm-1' -> 'vm-1'."""
    return value.rstrip("/").split("/")[-1]


class BaseGCPHandler:
    """
    Shared plumbing for Compute Engine handlers.

    The Compute SDK is synchronous: calls run in a worker thread, transient
    failures are retried, and Google API errors are translated into the
    handler error taxonomy.
    """

    def __init__(self, credentials: GCPCredentials, client: Any = None):
        if not validate_project_id(credentials.project_id):
            logger.error("gcp_invalid_project_id", project_id=credentials.project_id)
            raise ConfigurationError(
                f"Invalid GCP project ID format: '{credentials.project_id}'. "
                "Must be 6-30 lowercase letters, digits, or hyphens."
            )
        self.credentials = credentials
        self._client = client

    @property
    def project_id(self) -> str:
        return self.credentials.project_id

    @property
    def region(self) -> str:
        return self.credentials.region

    def _build_client(self, google_credentials: GoogleCredentials | None) -> Any:
        raise NotImplementedError()

    def _get_google_credentials(self) -> GoogleCredentials | None:
        if not self.credentials.service_account_json:
            return None  # Application Default Credentials
        try:
            info = json.loads(self.credentials.service_account_json.get_secret_value())
            return cast(
                GoogleCredentials,
                service_account.Credentials.from_service_account_info(info),  # type: ignore[no-untyped-call]
            )
        except (ValueError, KeyError) as e:
            logger.error("gcp_credentials_load_error", error=str(e))
            raise ConfigurationError("Invalid GCP service account JSON") from e

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._build_client(self._get_google_credentials())
        return self._client

    async def _call(self, operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking SDK call off the event loop and translate its errors."""
        try:
            return await call_with_retry(
                operation,
                asyncio.to_thread,
                func,
                *args,
                retry_on=TRANSIENT_ERRORS,
                **kwargs,
            )
        except google_exceptions.NotFound as e:
            raise ResourceNotFoundError(str(e.message), details={"operation": operation}) from e
        except google_exceptions.Conflict as e:
            # AlreadyExists is a Conflict subclass
            raise ResourceConflictError(str(e.message), details={"operation": operation}) from e
        except concurrent.futures.TimeoutError as e:
            logger.warning("gcp_operation_timeout", operation=operation)
            raise OperationTimeoutError(
                f"{operation} did not complete in time", details={"operation": operation}
            ) from e
        except (
            google_exceptions.GoogleAPIError,
            google_auth_exceptions.GoogleAuthError,
            google_auth_exceptions.TransportError,
            requests.exceptions.RequestException,
            ConnectionError,
        ) as e:
            logger.error("gcp_call_failed", operation=operation, error=str(e))
            raise BackendUnavailableError(
                f"{operation} failed: {e}", details={"operation": operation}
            ) from e

    async def _wait_for_operation(self, operation_name: str, operation: Any) -> None:
        """Block (in a worker thread) until a long-running operation finishes."""
        timeout = get_settings().OPERATION_TIMEOUT_SECONDS
        await self._call(operation_name, operation.result, timeout=timeout)
