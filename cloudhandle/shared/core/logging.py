import sys
import structlog
import logging
from typing import Any, cast
from cloudhandle.shared.core.config import get_settings


def credential_redactor(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Recursively redact credential material from log events.
    Service account JSON and tokens must never reach log sinks.
    """
    import re

    sensitive_fields = {
        "password",
        "token",
        "secret",
        "authorization",
        "api_key",
        "private_key",
        "private_key_id",
        "client_secret",
        "credentials",
        "service_account_json",
    }
    sensitive_suffixes = ("_token", "_secret", "_password", "_key")

    def is_sensitive_key(key: Any) -> bool:
        key_norm = str(key).lower().strip().replace("-", "_")
        if key_norm in sensitive_fields:
            return True
        if key_norm.endswith(sensitive_suffixes):
            return True
        tokens = [t for t in re.split(r"[^a-z0-9]+", key_norm) if t]
        return any(t in sensitive_fields for t in tokens)

    def redact_recursive(data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: ("[REDACTED]" if is_sensitive_key(k) else redact_recursive(v))
                for k, v in data.items()
            }
        elif isinstance(data, list):
            return [redact_recursive(item) for item in data]
        return data

    redacted = redact_recursive(event_dict)
    if isinstance(redacted, dict):
        return cast(dict[str, Any], redacted)
    return {}


def setup_logging() -> None:
    settings = get_settings()

    base_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        credential_redactor,  # Redact before rendering
    ]

    if settings.DEBUG:
        renderer: Any = structlog.dev.ConsoleRenderer()
        processors = base_processors + [renderer]
        min_level = logging.DEBUG
    else:
        renderer = structlog.processors.JSONRenderer()
        processors = base_processors + [structlog.processors.dict_tracebacks, renderer]
        min_level = logging.INFO

    structlog.configure(
        processors=cast(Any, processors),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging (google-api-core, urllib3) through the same stream.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=min_level,
    )
