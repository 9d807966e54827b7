"""
Retry and settle-wait helpers for provider calls.

Provider SDK calls are retried on transient failures with exponential backoff.
Asynchronous provider operations (resource creation) are followed by a bounded
poll until the resource becomes queryable.
"""
import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from cloudhandle.shared.core.config import get_settings
from cloudhandle.shared.core.exceptions import OperationTimeoutError, ResourceNotFoundError

logger = structlog.get_logger()
T = TypeVar("T")


def _log_before_sleep(operation: str) -> Callable[[RetryCallState], None]:
    def _before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "operation_failed_will_retry",
            operation=operation,
            attempt=retry_state.attempt_number,
            delay_seconds=round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
            error=str(error),
            error_type=type(error).__name__,
        )
    return _before_sleep


async def call_with_retry(
    operation: str,
    func: Callable[..., Awaitable[T]],
    *args: Any,
    retry_on: tuple[type[BaseException], ...],
    **kwargs: Any,
) -> T:
    """Await ``func`` and retry it while it raises one of ``retry_on``."""
    settings = get_settings()
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(retry_on),
        stop=stop_after_attempt(settings.PROVIDER_CALL_MAX_ATTEMPTS),
        wait=wait_exponential(
            multiplier=1,
            min=settings.PROVIDER_RETRY_MIN_WAIT_SECONDS,
            max=settings.PROVIDER_RETRY_MAX_WAIT_SECONDS,
        ),
        before_sleep=_log_before_sleep(operation),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            return await func(*args, **kwargs)
    raise AssertionError("unreachable")  # pragma: no cover


async def wait_until_visible(
    resource: str,
    fetch: Callable[[], Awaitable[T]],
    timeout: float | None = None,
) -> T:
    """
    Poll ``fetch`` until it stops raising ResourceNotFoundError.

    Raises OperationTimeoutError once ``timeout`` seconds elapse. Cancelling the
    awaiting task cancels the pending poll sleep.
    """
    settings = get_settings()
    total = timeout if timeout is not None else settings.CREATE_SETTLE_TIMEOUT_SECONDS
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(ResourceNotFoundError),
        stop=stop_after_delay(total),
        wait=wait_exponential(
            multiplier=settings.CREATE_POLL_MIN_WAIT_SECONDS,
            min=settings.CREATE_POLL_MIN_WAIT_SECONDS,
            max=settings.CREATE_POLL_MAX_WAIT_SECONDS,
        ),
    )

    async def _poll() -> T:
        async for attempt in retrying:
            with attempt:
                return await fetch()
        raise AssertionError("unreachable")  # pragma: no cover

    try:
        return await asyncio.wait_for(_poll(), timeout=total)
    except (RetryError, asyncio.TimeoutError) as e:
        logger.warning("resource_settle_timeout", resource=resource, timeout_seconds=total)
        raise OperationTimeoutError(
            f"{resource} was not visible after {total} seconds",
            details={"resource": resource, "timeout_seconds": total},
        ) from e
