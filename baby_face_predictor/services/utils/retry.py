# baby_face_predictor/services/utils/retry.py
import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)
from tenacity.wait import wait_base

logger = structlog.get_logger(__name__)


def _log_before_sleep(log: Any) -> Callable[[RetryCallState], None]:
    def _before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        log.warning(
            "Attempt failed, retrying",
            attempt=retry_state.attempt_number,
            wait_s=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(exc) or type(exc).__name__,
        )

    return _before_sleep


def backoff_retrying(
    *,
    attempts: int,
    wait: wait_base,
    is_retryable: Callable[[BaseException], bool],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    log: Any | None = None,
) -> AsyncRetrying:
    """
    Builds the retry loop shared by every stage that talks to an external model.

    Usage:
        async for attempt in backoff_retrying(...):
            with attempt:
                result = await call()

    The last error is re-raised once `attempts` are exhausted, and an error for
    which `is_retryable` returns False is re-raised immediately. Cancellation
    is never retried.
    """
    return AsyncRetrying(
        sleep=sleep,
        stop=stop_after_attempt(attempts),
        wait=wait,
        retry=retry_if_exception(
            lambda exc: isinstance(exc, Exception) and is_retryable(exc)
        ),
        before_sleep=_log_before_sleep(log or logger),
        reraise=True,
    )
