"""Bounded retry with exponential backoff for single network operations.

An operation performs exactly one HTTP attempt and raises on failure
(httpx.HTTPStatusError via raise_for_status, or an httpx transport error).
RetryPolicy classifies the failure:

  - transient:     transport/timeout errors, 5xx, 408, 429  → retry with backoff
  - non-transient: any other non-2xx status                 → fail immediately

When attempts run out, the last failure is converted into the caller's
TransferFailedError subclass, tagged with the method and (redacted) URL.

The policy never reads process state. Tests and unit-test mode get a
single-attempt policy through from_settings().
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx
from asset_compute_shared.asset_models import ExecutionFlags
from asset_compute_shared.errors import TransferFailedError
from asset_compute_shared.settings import WorkerSettings
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from asset_compute_storage.urls import redact_url

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({408, 429})


def is_transient(exc: BaseException) -> bool:
    """True for failures worth another attempt."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


class RetryPolicy:
    """Retry budget for one kind of transfer."""

    def __init__(
        self,
        max_attempts: int = 3,
        *,
        min_wait: float = 1.0,
        max_wait: float = 30.0,
        multiplier: float = 1.0,
    ) -> None:
        self.max_attempts = max(1, max_attempts)
        self.min_wait = min_wait
        self.max_wait = max_wait
        self.multiplier = multiplier

    @classmethod
    def from_settings(
        cls, settings: WorkerSettings, flags: ExecutionFlags | None = None
    ) -> RetryPolicy:
        disabled = settings.disable_retries or settings.unit_test_mode
        if flags is not None:
            disabled = disabled or flags.disable_retries or flags.unit_test_mode
        return cls(
            1 if disabled else settings.max_attempts,
            min_wait=settings.retry_min_wait,
            max_wait=settings.retry_max_wait,
        )

    @property
    def enabled(self) -> bool:
        return self.max_attempts > 1

    async def call(
        self,
        method: str,
        url: str,
        operation: Callable[[], Awaitable[T]],
        *,
        error: type[TransferFailedError] = TransferFailedError,
        part: tuple[int, int] | None = None,
    ) -> T:
        """Run operation under the policy; raise `error` once the budget is spent.

        The raised error is retryable only if the last failure was transient.
        """
        display_url = redact_url(url)
        action = f"{method} part {part[0]}/{part[1]}" if part else method

        def _before_sleep(state: RetryCallState) -> None:
            exc = state.outcome.exception() if state.outcome else None
            delay = state.next_action.sleep if state.next_action else 0.0
            logger.warning(
                f"{action} '{display_url}' attempt {state.attempt_number}/{self.max_attempts} "
                f"failed ({_describe(exc)}), retrying in {delay:.1f}s"
            )

        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient),
            wait=wait_exponential(
                multiplier=self.multiplier, min=self.min_wait, max=self.max_wait
            ),
            stop=stop_after_attempt(self.max_attempts),
            before_sleep=_before_sleep,
            reraise=True,
        )
        try:
            return await retrying(operation)
        except httpx.HTTPStatusError as e:
            err = error(method, display_url, status=e.response.status_code, part=part)
            err.retryable = is_transient(e)
            raise err from e
        except httpx.HTTPError as e:
            err = error(method, display_url, detail=_describe(e), part=part)
            err.retryable = is_transient(e)
            raise err from e


def _describe(exc: BaseException | None) -> str:
    if exc is None:
        return "unknown error"
    if isinstance(exc, httpx.HTTPStatusError):
        return f"status {exc.response.status_code}"
    return type(exc).__name__
