from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


class RetryAttemptsExhausted(Exception):
    """
    Raised by a bounded RetryingCaller; the last error is chained as __cause__.
    """

    def __init__(self, error_context: str, attempts: int) -> None:
        super().__init__(f"{error_context}: giving up after {attempts} attempt(s)")
        self.error_context = error_context
        self.attempts = attempts


class RetryCancelled(Exception):
    """Raised when the cancel event is set between attempts."""


class RetryingCaller:
    """
    Retry wrapper around a single RPC invocation.

    - max_attempts=None retries until success (the node is assumed to recover),
    - max_attempts=N gives up after N failures with RetryAttemptsExhausted.

    The pause is fixed unless backoff_factor > 1, in which case it grows
    geometrically up to max_pause_seconds.
    """

    def __init__(
        self,
        *,
        max_attempts: int | None,
        pause_seconds: float = 1.0,
        backoff_factor: float = 1.0,
        max_pause_seconds: float = 60.0,
        cancel_event: asyncio.Event | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if max_attempts is not None and max_attempts <= 0:
            raise ValueError("max_attempts must be positive or None")
        if pause_seconds < 0:
            raise ValueError("pause_seconds must be non-negative")
        if backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")

        self._max_attempts = max_attempts
        self._pause_seconds = pause_seconds
        self._backoff_factor = backoff_factor
        self._max_pause_seconds = max_pause_seconds
        self._cancel_event = cancel_event
        self._sleep = sleep

    @property
    def max_attempts(self) -> int | None:
        return self._max_attempts

    async def call(self, fn: Callable[[], Awaitable[T]], *, error_context: str) -> T:
        attempt = 0
        pause = self._pause_seconds

        while True:
            self._raise_if_cancelled(error_context)
            attempt += 1
            try:
                return await fn()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if self._max_attempts is not None and attempt >= self._max_attempts:
                    logger.warning(
                        "%s. Error: %r. No attempts left (%s/%s)",
                        error_context,
                        exc,
                        attempt,
                        self._max_attempts,
                    )
                    raise RetryAttemptsExhausted(error_context, attempt) from exc

                logger.error(
                    "%s. Error: %r. Retrying in %.2fs (attempt %s/%s)",
                    error_context,
                    exc,
                    pause,
                    attempt,
                    "inf" if self._max_attempts is None else self._max_attempts,
                )

            self._raise_if_cancelled(error_context)
            await self._sleep(pause)
            pause = min(pause * self._backoff_factor, self._max_pause_seconds)

    def _raise_if_cancelled(self, error_context: str) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise RetryCancelled(error_context)
