"""Fixed-delay retry executor for idempotent chain reads."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from dappvotes.core.exceptions import (
    ContractNotDeployedError,
    MalformedRecordError,
    ViewFunctionError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]

# Failures that another attempt against the same node cannot fix
PERMANENT_ERRORS: tuple[type[BaseException], ...] = (
    ContractNotDeployedError,
    MalformedRecordError,
    ViewFunctionError,
)


class RetryExecutor:
    """
    Runs an async operation up to ``max_attempts`` times with a fixed pause.

    Only wrap reads: the operation is assumed safe to repeat. Errors listed
    in ``permanent_errors`` are raised on the first occurrence.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        delay_ms: int = 1_000,
        sleep: Sleeper = asyncio.sleep,
        permanent_errors: tuple[type[BaseException], ...] = PERMANENT_ERRORS,
    ) -> None:
        self._max_attempts = max_attempts
        self._delay_ms = delay_ms
        self._sleep = sleep
        self._permanent_errors = permanent_errors

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        max_attempts: int | None = None,
        delay_ms: int | None = None,
    ) -> T:
        """
        Execute ``operation`` with retries.

        Raises:
            The first permanent error, or the last error once every attempt
            failed.
        """
        attempts = max(1, max_attempts if max_attempts is not None else self._max_attempts)
        delay = self._delay_ms if delay_ms is None else delay_ms
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                return await operation()
            except self._permanent_errors:
                raise
            except Exception as e:
                last_error = e
                if attempt < attempts:
                    logger.debug(
                        f"[Retry] Attempt {attempt}/{attempts} failed: {e}; retrying in {delay}ms"
                    )
                    await self._sleep(delay / 1000)

        logger.warning(f"[Retry] Giving up after {attempts} attempts: {last_error}")
        if last_error:
            raise last_error
        raise RuntimeError("Operation failed without raising an exception.")
