"""Per-operation throttle guard."""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_MS = 2_000


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class ThrottleGuard:
    """
    Best-effort minimum-interval gate between repeated identical operations.

    Two concurrent callers may both pass; the guard only cuts cost.
    """

    def __init__(
        self,
        default_interval_ms: int = DEFAULT_MIN_INTERVAL_MS,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self._default_interval_ms = default_interval_ms
        self._clock = clock
        self._last_calls: dict[str, float] = {}

    def allow(self, key: str, min_interval_ms: int | None = None) -> bool:
        """
        Decide whether ``key`` may hit the chain now.

        Returns:
            True (and records the call) when the interval has elapsed,
            False without touching the record otherwise.
        """
        interval = self._default_interval_ms if min_interval_ms is None else min_interval_ms
        now = self._clock()
        last = self._last_calls.get(key)
        if last is not None and now - last < interval:
            logger.debug(f"[Throttle] {key} throttled, last call {now - last:.0f}ms ago")
            return False
        self._last_calls[key] = now
        return True

    def reset(self, key: str | None = None) -> None:
        """Forget one key, or every key."""
        if key is None:
            self._last_calls.clear()
        else:
            self._last_calls.pop(key, None)
