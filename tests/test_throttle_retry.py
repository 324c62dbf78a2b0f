"""Tests for the throttle guard and retry executor."""

import pytest

from conftest import FakeClock, FakeSleeper

from dappvotes.core.exceptions import (
    ChainConnectionError,
    ContractNotDeployedError,
    MalformedRecordError,
)
from dappvotes.services.retry import RetryExecutor
from dappvotes.services.throttle import ThrottleGuard


class TestThrottleGuard:
    """Tests for ThrottleGuard."""

    def test_first_call_allowed(self, clock: FakeClock) -> None:
        """Test a never-seen key passes."""
        guard = ThrottleGuard(clock=clock)

        assert guard.allow("getPolls") is True

    def test_repeat_within_interval_blocked(self, clock: FakeClock) -> None:
        """Test a second call inside the interval is throttled."""
        guard = ThrottleGuard(clock=clock)
        guard.allow("getPoll_1")
        clock.advance(1_999)

        assert guard.allow("getPoll_1") is False

    def test_blocked_call_does_not_extend_window(self, clock: FakeClock) -> None:
        """Test a throttled call leaves the recorded instant untouched."""
        guard = ThrottleGuard(clock=clock)
        guard.allow("getPolls")
        clock.advance(1_500)
        guard.allow("getPolls")
        clock.advance(500)

        assert guard.allow("getPolls") is True

    def test_keys_are_independent(self, clock: FakeClock) -> None:
        """Test throttling one operation does not affect another."""
        guard = ThrottleGuard(clock=clock)
        guard.allow("getPoll_1")

        assert guard.allow("getPoll_2") is True
        assert guard.allow("getContestants_1") is True

    def test_custom_interval(self, clock: FakeClock) -> None:
        """Test a per-call interval overrides the default."""
        guard = ThrottleGuard(default_interval_ms=2_000, clock=clock)
        guard.allow("getPolls")
        clock.advance(600)

        assert guard.allow("getPolls", min_interval_ms=500) is True

    def test_reset(self, clock: FakeClock) -> None:
        """Test reset forgets recorded calls."""
        guard = ThrottleGuard(clock=clock)
        guard.allow("getPolls")
        guard.reset("getPolls")

        assert guard.allow("getPolls") is True


class TestRetryExecutor:
    """Tests for RetryExecutor."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, sleeper: FakeSleeper) -> None:
        """Test no sleep happens when the first attempt succeeds."""
        executor = RetryExecutor(sleep=sleeper)

        async def operation() -> str:
            return "ok"

        assert await executor.run(operation) == "ok"
        assert sleeper.calls == []

    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, sleeper: FakeSleeper) -> None:
        """Test transient failures are retried with a fixed delay."""
        executor = RetryExecutor(max_attempts=3, delay_ms=1_000, sleep=sleeper)
        attempts = []

        async def operation() -> int:
            attempts.append(1)
            if len(attempts) < 3:
                raise ChainConnectionError("network down")
            return 42

        assert await executor.run(operation) == 42
        assert len(attempts) == 3
        assert sleeper.calls == [1.0, 1.0]

    @pytest.mark.asyncio
    async def test_raises_last_error(self, sleeper: FakeSleeper) -> None:
        """Test the last error propagates after exhausting attempts."""
        executor = RetryExecutor(max_attempts=3, delay_ms=1_000, sleep=sleeper)
        attempts = []

        async def operation() -> None:
            attempts.append(1)
            raise ValueError(f"attempt {len(attempts)}")

        with pytest.raises(ValueError, match="attempt 3"):
            await executor.run(operation)
        assert len(attempts) == 3
        assert len(sleeper.calls) == 2

    @pytest.mark.asyncio
    async def test_per_call_overrides(self, sleeper: FakeSleeper) -> None:
        """Test max_attempts and delay_ms can be set per run."""
        executor = RetryExecutor(sleep=sleeper)

        async def operation() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await executor.run(operation, max_attempts=2, delay_ms=250)
        assert sleeper.calls == [0.25]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [ContractNotDeployedError("0x5FbDB2315678afecb367f032d93F642f64180aa3"), MalformedRecordError("votes", "x")],
    )
    async def test_permanent_errors_not_retried(self, sleeper: FakeSleeper, error: Exception) -> None:
        """Test failures another attempt cannot fix are raised immediately."""
        executor = RetryExecutor(max_attempts=3, sleep=sleeper)
        attempts = []

        async def operation() -> None:
            attempts.append(1)
            raise error

        with pytest.raises(type(error)):
            await executor.run(operation)
        assert len(attempts) == 1
        assert sleeper.calls == []

    @pytest.mark.asyncio
    async def test_custom_permanent_errors(self, sleeper: FakeSleeper) -> None:
        """Test the set of permanent errors is configurable."""
        executor = RetryExecutor(max_attempts=3, sleep=sleeper, permanent_errors=(KeyError,))
        attempts = []

        async def operation() -> None:
            attempts.append(1)
            raise KeyError("missing")

        with pytest.raises(KeyError):
            await executor.run(operation)
        assert len(attempts) == 1
