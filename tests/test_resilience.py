"""
Unit tests for resilience patterns — circuit breaker and retry with backoff.

Tests cover:
- CircuitBreaker: CLOSED → OPEN → HALF_OPEN → CLOSED / OPEN
- fast-fail while open, pass-through of non-connection errors
- get_status() health payload
- retry_with_backoff: retries, exhaustion, non-retryable passthrough
"""

import time
from unittest.mock import AsyncMock, patch

import pytest

from equityhub.core.resilience import (
    CircuitBreaker,
    CircuitBreakerError,
    CircuitState,
    retry_with_backoff,
)


class TestCircuitBreakerError:
    def test_attributes(self):
        err = CircuitBreakerError("db", 5.5)
        assert err.name == "db"
        assert err.retry_after == 5.5
        assert "OPEN" in str(err)


def _breaker(threshold: int = 2, timeout: float = 5.0) -> CircuitBreaker:
    return CircuitBreaker(
        name="test",
        failure_threshold=threshold,
        recovery_timeout=timeout,
        expected_exceptions=(ConnectionError,),
    )


async def _fail(cb: CircuitBreaker, times: int) -> None:
    func = AsyncMock(side_effect=ConnectionError("down"))
    for _ in range(times):
        with pytest.raises(ConnectionError):
            await cb.call(func)


class TestCircuitBreaker:
    @pytest.mark.asyncio
    async def test_successful_call(self):
        cb = _breaker()
        func = AsyncMock(return_value="ok")

        assert await cb.call(func, 1, key="v") == "ok"
        func.assert_awaited_once_with(1, key="v")
        assert cb.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_failure_below_threshold_stays_closed(self):
        cb = _breaker(threshold=3)
        await _fail(cb, 2)

        assert cb.state == CircuitState.CLOSED
        assert cb.get_status()["consecutive_failures"] == 2

    @pytest.mark.asyncio
    async def test_success_resets_consecutive_failures(self):
        cb = _breaker(threshold=3)
        await _fail(cb, 2)
        await cb.call(AsyncMock(return_value="ok"))

        assert cb.get_status()["consecutive_failures"] == 0
        assert cb.get_status()["total_failures"] == 2

    @pytest.mark.asyncio
    async def test_opens_after_threshold_and_fails_fast(self):
        cb = _breaker()
        await _fail(cb, 2)
        assert cb.state == CircuitState.OPEN

        func = AsyncMock(return_value="ok")
        with pytest.raises(CircuitBreakerError) as exc_info:
            await cb.call(func)
        func.assert_not_awaited()
        assert 0 <= exc_info.value.retry_after <= 5.0
        assert cb.get_status()["rejected_calls"] == 1

    @pytest.mark.asyncio
    async def test_half_open_probe_success_closes(self):
        cb = _breaker()
        await _fail(cb, 2)
        cb._opened_at = time.monotonic() - 10.0

        assert cb.state == CircuitState.HALF_OPEN
        assert await cb.call(AsyncMock(return_value="recovered")) == "recovered"
        assert cb.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_probe_failure_reopens(self):
        cb = _breaker(threshold=5)
        await _fail(cb, 5)
        cb._opened_at = time.monotonic() - 10.0
        assert cb.state == CircuitState.HALF_OPEN

        await _fail(cb, 1)
        assert cb.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_unexpected_exception_passes_through(self):
        cb = _breaker()
        with pytest.raises(ValueError):
            await cb.call(AsyncMock(side_effect=ValueError("constraint")))

        assert cb.state == CircuitState.CLOSED
        assert cb.get_status()["total_failures"] == 0

    @pytest.mark.asyncio
    async def test_reset(self):
        cb = _breaker()
        await _fail(cb, 2)
        cb.reset()

        assert cb.state == CircuitState.CLOSED
        assert cb.get_status()["total_failures"] == 0

    def test_status_dict(self):
        status = CircuitBreaker(name="db", failure_threshold=5, recovery_timeout=30.0).get_status()

        assert status == {
            "name": "db",
            "state": "closed",
            "consecutive_failures": 0,
            "failure_threshold": 5,
            "total_failures": 0,
            "rejected_calls": 0,
            "recovery_timeout_s": 30.0,
        }


class TestRetryWithBackoff:
    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        call_count = 0

        @retry_with_backoff(max_retries=3, base_delay=0.001, jitter=False)
        async def fail_twice():
            nonlocal call_count
            call_count += 1
            if call_count <= 2:
                raise ConnectionError("down")
            return "recovered"

        assert await fail_twice() == "recovered"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_exhausts_retries_then_raises(self):
        call_count = 0

        @retry_with_backoff(max_retries=2, base_delay=0.001, jitter=False)
        async def always_fail():
            nonlocal call_count
            call_count += 1
            raise ConnectionError("permanent failure")

        with pytest.raises(ConnectionError, match="permanent failure"):
            await always_fail()
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_not_retried(self):
        call_count = 0

        @retry_with_backoff(max_retries=3, base_delay=0.001)
        async def raise_value_error():
            nonlocal call_count
            call_count += 1
            raise ValueError("not retryable")

        with pytest.raises(ValueError):
            await raise_value_error()
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_delay_capped_by_max_delay(self):
        @retry_with_backoff(max_retries=3, base_delay=1.0, max_delay=1.5, jitter=False)
        async def always_fail():
            raise ConnectionError("down")

        with patch("equityhub.core.resilience.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(ConnectionError):
                await always_fail()

        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 1.5, 1.5]

    @pytest.mark.asyncio
    async def test_raises_the_final_attempts_exception(self):
        errors = iter([ConnectionError("first"), ConnectionError("second")])

        @retry_with_backoff(max_retries=1, base_delay=0.001, jitter=False)
        async def flaky():
            raise next(errors)

        with pytest.raises(ConnectionError, match="second"):
            await flaky()

    @pytest.mark.asyncio
    async def test_zero_retries_raises_immediately(self):
        @retry_with_backoff(max_retries=0, base_delay=0.001)
        async def always_fail():
            raise ConnectionError("down")

        with patch("equityhub.core.resilience.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(ConnectionError, match="down"):
                await always_fail()
        sleep.assert_not_awaited()
