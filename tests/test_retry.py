"""Unit tests for the retry policy."""

import asyncio
import warnings
from typing import List

import httpx
import pytest

from price_harvester.config import Settings
from price_harvester.retry import RetryPolicy

URL = "https://www.carrefour.com.ar/p"


def _recorder(sleeps: List[float]):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


def _failing_handler(calls: List[httpx.Request], fail_times: int = 10**6, status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) <= fail_times:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(status, text="ok")

    return handler


def _call(policy: RetryPolicy, handler) -> httpx.Response:
    async def _run() -> httpx.Response:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await policy.call(lambda: client.get(URL))

    return asyncio.run(_run())


class TestRetryPolicy:
    """Tests for RetryPolicy.call."""

    def test_defaults(self) -> None:
        p = RetryPolicy()
        assert p.max_attempts == 10
        assert p.base_delay == 0.3
        assert p.multiplier == 2.0
        assert p.jitter is True
        assert p.retry_statuses == frozenset()

    def test_transport_errors_stop_at_ceiling(self) -> None:
        calls: List[httpx.Request] = []
        sleeps: List[float] = []
        policy = RetryPolicy(max_attempts=4, jitter=False, sleep=_recorder(sleeps))

        with pytest.raises(httpx.ConnectError):
            _call(policy, _failing_handler(calls))

        assert len(calls) == 4
        assert len(sleeps) == 3

    def test_backoff_doubles_without_jitter(self) -> None:
        sleeps: List[float] = []
        policy = RetryPolicy(max_attempts=5, base_delay=0.3, jitter=False, sleep=_recorder(sleeps))

        with pytest.raises(httpx.ConnectError):
            _call(policy, _failing_handler([]))

        assert sleeps == pytest.approx([0.3, 0.6, 1.2, 2.4])
        assert sleeps == sorted(sleeps)

    def test_jitter_stays_above_base_backoff(self) -> None:
        sleeps: List[float] = []
        policy = RetryPolicy(max_attempts=6, base_delay=0.3, jitter=True, sleep=_recorder(sleeps))

        with pytest.raises(httpx.ConnectError):
            _call(policy, _failing_handler([]))

        for attempt, delay in enumerate(sleeps):
            expected = 0.3 * 2 ** attempt
            assert expected <= delay <= expected + 0.3 + 1e-9

    def test_backoff_capped_at_max_delay(self) -> None:
        sleeps: List[float] = []
        policy = RetryPolicy(
            max_attempts=6, base_delay=1.0, max_delay=3.0, jitter=False, sleep=_recorder(sleeps)
        )

        with pytest.raises(httpx.ConnectError):
            _call(policy, _failing_handler([]))

        assert sleeps == pytest.approx([1.0, 2.0, 3.0, 3.0, 3.0])

    def test_recovers_after_transient_errors(self) -> None:
        calls: List[httpx.Request] = []
        policy = RetryPolicy(max_attempts=5, jitter=False, sleep=_recorder([]))

        resp = _call(policy, _failing_handler(calls, fail_times=2))

        assert resp.status_code == 200
        assert len(calls) == 3

    @pytest.mark.parametrize("status", [404, 429, 500, 503])
    def test_error_status_is_not_retried(self, status: int) -> None:
        calls: List[httpx.Request] = []
        sleeps: List[float] = []
        policy = RetryPolicy(max_attempts=5, sleep=_recorder(sleeps))

        resp = _call(policy, _failing_handler(calls, fail_times=0, status=status))

        assert resp.status_code == status
        assert len(calls) == 1
        assert sleeps == []

    def test_opted_in_status_is_retried(self) -> None:
        calls: List[httpx.Request] = []
        policy = RetryPolicy(
            max_attempts=3, jitter=False, retry_statuses=frozenset({503}), sleep=_recorder([])
        )

        with pytest.raises(httpx.HTTPStatusError) as excinfo:
            _call(policy, _failing_handler(calls, fail_times=0, status=503))

        assert excinfo.value.response.status_code == 503
        assert len(calls) == 3

    def test_attempt_counter_is_fresh_per_call(self) -> None:
        calls: List[httpx.Request] = []
        policy = RetryPolicy(max_attempts=2, jitter=False, sleep=_recorder([]))
        handler = _failing_handler(calls)

        for _ in range(2):
            with pytest.raises(httpx.ConnectError):
                _call(policy, handler)

        assert len(calls) == 4

    def test_builds_without_deprecation_warnings(self) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            RetryPolicy(jitter=True)._retrying()
            RetryPolicy(jitter=False)._retrying()

    def test_from_settings(self) -> None:
        s = Settings(
            max_attempts=3,
            backoff_base=0.5,
            backoff_multiplier=3.0,
            backoff_max=10.0,
            backoff_jitter=False,
            retry_statuses=[429, 503],
        )
        p = RetryPolicy.from_settings(s)
        assert p.max_attempts == 3
        assert p.base_delay == 0.5
        assert p.multiplier == 3.0
        assert p.max_delay == 10.0
        assert p.jitter is False
        assert p.retry_statuses == frozenset({429, 503})
