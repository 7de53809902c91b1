"""Exponential backoff with jitter around a single HTTP request."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, FrozenSet, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)
from tenacity.wait import wait_base

from .config import Settings

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[httpx.Response]]
Sleep = Callable[[float], Awaitable[None]]


def _raise_for_retryable_status(resp: httpx.Response, statuses: FrozenSet[int]) -> None:
    if resp.status_code in statuses:
        raise httpx.HTTPStatusError(
            f"Retryable HTTP {resp.status_code} for {resp.request.url}",
            request=resp.request,
            response=resp,
        )


@dataclass(frozen=True)
class RetryPolicy:
    """Retry transport failures with exponential backoff.

    Attempt ``n`` waits ``base_delay * multiplier ** (n - 1)`` seconds (capped
    at ``max_delay``) plus a random jitter in ``[0, base_delay]`` when
    ``jitter`` is on. Only ``httpx.TransportError`` is retried, plus any status
    listed in ``retry_statuses``. When attempts run out the last error is
    re-raised unchanged.
    """

    max_attempts: int = 10
    base_delay: float = 0.3
    multiplier: float = 2.0
    max_delay: float = 30.0
    jitter: bool = True
    retry_statuses: FrozenSet[int] = frozenset()
    sleep: Optional[Sleep] = None

    @classmethod
    def from_settings(cls, settings: Settings, sleep: Optional[Sleep] = None) -> "RetryPolicy":
        return cls(
            max_attempts=settings.max_attempts,
            base_delay=settings.backoff_base,
            multiplier=settings.backoff_multiplier,
            max_delay=settings.backoff_max,
            jitter=settings.backoff_jitter,
            retry_statuses=frozenset(settings.retry_statuses),
            sleep=sleep,
        )

    def _retrying(self) -> AsyncRetrying:
        wait: wait_base = wait_exponential(
            multiplier=self.base_delay, exp_base=self.multiplier, max=self.max_delay
        )
        if self.jitter:
            wait = wait + wait_random(0, self.base_delay)

        retryable = (httpx.TransportError,)
        if self.retry_statuses:
            retryable += (httpx.HTTPStatusError,)
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait,
            retry=retry_if_exception_type(retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self.sleep or asyncio.sleep,
            reraise=True,
        )

    async def call(self, operation: Operation) -> httpx.Response:
        """Run ``operation`` until it returns a response or attempts run out."""

        async def _attempt() -> httpx.Response:
            resp = await operation()
            _raise_for_retryable_status(resp, self.retry_statuses)
            return resp

        # A fresh AsyncRetrying per call: attempt counters are never shared.
        return await self._retrying()(_attempt)
