"""Tenacity building blocks for the Backlog rate-limit contract.

Backlog answers throttled calls with ``429 Too Many Requests`` and an
``X-RateLimit-Reset`` header holding the Unix time (seconds) at which the
quota is restored. The strategies below plug that contract into tenacity.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Optional

import requests
from tenacity import RetryCallState
from tenacity.wait import wait_base

RATE_LIMIT_STATUS = 429
RATE_LIMIT_RESET_HEADER = "X-RateLimit-Reset"
DEFAULT_RATE_LIMIT_WAIT = 1.0


def is_rate_limited(response: requests.Response) -> bool:
    """Check if response signals rate limiting"""
    return response.status_code == RATE_LIMIT_STATUS


def rate_limit_reset_delay(value: Optional[str], now: float) -> float:
    """Seconds to wait until the reset time carried by the header.

    Args:
        value: Raw ``X-RateLimit-Reset`` header value (may be None)
        now: Current Unix time in seconds

    Returns:
        ``reset - now`` in whole seconds when the reset lies strictly in the
        future, otherwise the 1 second default
    """
    if not value:
        return DEFAULT_RATE_LIMIT_WAIT
    try:
        reset = int(value)
    except ValueError:
        return DEFAULT_RATE_LIMIT_WAIT
    now_s = int(now)
    if reset > now_s:
        return float(reset - now_s)
    return DEFAULT_RATE_LIMIT_WAIT


class wait_rate_limit_reset(wait_base):
    """Wait until the reset time advertised by the last 429 response."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.clock = clock

    def __call__(self, retry_state: RetryCallState) -> float:
        if retry_state.outcome is None or retry_state.outcome.failed:
            return DEFAULT_RATE_LIMIT_WAIT
        response = retry_state.outcome.result()
        return rate_limit_reset_delay(
            response.headers.get(RATE_LIMIT_RESET_HEADER), self.clock()
        )


class wait_jitter_ms(wait_base):
    """Random whole-millisecond delay drawn from [0, max_jitter_ms)."""

    def __init__(self, max_jitter_ms: int, rng: Optional[random.Random] = None) -> None:
        if max_jitter_ms <= 0:
            raise ValueError(f"max jitter must be positive: {max_jitter_ms}")
        self.max_jitter_ms = max_jitter_ms
        self.rng = rng if rng is not None else random.Random()

    def __call__(self, retry_state: RetryCallState) -> float:
        return self.rng.randrange(self.max_jitter_ms) / 1000.0
