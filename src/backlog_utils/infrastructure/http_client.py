"""Shared HTTP client for the Backlog API (requests + rate-limit retry).

Every resource call goes through ``RateLimitedHttpClient.dispatch`` so the
429 handling lives in one place.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

import requests
from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt

from backlog_utils.domain.config import BacklogConfig, RetryConfig
from backlog_utils.infrastructure.errors import MaxRetryAttemptsExceeded, RateLimitDrainError
from backlog_utils.infrastructure.retry import (
    is_rate_limited,
    wait_jitter_ms,
    wait_rate_limit_reset,
)

_DRAIN_CHUNK_SIZE = 8192


@dataclass(frozen=True)
class ClientSettings:
    base_url: str
    api_key: str = field(repr=False)
    max_retry_attempts: int = 5
    max_jitter_ms: int = 3000
    timeout: float = 30.0

    def __post_init__(self):
        if not self.base_url:
            raise ValueError("empty URL")
        if not self.api_key:
            raise ValueError("empty api key")
        if self.max_retry_attempts < 0:
            raise ValueError(f"max retry attempts must be >= 0: {self.max_retry_attempts}")
        if self.max_jitter_ms <= 0:
            raise ValueError(f"max jitter must be positive: {self.max_jitter_ms}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive: {self.timeout}")


def client_settings_from_config(
    backlog: BacklogConfig,
    retry: RetryConfig,
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
) -> ClientSettings:
    """Build client settings from config models; explicit arguments win.

    Raises:
        ValueError: If the base URL or API key is missing
    """
    return ClientSettings(
        base_url=base_url or backlog.url or "",
        api_key=api_key or backlog.api_key or "",
        max_retry_attempts=retry.max_attempts,
        max_jitter_ms=retry.max_jitter_ms,
        timeout=retry.timeout,
    )


class RateLimitedHttpClient:
    """Sends Backlog API requests, retrying transparently on 429 responses"""

    def __init__(
        self,
        settings: ClientSettings,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize HTTP client

        Args:
            settings: Immutable connection and retry settings
            session: Shared transport (a new ``requests.Session`` if None)
            sleep: Blocking wait used between retries
            clock: Source of the current Unix time in seconds
            rng: Random generator for jitter
            logger: Logger (module logger if None)
        """
        self.settings = settings
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep
        self._wait = wait_rate_limit_reset(clock) + wait_jitter_ms(settings.max_jitter_ms, rng)

    def close(self) -> None:
        """Close the shared transport session"""
        self.session.close()

    def build_request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> requests.PreparedRequest:
        """Prepare an authenticated request for an API path

        Args:
            method: HTTP method
            path: Path below the base URL, e.g. ``/api/v2/wikis``
            params: Query parameters (``apiKey`` is appended)
            data: Form fields, sent url-encoded

        Returns:
            Prepared request ready for ``dispatch``
        """
        query = dict(params or {})
        query["apiKey"] = self.settings.api_key
        url = f"{self.settings.base_url.rstrip('/')}/{path.lstrip('/')}"
        return requests.Request(method, url, params=query, data=data).prepare()

    def dispatch(self, request: requests.PreparedRequest) -> requests.Response:
        """Send a request, retrying while the server answers 429.

        Transport errors propagate immediately. Any non-429 response is
        returned with its body unread; the caller must close it.

        Raises:
            requests.RequestException: On transport failure
            RateLimitDrainError: If a 429 body cannot be discarded
            MaxRetryAttemptsExceeded: If 429 persists past the retry budget
        """
        retrying = Retrying(
            retry=retry_if_result(is_rate_limited),
            stop=stop_after_attempt(self.settings.max_retry_attempts + 1),
            wait=self._wait,
            before_sleep=self._before_sleep,
            retry_error_callback=self._on_exhausted,
            sleep=self._sleep,
        )
        return retrying(self._send, request)

    def _send(self, request: requests.PreparedRequest) -> requests.Response:
        # Never log the full URL, it carries the API key
        self.logger.debug(f"HTTP {request.method} {urlsplit(request.url).path}")
        return self.session.send(request, stream=True, timeout=self.settings.timeout)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        self._discard(retry_state.outcome.result())
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        self.logger.warning(
            f"Rate limited (attempt {retry_state.attempt_number}/"
            f"{self.settings.max_retry_attempts + 1}), retrying in {delay:.3f}s"
        )

    def _on_exhausted(self, retry_state: RetryCallState) -> requests.Response:
        self._discard(retry_state.outcome.result())
        self.logger.error(
            f"Still rate limited after {retry_state.attempt_number} attempts, giving up"
        )
        raise MaxRetryAttemptsExceeded(self.settings.max_retry_attempts)

    @staticmethod
    def _discard(response: requests.Response) -> None:
        """Read the body to the end and release the connection"""
        try:
            for _ in response.iter_content(chunk_size=_DRAIN_CHUNK_SIZE):
                pass
        except (requests.RequestException, OSError) as e:
            raise RateLimitDrainError(f"failed to discard rate-limited response body: {e}") from e
        finally:
            response.close()
