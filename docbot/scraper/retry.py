"""Retry policy for page fetches.

A :class:`RetryPolicy` bundles everything that governs how often and how
politely a single URL is requested:

* a courteous, randomised delay before *every* attempt (including the first),
* a classifier that decides whether a failure is transient,
* a linear back-off schedule (``base_delay * attempt``) between retries,
* a fixed attempt budget.

The ``sleep`` and ``jitter`` callables are injectable so the policy can be
exercised without real waiting.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

import httpx

from docbot.config import settings
from docbot.errors import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Substrings seen in low-level socket / resolver errors that are worth retrying.
_TRANSIENT_MARKERS = (
    "hang up",
    "connection reset",
    "econnreset",
    "timed out",
    "name or service not known",
    "temporary failure in name resolution",
    "getaddrinfo",
    "nodename nor servname",
)


def is_transient(exc: BaseException) -> bool:
    """Return ``True`` if *exc* is a network failure that a retry might fix.

    Timeouts, connection resets / hang-ups and DNS resolution failures are
    transient.  HTTP error statuses and everything else are permanent.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return False
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


@dataclass
class RetryPolicy:
    max_attempts: int = field(default_factory=lambda: settings.retry_max_attempts)
    base_delay: float = field(default_factory=lambda: settings.retry_base_delay)
    min_politeness: float = field(default_factory=lambda: settings.politeness_min_delay)
    max_politeness: float = field(default_factory=lambda: settings.politeness_max_delay)
    classify: Callable[[BaseException], bool] = is_transient
    sleep: Callable[[float], None] = time.sleep
    jitter: Callable[[float, float], float] = random.uniform

    def delay_for(self, attempt: int) -> float:
        """Back-off before retrying after the 1-based *attempt* failed."""
        return self.base_delay * attempt

    def politeness_delay(self) -> float:
        return self.jitter(self.min_politeness, self.max_politeness)

    def run(self, url: str, fn: Callable[[], T]) -> T:
        """Call *fn* under this policy and return its result.

        Raises:
            FetchError: When *fn* fails permanently or the transient budget
                is exhausted.  Only one error is surfaced per call.
        """
        attempt = 0
        while True:
            attempt += 1
            self.sleep(self.politeness_delay())
            try:
                return fn()
            except Exception as exc:
                transient = self.classify(exc)
                if transient and attempt < self.max_attempts:
                    delay = self.delay_for(attempt)
                    logger.warning(
                        "Retrying (%d/%d) for %s due to network error: %s",
                        attempt, self.max_attempts, url, exc,
                    )
                    self.sleep(delay)
                    continue
                logger.warning("Error fetching %s: %s", url, exc)
                raise FetchError(
                    url, str(exc) or type(exc).__name__,
                    transient=transient, attempts=attempt,
                ) from exc
