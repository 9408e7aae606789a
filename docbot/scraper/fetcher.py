"""HTTP fetcher with a bounded timeout and a fixed retry policy."""

from __future__ import annotations

from typing import Optional

import httpx

from docbot.config import settings
from docbot.scraper.models import RawPage
from docbot.scraper.retry import RetryPolicy


def build_client() -> httpx.Client:
    """Return an ``httpx.Client`` configured for crawling.

    Callers own the client and must close it (use it as a context manager).
    """
    return httpx.Client(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.request_timeout,
        follow_redirects=True,
    )


def _get(client: httpx.Client, url: str) -> RawPage:
    response = client.get(url)
    response.raise_for_status()
    return RawPage(url=url, html=response.text, status_code=response.status_code)


def fetch_url(
    url: str,
    client: Optional[httpx.Client] = None,
    policy: Optional[RetryPolicy] = None,
) -> RawPage:
    """Fetch *url* and return a :class:`RawPage`.

    Every attempt is preceded by the policy's politeness delay.  Transient
    network failures are retried according to *policy*; HTTP error statuses
    fail immediately.

    Args:
        url: Absolute URL to request.
        client: Optional shared client (a crawl reuses one per source).  A
            short-lived client is created when omitted.
        policy: Retry policy override.  Defaults to one built from settings.

    Raises:
        FetchError: If the page could not be fetched.
    """
    policy = policy or RetryPolicy()

    if client is not None:
        return policy.run(url, lambda: _get(client, url))

    with build_client() as own_client:
        return policy.run(url, lambda: _get(own_client, url))
