"""Content extraction: turns a :class:`RawPage` into a :class:`PageRecord`."""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from docbot.config import settings
from docbot.scraper.models import ExtractResult, PageRecord, RawPage

_WHITESPACE = re.compile(r"\s+")

# Elements that never carry page content.
_NON_CONTENT_TAGS = ["script", "style", "nav", "footer", "header"]

_IGNORED_HREF_PREFIXES = ("mailto", "#", "javascript:")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _extract_title(soup: BeautifulSoup) -> str:
    """Return the ``<title>`` text, the first ``<h1>``, or ``"Untitled"``."""
    for tag_name in ("title", "h1"):
        tag = soup.find(tag_name)
        if tag is not None:
            title = _collapse(tag.get_text())
            if title:
                return title
    return "Untitled"


def _extract_links(soup: BeautifulSoup, page_url: str, root_url: str) -> List[str]:
    """Return in-scope absolute links in discovery order, without duplicates.

    A link is in scope when its absolute form starts with *root_url*.  This
    is a plain prefix match, so ``/direction-extra`` counts as inside
    ``/direction``.
    """
    seen: set[str] = set()
    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.startswith(_IGNORED_HREF_PREFIXES):
            continue
        try:
            absolute = urljoin(page_url, href)
        except ValueError:
            continue
        if absolute.startswith(root_url) and absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_page(
    raw: RawPage,
    root_url: str,
    *,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> ExtractResult:
    """Extract title, body text and in-scope links from *raw*.

    Script, style, navigation, header and footer elements are dropped before
    the body text is read.  Pages whose collapsed text is not longer than
    *min_length* characters are skipped: the result has no page and no links.
    Kept text is truncated to *max_length* characters.
    """
    min_length = settings.min_content_length if min_length is None else min_length
    max_length = settings.max_text_length if max_length is None else max_length

    soup = BeautifulSoup(raw.html, "html.parser")
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()

    body = soup.body or soup
    text = _collapse(body.get_text(separator=" "))
    if len(text) <= min_length:
        return ExtractResult(page=None)

    page = PageRecord(
        url=raw.url,
        title=_extract_title(soup),
        text=text[:max_length],
    )
    return ExtractResult(page=page, links=_extract_links(soup, raw.url, root_url))
