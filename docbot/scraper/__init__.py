"""Scraper package — web fetch & content extraction."""

from docbot.scraper.extractor import extract_page
from docbot.scraper.fetcher import fetch_url
from docbot.scraper.models import ExtractResult, PageRecord, RawPage
from docbot.scraper.retry import RetryPolicy, is_transient

__all__ = [
    "fetch_url",
    "extract_page",
    "RawPage",
    "PageRecord",
    "ExtractResult",
    "RetryPolicy",
    "is_transient",
]
