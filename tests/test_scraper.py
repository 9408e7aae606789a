"""Tests for the scraper — fetch with retry policy + page extraction.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made during ``fetch_url`` tests.
- The retry policy gets a recording ``sleep`` so politeness and back-off
  delays are asserted instead of waited for.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from docbot.errors import FetchError
from docbot.scraper.extractor import extract_page
from docbot.scraper.fetcher import fetch_url
from docbot.scraper.models import PageRecord, RawPage
from docbot.scraper.retry import RetryPolicy, is_transient

from tests.conftest import FILLER, ROOT, make_html


# ---------------------------------------------------------------------------
# is_transient
# ---------------------------------------------------------------------------

class TestIsTransient:
    def test_timeout_is_transient(self) -> None:
        assert is_transient(httpx.ReadTimeout("timed out")) is True

    def test_connect_error_is_transient(self) -> None:
        assert is_transient(httpx.ConnectError("[Errno -2] Name or service not known")) is True

    def test_remote_protocol_error_is_transient(self) -> None:
        assert is_transient(httpx.RemoteProtocolError("Server disconnected")) is True

    def test_hang_up_message_is_transient(self) -> None:
        assert is_transient(Exception("socket hang up")) is True

    def test_connection_reset_message_is_transient(self) -> None:
        assert is_transient(OSError("[Errno 104] Connection reset by peer")) is True

    def test_http_status_is_permanent(self) -> None:
        request = httpx.Request("GET", ROOT)
        response = httpx.Response(500, request=request)
        exc = httpx.HTTPStatusError("Server error", request=request, response=response)
        assert is_transient(exc) is False

    def test_other_errors_are_permanent(self) -> None:
        assert is_transient(ValueError("bad markup")) is False


# ---------------------------------------------------------------------------
# RetryPolicy
# ---------------------------------------------------------------------------

class TestRetryPolicy:
    def test_delay_grows_with_attempt(self, fast_policy: RetryPolicy) -> None:
        assert fast_policy.delay_for(1) == 1.5
        assert fast_policy.delay_for(2) == 3.0

    def test_politeness_delay_before_first_attempt(
        self, fast_policy: RetryPolicy, sleeps: list[float]
    ) -> None:
        assert fast_policy.run(ROOT, lambda: "ok") == "ok"
        assert sleeps == [1.0]

    def test_permanent_error_is_not_retried(self, fast_policy: RetryPolicy) -> None:
        calls = []

        def boom() -> None:
            calls.append(1)
            raise ValueError("nope")

        with pytest.raises(FetchError) as info:
            fast_policy.run(ROOT, boom)

        assert len(calls) == 1
        assert info.value.transient is False
        assert info.value.attempts == 1

    def test_politeness_window_uses_jitter(self) -> None:
        seen = []
        policy = RetryPolicy(
            min_politeness=1.0,
            max_politeness=2.0,
            sleep=lambda s: None,
            jitter=lambda lo, hi: seen.append((lo, hi)) or hi,
        )
        assert policy.politeness_delay() == 2.0
        assert seen == [(1.0, 2.0)]


# ---------------------------------------------------------------------------
# fetch_url
# ---------------------------------------------------------------------------

class TestFetchUrl:
    def test_successful_fetch_returns_raw_page(self, fast_policy: RetryPolicy) -> None:
        with respx.mock:
            respx.get(ROOT).mock(return_value=httpx.Response(200, text=make_html("Guide")))
            raw = fetch_url(ROOT, policy=fast_policy)

        assert isinstance(raw, RawPage)
        assert raw.url == ROOT
        assert raw.status_code == 200
        assert "<title>Guide</title>" in raw.html

    def test_http_error_fails_without_retry(self, fast_policy: RetryPolicy) -> None:
        with respx.mock:
            route = respx.get(ROOT).mock(return_value=httpx.Response(404, text="Not Found"))
            with pytest.raises(FetchError) as info:
                fetch_url(ROOT, policy=fast_policy)

        assert route.call_count == 1
        assert info.value.transient is False

    def test_transient_error_uses_exactly_three_attempts(
        self, fast_policy: RetryPolicy, sleeps: list[float]
    ) -> None:
        with respx.mock:
            route = respx.get(ROOT).mock(side_effect=httpx.ConnectError)
            with pytest.raises(FetchError) as info:
                fetch_url(ROOT, policy=fast_policy)

        assert route.call_count == 3
        assert info.value.transient is True
        assert info.value.attempts == 3
        # politeness, back-off 1.5, politeness, back-off 3.0, politeness
        assert sleeps == [1.0, 1.5, 1.0, 3.0, 1.0]

    def test_recovers_after_transient_failure(self, fast_policy: RetryPolicy) -> None:
        with respx.mock:
            route = respx.get(ROOT).mock(
                side_effect=[httpx.ReadTimeout, httpx.Response(200, text=make_html("Back"))]
            )
            raw = fetch_url(ROOT, policy=fast_policy)

        assert route.call_count == 2
        assert "Back" in raw.html

    def test_reuses_given_client(self, fast_policy: RetryPolicy) -> None:
        with respx.mock:
            respx.get(ROOT).mock(return_value=httpx.Response(200, text="<html></html>"))
            with httpx.Client() as client:
                raw = fetch_url(ROOT, client=client, policy=fast_policy)

        assert raw.status_code == 200


# ---------------------------------------------------------------------------
# extract_page
# ---------------------------------------------------------------------------

def _raw(html: str, url: str = ROOT) -> RawPage:
    return RawPage(url=url, html=html, status_code=200)


class TestExtractPage:
    def test_returns_page_record(self) -> None:
        result = extract_page(_raw(make_html("Guide")), ROOT)

        assert isinstance(result.page, PageRecord)
        assert result.page.url == ROOT
        assert result.page.title == "Guide"
        assert FILLER in result.page.text

    def test_strips_non_content_elements(self) -> None:
        html = f"""\
<html><head><title>T</title><style>.a{{color:red}}</style></head>
<body>
  <header>Site header</header>
  <nav>Menu entries</nav>
  <script>alert('x')</script>
  <main><p>{FILLER}</p></main>
  <footer>Copyright</footer>
</body></html>
"""
        text = extract_page(_raw(html), ROOT).page.text
        for noise in ("Site header", "Menu entries", "alert", "color", "Copyright"):
            assert noise not in text
        assert FILLER in text

    def test_collapses_whitespace(self) -> None:
        body = "Spread   over\n\n several\t\tlines. " + FILLER
        text = extract_page(_raw(make_html(body=body)), ROOT).page.text
        assert text.startswith("Spread over several lines.")
        assert "  " not in text

    def test_title_falls_back_to_h1(self) -> None:
        html = f"<html><body><h1>Heading</h1><p>{FILLER}</p></body></html>"
        assert extract_page(_raw(html), ROOT).page.title == "Heading"

    def test_title_falls_back_to_untitled(self) -> None:
        html = f"<html><body><p>{FILLER}</p></body></html>"
        assert extract_page(_raw(html), ROOT).page.title == "Untitled"

    def test_thin_page_is_skipped(self) -> None:
        html = make_html(body="Too short.", links=(f"{ROOT}/next",))
        result = extract_page(_raw(html), ROOT)

        assert result.skipped
        assert result.links == []

    def test_text_exactly_at_threshold_is_skipped(self) -> None:
        html = make_html(body="x" * 100)
        assert extract_page(_raw(html), ROOT, min_length=100).skipped

    def test_text_is_truncated(self) -> None:
        html = make_html(body="word " * 2000)
        page = extract_page(_raw(html), ROOT, max_length=5000).page
        assert len(page.text) == 5000


class TestExtractLinks:
    def test_resolves_relative_links(self) -> None:
        html = make_html(links=("intro", "/guide/setup"))
        links = extract_page(_raw(html, url=f"{ROOT}/"), ROOT).links
        assert links == [f"{ROOT}/intro", f"{ROOT}/setup"]

    def test_excludes_off_domain_links(self) -> None:
        html = make_html(links=("https://other.example/x", f"{ROOT}/a"))
        assert extract_page(_raw(html), ROOT).links == [f"{ROOT}/a"]

    def test_excludes_mailto_fragment_and_javascript(self) -> None:
        html = make_html(links=("mailto:a@b.c", "#top", "javascript:void(0)", f"{ROOT}/b"))
        assert extract_page(_raw(html), ROOT).links == [f"{ROOT}/b"]

    def test_deduplicates_in_discovery_order(self) -> None:
        html = make_html(links=(f"{ROOT}/b", f"{ROOT}/a", f"{ROOT}/b"))
        assert extract_page(_raw(html), ROOT).links == [f"{ROOT}/b", f"{ROOT}/a"]

    def test_prefix_match_admits_sibling_paths(self) -> None:
        root = "https://about.example.com/direction"
        html = make_html(links=("https://about.example.com/direction-extra",))
        links = extract_page(_raw(html, url=root), root).links
        assert links == ["https://about.example.com/direction-extra"]
