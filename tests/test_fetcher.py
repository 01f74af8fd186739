from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests

from vibecheck.config.settings import FetchSettings
from vibecheck.extraction.errors import (
    ExtractionCancelledError,
    FetchError,
    FetchForbiddenError,
    FetchNetworkError,
    FetchNotFoundError,
    FetchRateLimitedError,
    FetchRedirectLimitError,
    FetchTimeoutError,
    FetchUpstreamError,
    InvalidRequestError,
)
from vibecheck.extraction import fetcher as fetcher_module
from vibecheck.extraction.fetcher import FetchResult, PageFetcher, classify_status


class FakeResponse:
    def __init__(self, status_code=200, chunks=(b"<html></html>",), url="https://example.com/final", headers=None):
        self.status_code = status_code
        self._chunks = list(chunks)
        self.url = url
        self.headers = headers or {"Content-Type": "text/html; charset=utf-8"}
        self.closed = False

    def iter_content(self, chunk_size=1):
        yield from self._chunks

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.headers = {}
        self.max_redirects = None
        self.calls = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def _fetcher(session, **settings) -> PageFetcher:
    return PageFetcher(FetchSettings(**settings), session_factory=lambda: session)


def test_fetch_sends_browser_headers_and_limits() -> None:
    session = FakeSession(FakeResponse(chunks=[b"<html>", b"<body>hi</body></html>"]))
    result = _fetcher(session, timeout_seconds=20, max_redirects=5).fetch("https://example.com/a")

    assert isinstance(result, FetchResult)
    assert result.html == "<html><body>hi</body></html>"
    assert result.final_url == "https://example.com/final"
    assert result.status_code == 200
    assert session.max_redirects == 5
    assert "Mozilla/5.0" in session.headers["User-Agent"]
    assert session.headers["Cache-Control"] == "no-cache"
    assert session.headers["Pragma"] == "no-cache"
    assert session.headers["Accept-Language"]
    _, kwargs = session.calls[0]
    assert kwargs["timeout"] == 20
    assert kwargs["allow_redirects"] is True
    assert session.response.closed


@pytest.mark.parametrize(
    "status, error_cls",
    [
        (403, FetchForbiddenError),
        (401, FetchForbiddenError),
        (404, FetchNotFoundError),
        (429, FetchRateLimitedError),
        (500, FetchUpstreamError),
        (503, FetchUpstreamError),
        (418, FetchError),
    ],
)
def test_non_2xx_status_is_classified(status, error_cls) -> None:
    session = FakeSession(FakeResponse(status_code=status))
    with pytest.raises(error_cls) as excinfo:
        _fetcher(session).fetch("https://example.com/a")
    assert excinfo.value.status == status
    assert excinfo.value.client_error
    assert session.response.closed


def test_classify_status_success() -> None:
    assert classify_status("https://example.com", 204) is None


@pytest.mark.parametrize(
    "raised, error_cls",
    [
        (requests.exceptions.ConnectTimeout("slow"), FetchTimeoutError),
        (requests.exceptions.ReadTimeout("slow"), FetchTimeoutError),
        (requests.exceptions.TooManyRedirects("loop"), FetchRedirectLimitError),
        (requests.exceptions.ConnectionError("dns"), FetchNetworkError),
        (requests.exceptions.MissingSchema("no scheme"), InvalidRequestError),
    ],
)
def test_transport_errors_are_classified(raised, error_cls) -> None:
    with pytest.raises(error_cls):
        _fetcher(FakeSession(error=raised)).fetch("https://example.com/a")


def test_body_is_truncated_at_limit() -> None:
    session = FakeSession(FakeResponse(chunks=[b"a" * 6, b"b" * 6]))
    result = _fetcher(session, max_content_bytes=8).fetch("https://example.com/a")
    assert result.content == b"aaaaaabb"
    assert result.truncated


def test_limit_hit_on_chunk_boundary_is_flagged() -> None:
    session = FakeSession(FakeResponse(chunks=[b"a" * 8, b"b" * 8]))
    result = _fetcher(session, max_content_bytes=8).fetch("https://example.com/a")
    assert result.content == b"a" * 8
    assert result.truncated


def test_body_exactly_at_limit_is_not_truncated() -> None:
    session = FakeSession(FakeResponse(chunks=[b"a" * 4, b"b" * 4]))
    result = _fetcher(session, max_content_bytes=8).fetch("https://example.com/a")
    assert result.content == b"aaaabbbb"
    assert not result.truncated


class TrickleResponse(FakeResponse):
    """Each chunk advances a fake clock, like a server that drips bytes."""

    def __init__(self, clock, seconds_per_chunk, **kwargs):
        super().__init__(**kwargs)
        self.clock = clock
        self.seconds_per_chunk = seconds_per_chunk

    def iter_content(self, chunk_size=1):
        for chunk in self._chunks:
            self.clock.now += self.seconds_per_chunk
            yield chunk


def test_slow_body_hits_overall_deadline(monkeypatch) -> None:
    clock = SimpleNamespace(now=0.0)
    monkeypatch.setattr(fetcher_module, "time", SimpleNamespace(monotonic=lambda: clock.now))
    response = TrickleResponse(clock, seconds_per_chunk=8, chunks=[b"<html>", b"<body>", b"</body></html>"])

    with pytest.raises(FetchTimeoutError) as excinfo:
        _fetcher(FakeSession(response), timeout_seconds=20).fetch("https://example.com/slow")

    assert "took too long" in excinfo.value.user_message
    assert clock.now == 24
    assert response.closed


def test_body_within_deadline_is_read_fully(monkeypatch) -> None:
    clock = SimpleNamespace(now=0.0)
    monkeypatch.setattr(fetcher_module, "time", SimpleNamespace(monotonic=lambda: clock.now))
    response = TrickleResponse(clock, seconds_per_chunk=5, chunks=[b"<html>", b"</html>"])

    result = _fetcher(FakeSession(response), timeout_seconds=20).fetch("https://example.com/ok")

    assert result.content == b"<html></html>"


def test_cancellation_while_reading() -> None:
    session = FakeSession(FakeResponse(chunks=[b"a", b"b"]))
    with pytest.raises(ExtractionCancelledError):
        _fetcher(session).fetch("https://example.com/a", should_cancel=lambda: True)


def test_html_uses_meta_charset_when_header_has_none() -> None:
    body = '<html><head><meta charset="iso-8859-1"></head><body>caf\xe9</body></html>'.encode("iso-8859-1")
    result = FetchResult(url="u", final_url="u", status_code=200, content=body)
    assert "café" in result.html


def test_html_falls_back_to_utf8_for_unknown_charset() -> None:
    result = FetchResult(url="u", final_url="u", status_code=200, content="ok".encode(), encoding="x-bogus")
    assert result.html == "ok"
