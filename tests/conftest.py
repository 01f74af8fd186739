from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from vibecheck.extraction.fetcher import FetchResult
from vibecheck.telemetry import metrics


@pytest.fixture(autouse=True)
def _reset_metrics() -> None:
    metrics.reset()
    yield
    metrics.reset()


class StubFetcher:
    """Returns canned HTML (or raises) without touching the network."""

    def __init__(self, html: str = "", error: Exception = None, final_url: str = None) -> None:
        self.html = html
        self.error = error
        self.final_url = final_url
        self.calls: list[str] = []
        self.cancel_hooks = []

    def fetch(self, url: str, should_cancel=None) -> FetchResult:
        self.calls.append(url)
        self.cancel_hooks.append(should_cancel)
        if self.error is not None:
            raise self.error
        return FetchResult(
            url=url,
            final_url=self.final_url or url,
            status_code=200,
            content=self.html.encode("utf-8"),
            encoding="utf-8",
        )


@pytest.fixture()
def stub_fetcher_factory():
    return StubFetcher
