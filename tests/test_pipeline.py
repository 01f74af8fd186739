from __future__ import annotations

import pytest
from lxml import etree

from vibecheck.config.settings import ExtractionSettings
from vibecheck.extraction import document as document_module
from vibecheck.extraction import pipeline as pipeline_module
from vibecheck.extraction.classifier import ContentCategory
from vibecheck.extraction.document import parse
from vibecheck.extraction.errors import (
    ExtractionCancelledError,
    FetchForbiddenError,
    InvalidRequestError,
    NoContentExtractedError,
    UnparsableContentError,
)
from vibecheck.extraction.models import ExtractionRequest, StrategyTag
from vibecheck.extraction.pipeline import ExtractionPipeline
from vibecheck.telemetry import metrics

ARTICLE_HTML = (
    "<html><body><article><p>Hello world, this is a sufficiently long paragraph of "
    "article text to pass thresholds.</p></article></body></html>"
)

LONG_STORY = " ".join(["The council approved the new transit budget after a long debate."] * 12)


class SpyParser:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, markup, base_url=None):
        self.calls += 1
        return parse(markup, base_url)


def _pipeline(fetcher, parser=None, **settings) -> ExtractionPipeline:
    return ExtractionPipeline(fetcher, ExtractionSettings(**settings), parser=parser or parse)


def test_raw_content_bypasses_fetch_and_parse(stub_fetcher_factory) -> None:
    fetcher = stub_fetcher_factory(ARTICLE_HTML)
    parser = SpyParser()
    request = ExtractionRequest(
        url="https://example.com/ignored",
        raw_content="  pasted   text  ",
        content_type=ContentCategory.TWEET,
    )

    result = _pipeline(fetcher, parser).extract(request)

    assert result.text == "pasted text"
    assert result.strategy_used is StrategyTag.RAW_CONTENT
    assert result.content_type is ContentCategory.TWEET
    assert fetcher.calls == []
    assert parser.calls == 0


def test_empty_request_is_invalid(stub_fetcher_factory) -> None:
    with pytest.raises(InvalidRequestError):
        _pipeline(stub_fetcher_factory()).extract(ExtractionRequest())
    with pytest.raises(InvalidRequestError):
        _pipeline(stub_fetcher_factory()).extract(ExtractionRequest(raw_content="   "))


def test_article_scenario_uses_precise_strategy(stub_fetcher_factory) -> None:
    result = _pipeline(stub_fetcher_factory(ARTICLE_HTML)).extract(
        ExtractionRequest(url="https://example.com/story")
    )

    assert "Hello world, this is a sufficiently long paragraph" in result.text
    assert result.strategy_used in {StrategyTag.READABILITY, StrategyTag.SEMANTIC_CONTAINER}
    assert result.strategy_used is not StrategyTag.BODY_FALLBACK
    assert result.content_type is ContentCategory.ARTICLE
    assert metrics.last_extraction.status == "success"


def test_readability_wins_for_long_articles(stub_fetcher_factory) -> None:
    html = (
        "<html><body><div class='nav'><a href='/'>Home</a></div>"
        f"<article><h1>Budget</h1><p>{LONG_STORY}</p><p>{LONG_STORY}</p></article>"
        "<footer>Copyright</footer></body></html>"
    )
    result = _pipeline(stub_fetcher_factory(html)).extract(ExtractionRequest(url="https://example.com/news"))

    assert result.strategy_used is StrategyTag.READABILITY
    assert "council approved" in result.text


def test_platform_selector_used_before_generic_cascade(stub_fetcher_factory, monkeypatch) -> None:
    monkeypatch.setattr(pipeline_module, "extract_article", lambda document: None)
    html = (
        "<html><body><main>"
        "<div data-testid='tweetText'>Shipping a brand new release of our open source parser today, "
        "with streaming support and faster builds.</div>"
        "</main></body></html>"
    )
    result = _pipeline(stub_fetcher_factory(html)).extract(
        ExtractionRequest(url="https://x.com/dev/status/123")
    )

    assert result.strategy_used is StrategyTag.PLATFORM_SPECIFIC
    assert result.content_type is ContentCategory.TWEET
    assert result.text.startswith("Shipping a brand new release")


def test_short_stage_output_is_never_returned(stub_fetcher_factory, monkeypatch) -> None:
    monkeypatch.setattr(pipeline_module, "extract_article", lambda document: "too short")
    html = (
        "<html><body>"
        "<div data-testid='tweetText'>tiny</div>"
        "<main>short main</main>"
        "<div class='story'><p>Paragraph one talks about the weather in some detail.</p>"
        "<p>Paragraph two continues the thought.</p></div>"
        "</body></html>"
    )
    result = _pipeline(stub_fetcher_factory(html)).extract(ExtractionRequest(url="https://x.com/a/status/1"))

    assert result.strategy_used is StrategyTag.TEXT_ELEMENTS
    assert result.text == (
        "Paragraph one talks about the weather in some detail. Paragraph two continues the thought."
    )


def test_body_text_is_last_resort(stub_fetcher_factory) -> None:
    html = "<html><body><div><span>Only loose text in spans</span></div></body></html>"
    result = _pipeline(stub_fetcher_factory(html)).extract(ExtractionRequest(url="https://example.com/x"))

    assert result.strategy_used is StrategyTag.BODY_FALLBACK
    assert result.text == "Only loose text in spans"


def test_empty_body_fails_with_no_content(stub_fetcher_factory) -> None:
    with pytest.raises(NoContentExtractedError):
        _pipeline(stub_fetcher_factory("<html><body></body></html>")).extract(
            ExtractionRequest(url="https://example.com/empty")
        )
    assert metrics.last_extraction.status == "failed"


def test_blank_response_fails_with_no_content(stub_fetcher_factory) -> None:
    with pytest.raises(NoContentExtractedError):
        _pipeline(stub_fetcher_factory("   ")).extract(ExtractionRequest(url="https://example.com/blank"))


def test_unparsable_markup_reaches_caller_as_client_error(stub_fetcher_factory, monkeypatch) -> None:
    def refuse(*args, **kwargs):
        raise etree.ParserError("Document is empty")

    monkeypatch.setattr(document_module.html, "document_fromstring", refuse)

    with pytest.raises(UnparsableContentError) as excinfo:
        _pipeline(stub_fetcher_factory(ARTICLE_HTML)).extract(ExtractionRequest(url="https://example.com/garbled"))

    assert excinfo.value.status_code == 400
    assert excinfo.value.client_error
    assert metrics.last_extraction.status == "failed"


def test_fetch_failure_short_circuits(stub_fetcher_factory) -> None:
    fetcher = stub_fetcher_factory(error=FetchForbiddenError("403", url="https://example.com", status=403))
    parser = SpyParser()

    with pytest.raises(FetchForbiddenError) as excinfo:
        _pipeline(fetcher, parser).extract(ExtractionRequest(url="https://example.com/private"))

    assert parser.calls == 0
    assert "pasting" in excinfo.value.user_message
    assert metrics.last_fetch_failure.kind == "forbidden"
    assert metrics.last_extraction.status == "fetch_failed"


def test_failing_stage_does_not_abort_pipeline(stub_fetcher_factory, monkeypatch) -> None:
    def explode(document, url):
        raise RuntimeError("selector engine broke")

    monkeypatch.setattr(pipeline_module, "extract_platform_specific", explode)
    result = _pipeline(stub_fetcher_factory(ARTICLE_HTML)).extract(
        ExtractionRequest(url="https://x.com/a/status/1")
    )
    assert result.strategy_used is not StrategyTag.PLATFORM_SPECIFIC
    assert "Hello world" in result.text


def test_extraction_is_idempotent(stub_fetcher_factory) -> None:
    pipeline = _pipeline(stub_fetcher_factory(ARTICLE_HTML))
    request = ExtractionRequest(url="https://example.com/story")
    results = [pipeline.extract(request) for _ in range(3)]

    assert len({result.text for result in results}) == 1
    assert len({result.strategy_used for result in results}) == 1


def test_cancelled_request_skips_fetch(stub_fetcher_factory) -> None:
    fetcher = stub_fetcher_factory(ARTICLE_HTML)
    with pytest.raises(ExtractionCancelledError):
        _pipeline(fetcher).extract(ExtractionRequest(url="https://example.com/a"), should_cancel=lambda: True)
    assert fetcher.calls == []


def test_from_payload_accepts_camel_case() -> None:
    request = ExtractionRequest.from_payload({"url": " https://example.com ", "contentType": "blog"})
    assert request.url == "https://example.com"
    assert request.content_type is ContentCategory.BLOG
    assert not request.has_raw_content

    with pytest.raises(InvalidRequestError):
        ExtractionRequest.from_payload({"url": 42})
