"""Precision-first extraction pipeline.

Targeted strategies run before blunt ones: readability, then the platform
selector bank, then the generic fallback cascade. A stage that fails
internally counts as "no result"; only fetch failures and an empty page end
the run with an error.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from vibecheck.config.settings import ExtractionSettings
from vibecheck.extraction.article import extract_article
from vibecheck.extraction.classifier import classify
from vibecheck.extraction.document import Document, collapse_whitespace, parse
from vibecheck.extraction.errors import (
    ExtractionCancelledError,
    FetchError,
    NoContentExtractedError,
    VibeCheckError,
)
from vibecheck.extraction.fallback import build_cascade
from vibecheck.extraction.fetcher import PageFetcher
from vibecheck.extraction.models import ExtractionRequest, ExtractionResult, StrategyTag
from vibecheck.extraction.platforms import extract_platform_specific
from vibecheck.telemetry import metrics

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]


class ExtractionPipeline:
    """Turn an :class:`ExtractionRequest` into an :class:`ExtractionResult`."""

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        settings: Optional[ExtractionSettings] = None,
        parser: Callable[..., Document] = parse,
    ) -> None:
        self._fetcher = fetcher or PageFetcher()
        self._settings = settings or ExtractionSettings()
        self._parse = parser
        self._cascade = build_cascade(self._settings.fallback_min_length)

    def extract(self, request: ExtractionRequest, should_cancel: Optional[CancelCheck] = None) -> ExtractionResult:
        request.validate()

        if request.has_raw_content:
            logger.debug("Using pasted content; skipping fetch", extra={"event": "extraction.raw_content"})
            return ExtractionResult(
                text=collapse_whitespace(request.raw_content),
                strategy_used=StrategyTag.RAW_CONTENT,
                content_type=request.content_type,
            )

        url = request.url.strip()
        start = time.perf_counter()
        try:
            result = self._extract_url(url, should_cancel)
        except FetchError as exc:
            metrics.record_fetch_failure(exc.kind, exc.status)
            metrics.record_extraction(strategy=None, status="fetch_failed", duration_seconds=time.perf_counter() - start)
            logger.warning(
                "Fetch failed for %s: %s",
                url,
                exc,
                extra={"event": "extraction.fetch_failed", "url": url, "kind": exc.kind},
            )
            raise
        except VibeCheckError as exc:
            metrics.record_extraction(strategy=None, status="failed", duration_seconds=time.perf_counter() - start)
            logger.warning("Extraction failed for %s: %s", url, exc, extra={"event": "extraction.failed", "url": url})
            raise

        metrics.record_extraction(
            strategy=result.strategy_used.value,
            status="success",
            duration_seconds=time.perf_counter() - start,
            text_length=len(result.text),
        )
        logger.info(
            "Extracted %d chars from %s using %s",
            len(result.text),
            url,
            result.strategy_used.value,
            extra={"event": "extraction.completed", "url": url, "strategy": result.strategy_used.value},
        )
        return result

    def _extract_url(self, url: str, should_cancel: Optional[CancelCheck]) -> ExtractionResult:
        _check_cancelled(should_cancel, "fetch")
        fetched = self._fetcher.fetch(url, should_cancel=should_cancel)
        markup = fetched.html
        if not markup.strip():
            raise NoContentExtractedError(f"{url} returned an empty body")

        _check_cancelled(should_cancel, "parse")
        document = self._parse(markup, fetched.final_url)
        content_type = classify(url)

        def accept(text: Optional[str], strategy: StrategyTag) -> ExtractionResult:
            return ExtractionResult(text=text, strategy_used=strategy, content_type=content_type, source_url=url)

        _check_cancelled(should_cancel, "readability")
        text = extract_article(document)
        if _longer_than(text, self._settings.readability_min_length):
            return accept(text, StrategyTag.READABILITY)
        _log_rejected("readability", url, text, self._settings.readability_min_length)

        _check_cancelled(should_cancel, "platform-specific")
        text = _run_stage("platform-specific", url, lambda: extract_platform_specific(document, url))
        if _longer_than(text, self._settings.platform_min_length):
            return accept(text, StrategyTag.PLATFORM_SPECIFIC)
        _log_rejected("platform-specific", url, text, self._settings.platform_min_length)

        for stage in self._cascade:
            _check_cancelled(should_cancel, stage.strategy.value)
            text = _run_stage(stage.strategy.value, url, lambda: stage.extract(document))
            if stage.accepts(text):
                return accept(text, stage.strategy)
            _log_rejected(stage.strategy.value, url, text, stage.min_length)

        raise NoContentExtractedError(f"No text could be extracted from {url}")


def _run_stage(name: str, url: str, func: Callable[[], Optional[str]]) -> Optional[str]:
    try:
        return func()
    except Exception as exc:
        logger.warning(
            "Extraction stage %s failed for %s: %s",
            name,
            url,
            exc,
            extra={"event": "extraction.stage_failed", "stage": name, "url": url},
        )
        return None


def _longer_than(text: Optional[str], min_length: int) -> bool:
    return bool(text) and len(text) > min_length


def _log_rejected(stage: str, url: str, text: Optional[str], min_length: Optional[int]) -> None:
    logger.debug(
        "Stage %s produced %d chars for %s (needs more than %s)",
        stage,
        len(text or ""),
        url,
        min_length,
        extra={"event": "extraction.stage_rejected", "stage": stage, "url": url},
    )


def _check_cancelled(should_cancel: Optional[CancelCheck], stage: str) -> None:
    if should_cancel is not None and should_cancel():
        raise ExtractionCancelledError(f"Cancelled before {stage}")


__all__ = ["ExtractionPipeline"]
