"""Request-level facade: extract content, then summarise it."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from vibecheck.config.settings import AppSettings
from vibecheck.extraction import ExtractionPipeline, ExtractionRequest, PageFetcher, StrategyTag
from vibecheck.extraction.classifier import ContentCategory
from vibecheck.llm import LLMClient, VibeSummaryService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VibeSummary:
    summary: str
    content_type: ContentCategory
    strategy_used: StrategyTag
    source_url: Optional[str] = None


class VibeCheckService:
    """Wire the extraction pipeline to the summariser."""

    def __init__(self, pipeline: ExtractionPipeline, summarizer: VibeSummaryService) -> None:
        self._pipeline = pipeline
        self._summarizer = summarizer

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "VibeCheckService":
        pipeline = ExtractionPipeline(PageFetcher(settings.fetch), settings.extraction)
        summarizer = VibeSummaryService(LLMClient(settings.llm), settings.extraction)
        return cls(pipeline, summarizer)

    @property
    def pipeline(self) -> ExtractionPipeline:
        return self._pipeline

    def summarize(
        self,
        request: ExtractionRequest,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> VibeSummary:
        result = self._pipeline.extract(request, should_cancel=should_cancel)
        summary = self._summarizer.summarize(result.text, result.content_type)
        return VibeSummary(
            summary=summary,
            content_type=result.content_type,
            strategy_used=result.strategy_used,
            source_url=result.source_url,
        )

    def summarize_text(self, content: Optional[str], content_type: ContentCategory = ContentCategory.GENERAL) -> VibeSummary:
        """Summarise pasted text without touching the network."""

        return self.summarize(ExtractionRequest(raw_content=content or "", content_type=content_type))


__all__ = ["VibeCheckService", "VibeSummary"]
