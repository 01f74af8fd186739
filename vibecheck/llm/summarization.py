"""One-sentence "vibe" summaries of extracted text."""

from __future__ import annotations

import logging
import time
from typing import Optional

from vibecheck.config.settings import ExtractionSettings
from vibecheck.extraction.classifier import ContentCategory
from vibecheck.extraction.document import collapse_whitespace
from vibecheck.extraction.errors import InvalidRequestError, VibeCheckError
from vibecheck.llm.client import LLMClient, LLMClientError
from vibecheck.llm.prompts import SUMMARY_SCHEMA, build_messages
from vibecheck.telemetry import metrics

logger = logging.getLogger(__name__)

NO_SUMMARY = "No summary available"


class SummarizationError(VibeCheckError):
    """The LLM could not produce a summary; never the caller's fault."""

    status_code = 500
    default_message = "Failed to generate summary. Please try again later."


class VibeSummaryService:
    """Clean, truncate and summarise text in a single sentence."""

    def __init__(self, llm_client: LLMClient, settings: Optional[ExtractionSettings] = None) -> None:
        self._llm_client = llm_client
        self._settings = settings or ExtractionSettings()

    def prepare(self, text: Optional[str]) -> str:
        """Collapse whitespace and cut the text down to the prompt budget."""

        cleaned = collapse_whitespace(text)
        if not cleaned:
            raise InvalidRequestError(
                "Content is required for summarization",
                user_message="There was no content to summarize.",
            )
        return self._truncate(cleaned, self._settings.max_summary_chars)

    def summarize(self, text: Optional[str], content_type: ContentCategory = ContentCategory.GENERAL) -> str:
        content = self.prepare(text)
        start = time.perf_counter()
        status = "success"
        try:
            payload = self._llm_client.chat_json(
                build_messages(content, content_type),
                SUMMARY_SCHEMA,
                purpose="vibe_summary",
            )
        except LLMClientError as exc:
            status = "error"
            logger.exception(
                "Summary generation failed",
                extra={"event": "summary.failed", "content_type": content_type.value},
            )
            raise SummarizationError(f"LLM summary failed: {exc}") from exc
        finally:
            metrics.record_summary(
                content_type=content_type.value,
                status=status,
                duration_seconds=time.perf_counter() - start,
            )

        # A missing or blank summary is a valid answer, not a failed call.
        summary = collapse_whitespace(str(payload.get("summary") or ""))
        logger.info(
            "Generated %s summary from %d chars",
            content_type.value,
            len(content),
            extra={"event": "summary.completed", "content_type": content_type.value},
        )
        return summary or NO_SUMMARY

    @staticmethod
    def _truncate(text: str, limit: int) -> str:
        if len(text) <= limit:
            return text
        return text[:limit].rstrip()


__all__ = ["NO_SUMMARY", "SummarizationError", "VibeSummaryService"]
