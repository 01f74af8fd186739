"""Request and result types for the extraction pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from vibecheck.extraction.classifier import ContentCategory
from vibecheck.extraction.errors import InvalidRequestError


class StrategyTag(str, Enum):
    """Which stage produced the extracted text."""

    RAW_CONTENT = "raw-content"
    READABILITY = "readability"
    PLATFORM_SPECIFIC = "platform-specific"
    SEMANTIC_CONTAINER = "semantic-container"
    TEXT_ELEMENTS = "filtered-text-elements"
    ALL_PARAGRAPHS = "all-paragraphs"
    BODY_FALLBACK = "general-body-fallback"


@dataclass(frozen=True)
class ExtractionRequest:
    """Either a URL to fetch or text pasted by the user.

    When ``raw_content`` is present it always wins and ``url`` is never fetched.
    """

    url: Optional[str] = None
    raw_content: Optional[str] = None
    content_type: ContentCategory = ContentCategory.GENERAL

    @property
    def has_raw_content(self) -> bool:
        return bool(self.raw_content and self.raw_content.strip())

    def validate(self) -> None:
        if self.has_raw_content:
            return
        if self.raw_content is not None and not (self.url and self.url.strip()):
            raise InvalidRequestError(
                "Raw content was empty after trimming",
                user_message="The pasted text is empty. Paste some content to summarize.",
            )
        if not (self.url and self.url.strip()):
            raise InvalidRequestError("Request carried neither a URL nor raw content")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ExtractionRequest":
        """Build a request from a decoded JSON body (camelCase or snake_case keys)."""

        if not isinstance(payload, Mapping):
            raise InvalidRequestError("Request body must be a JSON object")

        url = payload.get("url")
        raw_content = payload.get("rawContent", payload.get("raw_content"))
        content_type = payload.get("contentType", payload.get("content_type"))
        for name, value in (("url", url), ("rawContent", raw_content)):
            if value is not None and not isinstance(value, str):
                raise InvalidRequestError(f"'{name}' must be a string")

        return cls(
            url=url.strip() if url else None,
            raw_content=raw_content,
            content_type=ContentCategory.parse(content_type),
        )


@dataclass(frozen=True)
class ExtractionResult:
    """Trimmed, whitespace-collapsed text plus the stage that produced it."""

    text: str
    strategy_used: StrategyTag
    content_type: ContentCategory
    source_url: Optional[str] = None


__all__ = ["ExtractionRequest", "ExtractionResult", "StrategyTag"]
