"""Prompt used to write the one-sentence vibe summary."""
from __future__ import annotations

from textwrap import dedent
from typing import Dict, List

from vibecheck.extraction.classifier import ContentCategory

# Extra framing per content type; GENERAL adds nothing.
CONTENT_TYPE_FRAMING: Dict[ContentCategory, str] = {
    ContentCategory.ARTICLE: "The content is a news article or long-form content.",
    ContentCategory.TWEET: "The content is from Twitter/X, likely short and concise.",
    ContentCategory.THREAD: "The content is from a social media or forum thread with multiple posts.",
    ContentCategory.BLOG: "The content is from a blog post, likely personal and opinionated.",
    ContentCategory.FARCASTER: (
        "The content is from Farcaster, a decentralized social media platform. Focus on "
        "accurately capturing the subject matter and main point, especially regarding web3, "
        "crypto, or development topics. Don't infer themes that aren't actually present."
    ),
    ContentCategory.GENERAL: "",
}

_SYSTEM_OPENING = "You are a helpful assistant that summarizes content."

_SYSTEM_INSTRUCTIONS = dedent(
    """
    Provide a single sentence that accurately captures the main "vibe" or core message.
    The summary should be concise, informative, and strictly based on the actual content
    provided, without adding interpretations that aren't supported by the text.
    Answer strictly in JSON.
    """
).strip()

_USER_TEMPLATE = "Summarize this content in ONE sentence that captures the main point or essence:\n\n{content}"

SUMMARY_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
    },
    "required": ["summary"],
}


def framing_for(content_type: ContentCategory) -> str:
    return CONTENT_TYPE_FRAMING.get(content_type, "")


def system_prompt_for(content_type: ContentCategory) -> str:
    opening = " ".join(part for part in (_SYSTEM_OPENING, framing_for(content_type)) if part)
    return f"{opening}\n{_SYSTEM_INSTRUCTIONS}"


def build_messages(content: str, content_type: ContentCategory) -> List[Dict[str, str]]:
    """Chat messages asking for a vibe summary of ``content``."""

    return [
        {"role": "system", "content": system_prompt_for(content_type)},
        {"role": "user", "content": _USER_TEMPLATE.format(content=content)},
    ]


__all__ = [
    "CONTENT_TYPE_FRAMING",
    "SUMMARY_SCHEMA",
    "build_messages",
    "framing_for",
    "system_prompt_for",
]
