"""Prompts for summary generation."""
from .vibe import CONTENT_TYPE_FRAMING, SUMMARY_SCHEMA, build_messages, framing_for, system_prompt_for

__all__ = [
    "CONTENT_TYPE_FRAMING",
    "SUMMARY_SCHEMA",
    "build_messages",
    "framing_for",
    "system_prompt_for",
]
