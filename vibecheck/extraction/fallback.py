"""Generic heuristics used when neither readability nor a platform selector worked.

Each stage drops one assumption about the page: semantic containers, then
filtered text-bearing elements, then every paragraph, then the whole body.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from lxml import html

from vibecheck.extraction.document import Document, collapse_whitespace, node_text
from vibecheck.extraction.models import StrategyTag

SEMANTIC_SELECTORS = (
    "main",
    "article",
    '[role="main"]',
    '[itemprop="articleBody"]',
    "#content",
    "#main",
    ".content",
    ".main-content",
    ".post-content",
    ".entry-content",
    ".article-content",
    ".article-body",
    ".story-body",
    ".post-body",
)

TEXT_ELEMENT_SELECTOR = "p, h1, h2, h3, h4, h5, h6, li, blockquote, pre, figcaption"

# Matched case-insensitively against the parent's class and id attributes.
BOILERPLATE_PATTERN = re.compile(r"nav|menu|footer|sidebar|comment", re.IGNORECASE)


def semantic_container_text(document: Document) -> Optional[str]:
    """Longest text found under a semantic content container."""

    best = ""
    for selector in SEMANTIC_SELECTORS:
        for node in document.select(selector):
            text = node_text(node)
            if len(text) > len(best):
                best = text
    return best or None


def _is_boilerplate(element: html.HtmlElement) -> bool:
    parent = element.getparent()
    if parent is None:
        return False
    markers = f"{parent.get('class', '')} {parent.get('id', '')}"
    return bool(BOILERPLATE_PATTERN.search(markers))


def filtered_text_elements(document: Document) -> Optional[str]:
    """Text-bearing elements, skipping those whose parent looks like navigation or chrome."""

    kept: List[html.HtmlElement] = []
    seen = set()
    for element in document.select(TEXT_ELEMENT_SELECTOR):
        if _is_boilerplate(element):
            continue
        # A <p> inside a kept <li> or <blockquote> is already covered by its ancestor.
        if any(ancestor in seen for ancestor in element.iterancestors()):
            continue
        seen.add(element)
        kept.append(element)
    text = collapse_whitespace(" ".join(element.text_content() for element in kept))
    return text or None


def all_paragraphs(document: Document) -> Optional[str]:
    text = collapse_whitespace(" ".join(p.text_content() for p in document.select("p")))
    return text or None


def body_text(document: Document) -> Optional[str]:
    return document.text() or None


@dataclass(frozen=True)
class FallbackStage:
    """One cascade step; ``min_length`` of ``None`` accepts any non-empty text."""

    strategy: StrategyTag
    extract: Callable[[Document], Optional[str]]
    min_length: Optional[int]

    def accepts(self, text: Optional[str]) -> bool:
        if not text:
            return False
        if self.min_length is None:
            return True
        return len(text) > self.min_length


def build_cascade(min_length: int) -> Sequence[FallbackStage]:
    return (
        FallbackStage(StrategyTag.SEMANTIC_CONTAINER, semantic_container_text, min_length),
        FallbackStage(StrategyTag.TEXT_ELEMENTS, filtered_text_elements, min_length),
        FallbackStage(StrategyTag.ALL_PARAGRAPHS, all_paragraphs, min_length),
        FallbackStage(StrategyTag.BODY_FALLBACK, body_text, None),
    )


__all__ = [
    "BOILERPLATE_PATTERN",
    "FallbackStage",
    "SEMANTIC_SELECTORS",
    "all_paragraphs",
    "body_text",
    "build_cascade",
    "filtered_text_elements",
    "semantic_container_text",
]
