"""Main-article detection using readability-lxml."""
from __future__ import annotations

import logging
from typing import Optional

from readability import Document as ReadabilityDocument
from lxml import html

from vibecheck.extraction.document import Document, collapse_whitespace

logger = logging.getLogger(__name__)


def extract_article(document: Document) -> Optional[str]:
    """Return the main article text of ``document`` or ``None``.

    readability scores candidate blocks by text density, link density and tag
    weight. Any failure inside it means "no article found"; nothing is raised.
    """

    try:
        reader = ReadabilityDocument(document.source, url=document.base_url)
        summary_html = reader.summary(html_partial=True)
    except Exception as exc:
        logger.debug(
            "Readability failed for %s: %s",
            document.base_url,
            exc,
            extra={"event": "extraction.readability_failed", "url": document.base_url},
        )
        return None

    if not summary_html or not summary_html.strip():
        return None

    try:
        tree = html.fragment_fromstring(summary_html, create_parent="div")
    except Exception as exc:
        logger.debug("Failed to parse readability output for %s: %s", document.base_url, exc)
        return None

    for node in tree.xpath(".//script | .//style"):
        node.drop_tree()

    text = collapse_whitespace(tree.text_content())
    return text or None


__all__ = ["extract_article"]
