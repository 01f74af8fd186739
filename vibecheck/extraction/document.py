"""Parsed HTML documents backed by lxml."""
from __future__ import annotations

import re
from typing import List, Optional, Union

from lxml import etree, html
from lxml.cssselect import CSSSelector

from vibecheck.extraction.errors import UnparsableContentError

_WHITESPACE_RE = re.compile(r"\s+")
_NON_CONTENT_XPATH = "//script | //style | //noscript | //template"


def collapse_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace into single spaces and trim."""

    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def node_text(node: html.HtmlElement) -> str:
    return collapse_whitespace(node.text_content())


class Document:
    """An HTML tree owned by a single extraction run.

    ``source`` keeps the original markup for extractors that need to re-parse it.
    Script, style and template elements are dropped from the tree so they never
    leak into extracted text.
    """

    def __init__(self, root: html.HtmlElement, source: str, base_url: Optional[str] = None) -> None:
        self._root = root
        self._source = source
        self._base_url = base_url

    @property
    def root(self) -> html.HtmlElement:
        return self._root

    @property
    def source(self) -> str:
        return self._source

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    @property
    def body(self) -> html.HtmlElement:
        body = self._root.find("body")
        return body if body is not None else self._root

    def select(self, selector: str) -> List[html.HtmlElement]:
        """Return nodes matching a CSS selector group, in document order.

        Raises ``cssselect`` errors for selectors it cannot translate; callers
        treat that as the selector yielding nothing.
        """

        return CSSSelector(selector, translator="html")(self._root)

    def text(self) -> str:
        """Whitespace-collapsed text of the whole body."""

        return node_text(self.body)


def parse(markup: Union[str, bytes], base_url: Optional[str] = None) -> Document:
    """Parse ``markup`` into a :class:`Document`.

    lxml recovers from unclosed tags and missing doctypes, so this only fails on
    input it cannot turn into a tree at all.
    """

    source = markup.decode("utf-8", errors="replace") if isinstance(markup, bytes) else markup
    try:
        root = html.document_fromstring(source, base_url=base_url)
    except ValueError:
        # lxml refuses str input that carries an XML encoding declaration.
        try:
            root = html.document_fromstring(source.encode("utf-8"), base_url=base_url)
        except (etree.ParserError, etree.XMLSyntaxError, ValueError) as exc:
            raise UnparsableContentError(f"Could not parse HTML from {base_url}: {exc}") from exc
    except (etree.ParserError, etree.XMLSyntaxError) as exc:
        raise UnparsableContentError(f"Could not parse HTML from {base_url}: {exc}") from exc

    for node in root.xpath(_NON_CONTENT_XPATH):
        node.drop_tree()

    return Document(root, source, base_url)


__all__ = ["Document", "collapse_whitespace", "node_text", "parse"]
