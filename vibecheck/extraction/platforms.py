"""Per-platform CSS selector bank.

Platforms change their markup often, so each one lists several candidate
selectors in priority order. The first selector that matches any node wins;
there is no scoring and no merging across selectors.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from vibecheck.extraction.classifier import host_matches
from vibecheck.extraction.document import Document, collapse_whitespace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Platform:
    key: str
    domains: Tuple[str, ...]
    selectors: Tuple[str, ...]


# Order matters: the first platform whose domains match the URL is used.
PLATFORMS: Sequence[Platform] = (
    Platform(
        key="twitter",
        domains=("twitter.com", "x.com", "nitter.net"),
        selectors=(
            '[data-testid="tweetText"], .tweet-text, .js-tweet-text',
            '.tweet-content, .main-tweet .tweet-content',
            'article [lang], [role="article"] [lang]',
            'article p, [role="article"] p',
        ),
    ),
    Platform(
        key="farcaster",
        domains=("warpcast.com", "farcaster.xyz"),
        selectors=(
            '[data-cast-content="true"], [data-text="true"]',
            '.cast-body, .cast-content, .cast-text',
            'article p',
        ),
    ),
    Platform(
        key="reddit",
        domains=("reddit.com",),
        selectors=(
            'shreddit-post [slot="text-body"]',
            '[data-test-id="post-content"] [data-click-id="text"]',
            '[data-test-id="post-content"]',
            '.thing.link .usertext-body .md, .expando .usertext-body .md',
            '[slot="title"], h1',
        ),
    ),
    Platform(
        key="hackernews",
        domains=("news.ycombinator.com",),
        selectors=(
            '.fatitem .toptext',
            '.fatitem .commtext',
            '.comment .commtext',
            '.titleline',
        ),
    ),
    Platform(
        key="medium",
        domains=("medium.com",),
        selectors=(
            'article .pw-post-body-paragraph',
            'article section p',
            '.meteredContent p',
            'article p',
        ),
    ),
    Platform(
        key="substack",
        domains=("substack.com",),
        selectors=(
            '.available-content .body.markup',
            '.post-content .body',
            '.body.markup p',
            'article p',
        ),
    ),
)


def detect_platform(url: str) -> Optional[Platform]:
    """Return the first platform whose domains match ``url``."""

    for platform in PLATFORMS:
        if host_matches(url, platform.domains):
            return platform
    return None


def extract_platform_specific(document: Document, url: str) -> str:
    """Text from the first selector of the URL's platform that matches any node.

    Returns an empty string when the URL belongs to no known platform or none of
    its selectors matches.
    """

    platform = detect_platform(url)
    if platform is None:
        return ""

    for selector in platform.selectors:
        try:
            nodes = document.select(selector)
        except Exception as exc:
            logger.warning(
                "Selector %r failed for %s: %s",
                selector,
                platform.key,
                exc,
                extra={"event": "extraction.selector_failed", "platform": platform.key},
            )
            continue
        if not nodes:
            continue

        logger.debug("Platform %s matched %d nodes with %r", platform.key, len(nodes), selector)
        return collapse_whitespace(" ".join(node.text_content() for node in nodes))

    logger.debug("No %s selector matched %s", platform.key, url)
    return ""


__all__ = ["PLATFORMS", "Platform", "detect_platform", "extract_platform_specific"]
