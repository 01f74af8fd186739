"""URL based content-type classification used to frame the summary prompt."""
from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Optional, Sequence, Tuple
from urllib.parse import urlsplit


class ContentCategory(str, Enum):
    ARTICLE = "article"
    TWEET = "tweet"
    THREAD = "thread"
    BLOG = "blog"
    FARCASTER = "farcaster"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: Optional[str], default: Optional["ContentCategory"] = None) -> "ContentCategory":
        """Map a loose string to a category, falling back to ``default`` (``GENERAL``)."""

        fallback = default or cls.GENERAL
        if isinstance(value, cls):
            return value
        if not value:
            return fallback
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return fallback


def url_host(url: str) -> str:
    """Lower-cased host of ``url``; tolerates a missing scheme."""

    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"//{candidate}"
    try:
        host = urlsplit(candidate).hostname or ""
    except ValueError:
        return ""
    return host.lower()


def host_matches(url: str, domains: Iterable[str]) -> bool:
    """True when the URL host is one of ``domains`` or a subdomain of one."""

    host = url_host(url)
    if not host:
        return False
    return any(host == domain or host.endswith(f".{domain}") for domain in domains)


def _on(*domains: str) -> Callable[[str], bool]:
    return lambda url: host_matches(url, domains)


def _path_contains(*fragments: str) -> Callable[[str], bool]:
    def predicate(url: str) -> bool:
        try:
            path = urlsplit(url).path.lower()
        except ValueError:
            return False
        return any(fragment in path for fragment in fragments)

    return predicate


# Evaluated top to bottom; the first predicate that matches decides.
CONTENT_TYPE_RULES: Sequence[Tuple[Callable[[str], bool], ContentCategory]] = (
    (_on("warpcast.com", "farcaster.xyz"), ContentCategory.FARCASTER),
    (_on("twitter.com", "x.com", "nitter.net"), ContentCategory.TWEET),
    (_on("threadreaderapp.com"), ContentCategory.THREAD),
    (_on("reddit.com", "news.ycombinator.com"), ContentCategory.THREAD),
    (_on("medium.com", "substack.com", "blogspot.com", "wordpress.com", "dev.to", "hashnode.dev"), ContentCategory.BLOG),
    (_path_contains("/thread/", "/threads/", "/t/"), ContentCategory.THREAD),
    (_path_contains("/blog"), ContentCategory.BLOG),
)


def classify(url: str) -> ContentCategory:
    """Guess the content category of ``url``; ``ARTICLE`` when nothing matches."""

    for predicate, category in CONTENT_TYPE_RULES:
        if predicate(url):
            return category
    return ContentCategory.ARTICLE


__all__ = ["CONTENT_TYPE_RULES", "ContentCategory", "classify", "host_matches", "url_host"]
