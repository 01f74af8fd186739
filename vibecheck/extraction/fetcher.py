"""Single-attempt HTTP page downloads with classified failures."""
from __future__ import annotations

import codecs
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import requests

from vibecheck.config.settings import FetchSettings
from vibecheck.extraction.errors import (
    ExtractionCancelledError,
    FetchError,
    FetchForbiddenError,
    FetchNetworkError,
    FetchNotFoundError,
    FetchRateLimitedError,
    FetchRedirectLimitError,
    FetchTimeoutError,
    FetchUpstreamError,
    InvalidRequestError,
)

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024
_META_CHARSET_RE = re.compile(rb"""<meta[^>]+charset\s*=\s*["']?([A-Za-z0-9_.:-]+)""", re.IGNORECASE)

# Status codes outside the 5xx bucket that get a dedicated error kind.
_STATUS_ERRORS = {
    401: FetchForbiddenError,
    403: FetchForbiddenError,
    404: FetchNotFoundError,
    410: FetchNotFoundError,
    429: FetchRateLimitedError,
}


@dataclass(frozen=True)
class FetchResult:
    """Raw body of a successful download."""

    url: str
    final_url: str
    status_code: int
    content: bytes
    encoding: Optional[str] = None
    truncated: bool = False

    @property
    def html(self) -> str:
        """Decode the body using the declared charset, the page's meta charset, or UTF-8."""

        encoding = self.encoding or _sniff_meta_charset(self.content) or "utf-8"
        try:
            codecs.lookup(encoding)
        except LookupError:
            encoding = "utf-8"
        return self.content.decode(encoding, errors="replace")


def _sniff_meta_charset(content: bytes) -> Optional[str]:
    match = _META_CHARSET_RE.search(content[:4096])
    return match.group(1).decode("ascii") if match else None


def _declared_charset(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.strip().lower() == "charset" and value:
            return value.strip("\"' ")
    return None


def classify_status(url: str, status: int) -> Optional[FetchError]:
    """Return the error matching a non-2xx ``status`` or ``None`` for success."""

    if 200 <= status < 300:
        return None
    if status >= 500:
        return FetchUpstreamError(f"{url} returned HTTP {status}", url=url, status=status)
    error_cls = _STATUS_ERRORS.get(status, FetchError)
    return error_cls(f"{url} returned HTTP {status}", url=url, status=status)


class PageFetcher:
    """Download a page with browser-like headers, a hard deadline and bounded redirects.

    No retries happen here; a failure is reported once and the caller decides
    what to do with it.
    """

    def __init__(
        self,
        settings: Optional[FetchSettings] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._settings = settings or FetchSettings()
        self._session_factory = session_factory

    @property
    def settings(self) -> FetchSettings:
        return self._settings

    def build_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self._settings.user_agent,
            "Accept": self._settings.accept,
            "Accept-Language": self._settings.accept_language,
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }

    def fetch(self, url: str, should_cancel: Optional[Callable[[], bool]] = None) -> FetchResult:
        """Fetch ``url`` and return its body, raising a ``FetchError`` subclass on failure."""

        timeout = self._settings.timeout_seconds
        deadline = time.monotonic() + timeout

        # A fresh session per call keeps cookies and redirects from leaking between requests.
        with self._session_factory() as session:
            session.max_redirects = self._settings.max_redirects
            session.headers.update(self.build_headers())
            try:
                response = session.get(url, timeout=timeout, allow_redirects=True, stream=True)
            except requests.exceptions.Timeout as exc:
                raise FetchTimeoutError(f"Timed out after {timeout}s fetching {url}", url=url) from exc
            except requests.exceptions.TooManyRedirects as exc:
                raise FetchRedirectLimitError(
                    f"More than {self._settings.max_redirects} redirects fetching {url}", url=url
                ) from exc
            except (
                requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema,
                requests.exceptions.InvalidURL,
            ) as exc:
                raise InvalidRequestError(
                    f"Invalid URL {url!r}: {exc}",
                    user_message="The URL is not valid. Include the full address, e.g. https://example.com/post.",
                ) from exc
            except requests.RequestException as exc:
                raise FetchNetworkError(f"Network error fetching {url}: {exc}", url=url) from exc

            try:
                error = classify_status(url, response.status_code)
                if error is not None:
                    logger.warning(
                        "Fetching %s failed with HTTP %d",
                        url,
                        response.status_code,
                        extra={"event": "fetch.http_error", "url": url, "status": response.status_code},
                    )
                    raise error

                content, truncated = self._read_body(url, response, deadline, should_cancel)
            finally:
                response.close()

        logger.debug(
            "Fetched %s (%d bytes, final url %s)",
            url,
            len(content),
            response.url,
            extra={"event": "fetch.completed", "url": url, "bytes": len(content), "truncated": truncated},
        )
        return FetchResult(
            url=url,
            final_url=response.url or url,
            status_code=response.status_code,
            content=content,
            encoding=_declared_charset(response.headers.get("Content-Type")),
            truncated=truncated,
        )

    def _read_body(
        self,
        url: str,
        response: requests.Response,
        deadline: float,
        should_cancel: Optional[Callable[[], bool]],
    ) -> Tuple[bytes, bool]:
        limit = self._settings.max_content_bytes
        chunks = []
        size = 0
        truncated = False
        try:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if should_cancel is not None and should_cancel():
                    raise ExtractionCancelledError(f"Cancelled while downloading {url}")
                if time.monotonic() > deadline:
                    raise FetchTimeoutError(f"Download of {url} exceeded {self._settings.timeout_seconds}s", url=url)
                chunks.append(chunk)
                size += len(chunk)
                if size > limit:
                    truncated = True
                    break
        except requests.RequestException as exc:
            if time.monotonic() > deadline:
                raise FetchTimeoutError(f"Timed out reading {url}", url=url) from exc
            raise FetchNetworkError(f"Connection dropped while reading {url}: {exc}", url=url) from exc

        if truncated:
            logger.info("Truncated body of %s at %d bytes", url, limit)
        return b"".join(chunks)[:limit], truncated


__all__ = ["FetchResult", "PageFetcher", "classify_status"]
