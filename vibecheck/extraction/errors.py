"""Caller-facing error kinds raised by the extraction pipeline.

Every error carries an HTTP-style ``status_code`` so the web layer can tell a
caller input problem (4xx) from an internal or upstream failure (5xx), and a
``user_message`` that is safe to show to an end user.
"""
from __future__ import annotations

from typing import Optional

PASTE_HINT = "Try copying the text and pasting it directly instead."


class VibeCheckError(RuntimeError):
    """Base class for every error surfaced to callers."""

    status_code = 500
    default_message = "Failed to summarize content."

    def __init__(self, message: Optional[str] = None, *, user_message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message

    @property
    def client_error(self) -> bool:
        """True when the failure should be reported as a 4xx response."""

        return self.status_code < 500


class InvalidRequestError(VibeCheckError):
    status_code = 400
    default_message = "Either a URL or some text to summarize is required."


class ExtractionCancelledError(VibeCheckError):
    status_code = 400
    default_message = "The request was cancelled before extraction finished."


class FetchError(VibeCheckError):
    """The page could not be downloaded."""

    status_code = 400
    kind = "http_error"
    default_message = f"Couldn't access this URL. {PASTE_HINT}"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        url: Optional[str] = None,
        status: Optional[int] = None,
        user_message: Optional[str] = None,
    ) -> None:
        super().__init__(message, user_message=user_message)
        self.url = url
        self.status = status


class FetchTimeoutError(FetchError):
    kind = "timeout"
    default_message = f"The site took too long to respond. {PASTE_HINT}"


class FetchForbiddenError(FetchError):
    kind = "forbidden"
    default_message = (
        "Access to this page was denied; the content may be protected or require "
        f"authentication. {PASTE_HINT}"
    )


class FetchNotFoundError(FetchError):
    kind = "not_found"
    default_message = "This page could not be found. Check that the URL is correct."


class FetchRateLimitedError(FetchError):
    kind = "rate_limited"
    default_message = f"The site is rate limiting requests right now. {PASTE_HINT}"


class FetchUpstreamError(FetchError):
    kind = "upstream_error"
    default_message = f"The site returned a server error. Try again later. {PASTE_HINT}"


class FetchNetworkError(FetchError):
    kind = "network"
    default_message = f"Couldn't connect to this site. Check the URL. {PASTE_HINT}"


class FetchRedirectLimitError(FetchNetworkError):
    kind = "too_many_redirects"
    default_message = f"This URL redirects too many times. {PASTE_HINT}"


class UnparsableContentError(VibeCheckError):
    status_code = 400
    default_message = f"The page could not be read as HTML. {PASTE_HINT}"


class NoContentExtractedError(VibeCheckError):
    status_code = 400
    default_message = (
        "No readable content was found; the content may be protected or require "
        f"authentication. {PASTE_HINT}"
    )


__all__ = [
    "ExtractionCancelledError",
    "FetchError",
    "FetchForbiddenError",
    "FetchNetworkError",
    "FetchNotFoundError",
    "FetchRateLimitedError",
    "FetchRedirectLimitError",
    "FetchTimeoutError",
    "FetchUpstreamError",
    "InvalidRequestError",
    "NoContentExtractedError",
    "PASTE_HINT",
    "UnparsableContentError",
    "VibeCheckError",
]
