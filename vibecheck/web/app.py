"""Factory for the FastAPI application."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vibecheck import __version__
from vibecheck.extraction.errors import InvalidRequestError, VibeCheckError
from vibecheck.service import VibeCheckService

from .routes import summarize

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to summarize content"


def create_app(service: VibeCheckService) -> FastAPI:
    """Create a configured FastAPI application instance."""

    app = FastAPI(title="VibeCheck", version=__version__)
    app.state.service = service

    @app.exception_handler(VibeCheckError)
    async def _handle_vibecheck_error(request: Request, exc: VibeCheckError) -> JSONResponse:
        log = logger.warning if exc.client_error else logger.error
        log(
            "Request to %s failed: %s",
            request.url.path,
            exc,
            extra={"event": "http.request_failed", "error_kind": type(exc).__name__, "status": exc.status_code},
        )
        return JSONResponse({"error": exc.user_message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _handle_bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(
            "Rejected malformed body for %s: %s",
            request.url.path,
            exc.errors(),
            extra={"event": "http.bad_body"},
        )
        return JSONResponse({"error": InvalidRequestError.default_message}, status_code=400)

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error handling %s", request.url.path, extra={"event": "http.unexpected_error"})
        return JSONResponse({"error": GENERIC_ERROR}, status_code=500)

    app.include_router(summarize.router, prefix="/api")

    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    return app


__all__ = ["create_app"]
