"""ASGI entrypoint: ``uvicorn vibecheck.web.main:app``."""
from __future__ import annotations

from vibecheck.config.settings import load_settings
from vibecheck.service import VibeCheckService
from vibecheck.telemetry import configure_logging, configure_metrics_from_env

from .app import create_app

configure_logging()
configure_metrics_from_env()

_settings = load_settings()

app = create_app(VibeCheckService.from_settings(_settings))

__all__ = ["app"]
