"""Shared FastAPI dependencies."""
from __future__ import annotations

from fastapi import Request

from vibecheck.service import VibeCheckService


def get_service(request: Request) -> VibeCheckService:
    return request.app.state.service


__all__ = ["get_service"]
