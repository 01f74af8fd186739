"""Application settings management for VibeCheck."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "settings.yaml"
ENV_SETTINGS_PATH = "VIBECHECK_SETTINGS"
ENV_LLM_MODEL = "VIBECHECK_LLM_MODEL"
ENV_LLM_BASE_URL = "VIBECHECK_LLM_BASE_URL"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass
class FetchSettings:
    """HTTP behaviour for page downloads."""

    timeout_seconds: float = 20.0
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = "en-US,en;q=0.9"
    max_content_bytes: int = 5_000_000


@dataclass
class ExtractionSettings:
    """Minimum text lengths per extraction stage."""

    readability_min_length: int = 100
    platform_min_length: int = 50
    fallback_min_length: int = 50
    max_summary_chars: int = 8000


@dataclass
class LLMSettings:
    """Configuration for the chat model that writes the vibe summary."""

    provider: str = "ollama"
    model: str = "llama3.1:8b"
    base_url: str = "http://127.0.0.1:11434"
    context_window: int = 4096
    max_output_tokens: int = 100
    temperature: float = 0.3
    top_p: float = 0.95
    repeat_penalty: float = 1.1
    max_retries: int = 2
    debug_payloads: bool = False


@dataclass
class AppSettings:
    """Top-level application settings loaded from YAML."""

    fetch: FetchSettings = field(default_factory=FetchSettings)
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    llm: LLMSettings = field(default_factory=LLMSettings)


class SettingsError(RuntimeError):
    """Raised when there is an issue loading settings."""


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise SettingsError(f"Settings file not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise SettingsError("Settings file must define a mapping at the root level")
    return data


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    entry = data.get(name) or {}
    if not isinstance(entry, dict):
        raise SettingsError(f"'{name}' must be a mapping of configuration values")
    return entry


def _parse_fetch(entry: Dict[str, Any]) -> FetchSettings:
    defaults = FetchSettings()
    return FetchSettings(
        timeout_seconds=float(entry.get("timeout_seconds", defaults.timeout_seconds)),
        max_redirects=max(0, int(entry.get("max_redirects", defaults.max_redirects))),
        user_agent=str(entry.get("user_agent", defaults.user_agent)),
        accept=str(entry.get("accept", defaults.accept)),
        accept_language=str(entry.get("accept_language", defaults.accept_language)),
        max_content_bytes=max(1, int(entry.get("max_content_bytes", defaults.max_content_bytes))),
    )


def _parse_extraction(entry: Dict[str, Any]) -> ExtractionSettings:
    defaults = ExtractionSettings()
    return ExtractionSettings(
        readability_min_length=max(0, int(entry.get("readability_min_length", defaults.readability_min_length))),
        platform_min_length=max(0, int(entry.get("platform_min_length", defaults.platform_min_length))),
        fallback_min_length=max(0, int(entry.get("fallback_min_length", defaults.fallback_min_length))),
        max_summary_chars=max(1, int(entry.get("max_summary_chars", defaults.max_summary_chars))),
    )


def _parse_llm(entry: Dict[str, Any]) -> LLMSettings:
    defaults = LLMSettings()
    return LLMSettings(
        provider=str(entry.get("provider", defaults.provider)),
        model=str(os.environ.get(ENV_LLM_MODEL) or entry.get("model", defaults.model)),
        base_url=str(os.environ.get(ENV_LLM_BASE_URL) or entry.get("base_url", defaults.base_url)).rstrip("/"),
        context_window=int(entry.get("context_window", defaults.context_window)),
        max_output_tokens=int(entry.get("max_output_tokens", defaults.max_output_tokens)),
        temperature=float(entry.get("temperature", defaults.temperature)),
        top_p=float(entry.get("top_p", defaults.top_p)),
        repeat_penalty=float(entry.get("repeat_penalty", defaults.repeat_penalty)),
        max_retries=max(1, int(entry.get("max_retries", defaults.max_retries))),
        debug_payloads=bool(entry.get("debug_payloads", defaults.debug_payloads)),
    )


def load_settings(path: Optional[Path] = None) -> AppSettings:
    """Load application settings from YAML into ``AppSettings``.

    ``path`` defaults to the value of the ``VIBECHECK_SETTINGS`` environment variable
    and falls back to ``config/settings.yaml`` relative to the project root. Only an
    explicitly requested file has to exist; without one the built-in defaults apply.
    """

    if path is None:
        env_path = os.environ.get(ENV_SETTINGS_PATH)
        if env_path:
            path = Path(env_path)
        elif DEFAULT_SETTINGS_PATH.exists():
            path = DEFAULT_SETTINGS_PATH

    data = _load_yaml(path) if path is not None else {}

    return AppSettings(
        fetch=_parse_fetch(_section(data, "fetch")),
        extraction=_parse_extraction(_section(data, "extraction")),
        llm=_parse_llm(_section(data, "llm")),
    )


__all__ = [
    "AppSettings",
    "ExtractionSettings",
    "FetchSettings",
    "LLMSettings",
    "SettingsError",
    "load_settings",
]
