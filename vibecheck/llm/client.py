"""Ollama chat calls that must answer with a JSON object."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from ollama import Client, ResponseError

from vibecheck.config.settings import LLMSettings

logger = logging.getLogger(__name__)

# Rough chars-per-token ratio used only for the context window warning.
_CHARS_PER_TOKEN = 4

Messages = List[Dict[str, str]]


class LLMClientError(RuntimeError):
    """The model could not be reached or did not answer with a JSON object."""

    def __init__(self, message: str, exchange: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.exchange = exchange or {}


class LLMClient:
    """Send chat messages to Ollama with a JSON schema and return the parsed object.

    The first attempt uses the configured temperature; retries run at 0 so a
    malformed answer is not repeated at random. ``backend`` is any object with
    an ollama-style ``chat`` method and defaults to :class:`ollama.Client`.
    """

    def __init__(self, settings: LLMSettings, backend: Optional[Any] = None) -> None:
        self._settings = settings
        self._backend = backend

    @property
    def settings(self) -> LLMSettings:
        return self._settings

    def _get_backend(self) -> Any:
        if self._backend is None:
            logger.info(
                "Connecting to Ollama at %s (model=%s)",
                self._settings.base_url,
                self._settings.model,
            )
            self._backend = Client(host=self._settings.base_url)
        return self._backend

    def chat_json(self, messages: Messages, schema: Dict[str, Any], *, purpose: str = "chat") -> Dict[str, Any]:
        attempts = max(1, self._settings.max_retries)
        self._warn_if_oversized(messages, purpose)

        failure: Optional[LLMClientError] = None
        for attempt in range(1, attempts + 1):
            temperature = self._settings.temperature if attempt == 1 else 0.0
            try:
                return self._chat_once(messages, schema, temperature)
            except LLMClientError as exc:
                failure = exc
                logger.warning(
                    "LLM %s attempt %d/%d failed: %s",
                    purpose,
                    attempt,
                    attempts,
                    exc,
                    extra={"event": "llm.attempt_failed", "purpose": purpose, "attempt": attempt},
                )

        raise LLMClientError(
            f"No usable {purpose} answer after {attempts} attempts",
            failure.exchange if failure else None,
        ) from failure

    def _chat_once(self, messages: Messages, schema: Dict[str, Any], temperature: float) -> Dict[str, Any]:
        options = {
            "temperature": temperature,
            "top_p": self._settings.top_p,
            "repeat_penalty": self._settings.repeat_penalty,
            "num_predict": self._settings.max_output_tokens,
            "num_ctx": self._settings.context_window,
        }
        exchange: Dict[str, Any] = {"model": self._settings.model, "options": options}

        try:
            result = self._get_backend().chat(
                model=self._settings.model,
                messages=messages,
                options=options,
                format=schema,
            )
        except ResponseError as exc:
            exchange["error"] = str(exc)
            self._log_exchange(messages, exchange)
            raise LLMClientError(f"Ollama rejected the request: {exc}", exchange) from exc
        except Exception as exc:
            exchange["error"] = str(exc)
            self._log_exchange(messages, exchange)
            raise LLMClientError(f"Could not reach Ollama: {exc}", exchange) from exc

        content = _message_content(result)
        exchange["response"] = content
        self._log_exchange(messages, exchange)
        return _decode_object(content, exchange)

    def _warn_if_oversized(self, messages: Messages, purpose: str) -> None:
        prompt_tokens = sum(len(message["content"]) for message in messages) // _CHARS_PER_TOKEN
        if prompt_tokens > self._settings.context_window:
            logger.warning(
                "Prompt for %s is ~%d tokens, exceeding context window of %d",
                purpose,
                prompt_tokens,
                self._settings.context_window,
                extra={"event": "llm.prompt_oversize", "prompt_tokens": prompt_tokens},
            )

    def _log_exchange(self, messages: Messages, exchange: Dict[str, Any]) -> None:
        if self._settings.debug_payloads:
            logger.debug(
                "LLM exchange: %s",
                json.dumps({"messages": messages, **exchange}, ensure_ascii=False, default=str),
            )


def _message_content(result: Any) -> str:
    # ollama's ChatResponse supports the same ``get`` access as a plain dict.
    message = result.get("message") or {}
    return (message.get("content") or "").strip()


def _decode_object(content: str, exchange: Dict[str, Any]) -> Dict[str, Any]:
    if not content:
        raise LLMClientError("Empty response from LLM", exchange)
    try:
        parsed = json.loads(content)
    except ValueError as exc:
        raise LLMClientError(f"LLM response was not JSON: {exc}", exchange) from exc
    if not isinstance(parsed, dict):
        raise LLMClientError("LLM response was not a JSON object", exchange)
    return parsed


__all__ = ["LLMClient", "LLMClientError"]
