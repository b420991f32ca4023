"""
Base classes for LLM providers.

A provider maps one prompt to one completion. It is called off the UI loop,
blocks until done, and reports every failure as ProviderError.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from mcgraph.core.exceptions import ProviderConfigError, ProviderError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are McGraph, a helpful coding assistant AI. "
    "Provide concise and technical answers to coding questions."
)

# Seconds; the chat loop itself waits as long as the provider does
DEFAULT_HTTP_TIMEOUT = httpx.Timeout(30.0, read=300.0)


@runtime_checkable
class LLMProvider(Protocol):
    """Anything that can answer a prompt."""

    name: str

    def get_response(self, prompt: str) -> str: ...


class HTTPProvider:
    """Shared plumbing for providers behind a JSON HTTP API."""

    name = "http"
    api_key_env: str = ""

    def __init__(
        self,
        model: str,
        max_tokens: int = 800,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self._api_key = api_key
        self._client = client or httpx.Client(timeout=DEFAULT_HTTP_TIMEOUT)

    @property
    def api_key(self) -> str:
        key = self._api_key or os.environ.get(self.api_key_env, "")
        if not key:
            raise ProviderConfigError(f"{self.api_key_env} environment variable not set")
        return key

    def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
        """POST JSON and return the decoded body, mapping failures to ProviderError."""
        try:
            resp = self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.name} request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.name} returned invalid JSON (status {resp.status_code})"
            ) from e

        if resp.status_code >= 400:
            message = _error_message(data) or resp.reason_phrase
            raise ProviderError(f"{self.name} API error ({resp.status_code}): {message}")

        if not isinstance(data, dict):
            raise ProviderError(f"{self.name} returned an unexpected response")
        return data

    def get_response(self, prompt: str) -> str:
        raise NotImplementedError

    def close(self) -> None:
        self._client.close()


def _error_message(data: Any) -> str:
    """Pull a message out of the usual {"error": {"message": ...}} shapes."""
    if not isinstance(data, dict):
        return ""
    error = data.get("error")
    if isinstance(error, dict):
        return str(error.get("message", ""))
    if isinstance(error, str):
        return error
    return ""
