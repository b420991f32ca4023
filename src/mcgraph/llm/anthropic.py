"""Anthropic messages API."""

from __future__ import annotations

from mcgraph.core.exceptions import ProviderError
from mcgraph.llm.base import SYSTEM_PROMPT, HTTPProvider

ANTHROPIC_API = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider(HTTPProvider):
    name = "claude"
    api_key_env = "ANTHROPIC_API_KEY"

    def get_response(self, prompt: str) -> str:
        data = self._post(
            ANTHROPIC_API,
            {
                "model": self.model,
                "max_tokens": self.max_tokens,
                "system": SYSTEM_PROMPT,
                "messages": [{"role": "user", "content": prompt}],
            },
            {"x-api-key": self.api_key, "anthropic-version": ANTHROPIC_VERSION},
        )

        # Only text blocks carry the answer
        texts = [
            block.get("text", "")
            for block in data.get("content") or []
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        if not texts:
            raise ProviderError("no response from claude")
        return "".join(texts).strip()
