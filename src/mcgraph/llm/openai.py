"""OpenAI-compatible chat completions (OpenAI, DeepSeek)."""

from __future__ import annotations

from mcgraph.core.exceptions import ProviderError
from mcgraph.llm.base import SYSTEM_PROMPT, HTTPProvider


class OpenAIProvider(HTTPProvider):
    """Chat completions endpoint of the OpenAI API."""

    name = "openai"
    api_key_env = "OPENAI_API_KEY"
    base_url = "https://api.openai.com/v1"

    def get_response(self, prompt: str) -> str:
        data = self._post(
            f"{self.base_url}/chat/completions",
            {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "max_tokens": self.max_tokens,
            },
            {"Authorization": f"Bearer {self.api_key}"},
        )

        choices = data.get("choices") or []
        if not choices:
            raise ProviderError(f"no response from {self.name}")
        content = (choices[0].get("message") or {}).get("content") or ""
        return content.strip()


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek speaks the OpenAI protocol."""

    name = "deepseek"
    api_key_env = "DEEPSEEK_API_KEY"
    base_url = "https://api.deepseek.com/v1"
