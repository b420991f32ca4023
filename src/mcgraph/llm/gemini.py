"""Google Gemini generateContent API."""

from __future__ import annotations

from mcgraph.core.exceptions import ProviderError
from mcgraph.llm.base import SYSTEM_PROMPT, HTTPProvider

GEMINI_API = "https://generativelanguage.googleapis.com/v1/models/{model}:generateContent"


class GeminiProvider(HTTPProvider):
    name = "gemini"
    api_key_env = "GEMINI_API_KEY"
    temperature = 0.7

    def get_response(self, prompt: str) -> str:
        # No dedicated system message, so the instructions ride along with the question
        full_prompt = f"{SYSTEM_PROMPT}\n\nUser question: {prompt}"
        data = self._post(
            GEMINI_API.format(model=self.model),
            {
                "contents": [{"parts": [{"text": full_prompt}]}],
                "generationConfig": {
                    "maxOutputTokens": self.max_tokens,
                    "temperature": self.temperature,
                },
            },
            {"x-goog-api-key": self.api_key},
        )

        candidates = data.get("candidates") or []
        if not candidates:
            raise ProviderError("no response from gemini")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()
