"""
LLM providers for mcgraph.

Each provider answers a single prompt with a single completion:

    from mcgraph.llm import get_provider

    provider = get_provider("claude")
    print(provider.get_response("What is a goroutine?"))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from mcgraph.core.exceptions import ProviderConfigError
from mcgraph.llm.anthropic import ClaudeProvider
from mcgraph.llm.base import SYSTEM_PROMPT, HTTPProvider, LLMProvider
from mcgraph.llm.gemini import GeminiProvider
from mcgraph.llm.local import LlamaProvider
from mcgraph.llm.openai import DeepSeekProvider, OpenAIProvider

if TYPE_CHECKING:
    from mcgraph.config import Config

HTTP_PROVIDERS: dict[str, type[HTTPProvider]] = {
    "openai": OpenAIProvider,
    "claude": ClaudeProvider,
    "deepseek": DeepSeekProvider,
    "gemini": GeminiProvider,
}

AVAILABLE_PROVIDERS = [*HTTP_PROVIDERS, "local"]


def api_key_env_var(name: str) -> str:
    """Environment variable holding the API key for a provider ("" if none)."""
    provider_cls = HTTP_PROVIDERS.get(name.lower())
    return provider_cls.api_key_env if provider_cls else ""


def get_provider(name: str, config: Optional["Config"] = None) -> LLMProvider:
    """Build a provider by name using model settings from config.

    Raises:
        ProviderConfigError: If the provider name is unknown.
    """
    if config is None:
        from mcgraph.config import get_config
        config = get_config()

    name = name.lower()
    max_tokens = config.get("max_tokens")

    if name == "local":
        return LlamaProvider(config.get("model_path"), max_tokens=max_tokens)

    provider_cls = HTTP_PROVIDERS.get(name)
    if provider_cls is None:
        raise ProviderConfigError(
            f"invalid LLM type: {name} (available: {', '.join(AVAILABLE_PROVIDERS)})"
        )
    return provider_cls(model=config.get(f"{name}_model"), max_tokens=max_tokens)


__all__ = [
    "AVAILABLE_PROVIDERS",
    "SYSTEM_PROMPT",
    "ClaudeProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "HTTPProvider",
    "LLMProvider",
    "LlamaProvider",
    "OpenAIProvider",
    "api_key_env_var",
    "get_provider",
]
