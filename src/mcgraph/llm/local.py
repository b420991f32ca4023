"""Local GGUF models through llama-cpp-python."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from mcgraph.core.exceptions import ProviderConfigError, ProviderError
from mcgraph.llm.base import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class LlamaProvider:
    """Runs a GGUF model in-process. The model loads on first use."""

    name = "local"

    def __init__(
        self,
        model_path: Optional[str],
        max_tokens: int = 800,
        n_ctx: int = 8192,
        n_gpu_layers: int = -1,
        temperature: float = 0.1,
    ):
        if not model_path:
            raise ProviderConfigError(
                "no model_path configured (mcg config --set model_path=/path/to/model.gguf)"
            )
        self.model_path = str(Path(model_path).expanduser())
        self.max_tokens = max_tokens
        self.n_ctx = n_ctx
        self.n_gpu_layers = n_gpu_layers
        self.temperature = temperature
        self._llm: Any = None

    @property
    def model(self) -> str:
        return Path(self.model_path).stem

    def _load(self) -> Any:
        if self._llm is None:
            # Import here to make llama-cpp-python optional
            try:
                from llama_cpp import Llama
            except ImportError as e:
                raise ProviderConfigError(
                    "llama-cpp-python is not installed (pip install 'mcgraph[local]')"
                ) from e
            logger.info(f"Loading local model: {self.model_path}")
            self._llm = Llama(
                model_path=self.model_path,
                n_ctx=self.n_ctx,
                n_gpu_layers=self.n_gpu_layers,
                verbose=False,
            )
        return self._llm

    def get_response(self, prompt: str) -> str:
        llm = self._load()
        try:
            result = llm.create_chat_completion(
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            raise ProviderError(f"local model failed: {e}") from e

        choices = result.get("choices") or []
        if not choices:
            raise ProviderError("no response from local model")
        return (choices[0]["message"].get("content") or "").strip()
