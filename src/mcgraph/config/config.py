"""
Configuration management for mcgraph.

Settings live in ~/.mcgraph/config.json. Every field is optional; an unset
field falls back to DEFAULTS. Values are validated when they are set, so a bad
`mcg config --set` fails at the command line instead of inside the chat UI.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Root directory for everything mcgraph keeps on disk
MCGRAPH_DIR = Path.home() / ".mcgraph"

DEFAULTS = {
    "llm": "openai",
    "assistant_name": "McGraph",
    "typing_speed": 4,
    "typing_interval_ms": 20,
    "thinking_interval_ms": 200,
    "request_timeout": None,
    "max_tokens": 800,
    "openai_model": "gpt-3.5-turbo",
    "claude_model": "claude-3-sonnet-20240229",
    "deepseek_model": "deepseek-coder",
    "gemini_model": "gemini-1.5-pro",
    "log_level": "INFO",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config(BaseModel):
    """Settings read from config.json. Use ``get`` for the effective value."""

    model_config = {"extra": "ignore"}  # _comment and hand-written keys

    # LLM
    llm: Optional[str] = Field(
        default=None,
        description="Active provider (openai, claude, deepseek, gemini, local)"
    )
    openai_model: Optional[str] = Field(default=None, description="OpenAI model name")
    claude_model: Optional[str] = Field(default=None, description="Claude model name")
    deepseek_model: Optional[str] = Field(default=None, description="DeepSeek model name")
    gemini_model: Optional[str] = Field(default=None, description="Gemini model name")
    model_path: Optional[str] = Field(
        default=None,
        description="GGUF model file for the local provider"
    )
    max_tokens: Optional[int] = Field(default=None, ge=1, description="Max tokens per response")
    request_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds to wait for a response (unset waits forever)"
    )

    # Chat UI
    assistant_name: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Label shown for assistant messages"
    )
    typing_speed: Optional[int] = Field(
        default=None,
        ge=1,
        description="Characters revealed per typing tick"
    )
    typing_interval_ms: Optional[int] = Field(
        default=None,
        ge=1,
        description="Milliseconds between typing ticks"
    )
    thinking_interval_ms: Optional[int] = Field(
        default=None,
        ge=1,
        description="Milliseconds between thinking indicator ticks"
    )

    log_level: Optional[str] = Field(
        default=None,
        description="Level for ~/.mcgraph/logs/mcgraph.log"
    )

    @field_validator("llm")
    @classmethod
    def _known_provider(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        from mcgraph.llm import AVAILABLE_PROVIDERS

        name = value.strip().lower()
        if name not in AVAILABLE_PROVIDERS:
            raise ValueError(f"unknown provider '{value}' (choose from {', '.join(AVAILABLE_PROVIDERS)})")
        return name

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level '{value}' (choose from {', '.join(LOG_LEVELS)})")
        return level

    def get(self, key: str, default: Any = None) -> Any:
        """Effective value of a setting: file value, then DEFAULTS, then ``default``."""
        value = getattr(self, key, None)
        if value is not None:
            return value
        return DEFAULTS.get(key, default)


def _describe(error: ValidationError) -> str:
    return "; ".join(e["msg"] for e in error.errors())


class ConfigManager:
    """Reads and writes config.json."""

    CONFIG_DIR = MCGRAPH_DIR
    CONFIG_FILE = CONFIG_DIR / "config.json"

    def __init__(self):
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self, create_if_missing: bool = True) -> Config:
        """Load settings from disk.

        Args:
            create_if_missing: Write a starter config.json when there is none.

        Returns:
            The parsed Config; an empty one if the file is missing or invalid.
        """
        if not self.CONFIG_FILE.exists():
            if create_if_missing:
                self._write_starter_file()
            return Config()

        data = self._read_raw()
        try:
            return Config.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid config file {self.CONFIG_FILE} ({_describe(e)}), using defaults")
            return Config()

    def _write_starter_file(self) -> None:
        data: dict[str, Any] = {"_comment": "mcgraph configuration file", "model_path": None}
        data.update(DEFAULTS)
        self._write_raw(data)

    def _read_raw(self) -> dict[str, Any]:
        if not self.CONFIG_FILE.exists():
            return {}
        try:
            data = json.loads(self.CONFIG_FILE.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Config file {self.CONFIG_FILE} is not valid JSON: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_raw(self, data: dict[str, Any]) -> None:
        self.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        self.CONFIG_FILE.write_text(json.dumps(data, indent=2) + "\n")

    def save(self, config: Optional[Config] = None) -> Path:
        """Write the set fields of ``config`` (or the current one) into config.json.

        Keys the model doesn't know about, such as ``_comment``, are kept.
        """
        if config is not None:
            self._config = config
        current = self._config or Config()

        data = self._read_raw()
        data.update(current.model_dump(exclude_none=True))
        self._write_raw(data)
        return self.CONFIG_FILE

    def _check_key(self, key: str) -> None:
        if key not in Config.model_fields:
            raise ValueError(f"Unknown config key: {key} (known: {', '.join(Config.model_fields)})")

    def set(self, key: str, value: Any) -> None:
        """Validate and store one setting.

        Raises:
            ValueError: Unknown key, or a value the field rejects.
        """
        self._check_key(key)
        data = self.load().model_dump()
        data[key] = value
        try:
            self._config = Config.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid value for {key}: {_describe(e)}") from None
        self.save()

    def unset(self, key: str) -> None:
        """Clear one setting so its default applies again."""
        self._check_key(key)
        self._config = self.load().model_copy(update={key: None})

        data = self._read_raw()
        if key in data:
            data[key] = None
            self._write_raw(data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def list_settings(self) -> dict[str, Any]:
        """Settings whose value differs from DEFAULTS."""
        return {
            key: value
            for key, value in self.config.model_dump(exclude_none=True).items()
            if DEFAULTS.get(key) != value
        }

    def reset(self) -> None:
        """Delete config.json; every setting goes back to its default."""
        self._config = Config()
        if self.CONFIG_FILE.exists():
            self.CONFIG_FILE.unlink()
            logger.info(f"Removed {self.CONFIG_FILE}")


_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Process-wide ConfigManager."""
    global _manager
    if _manager is None:
        _manager = ConfigManager()
    return _manager


def get_config() -> Config:
    return get_config_manager().config
