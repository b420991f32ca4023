"""
Extension system configuration.

Stored separately from the main config at ~/.mcgraph/extensions.json so that
turning extensions on is a deliberate step (``mcg ext enable``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from mcgraph.config import MCGRAPH_DIR

logger = logging.getLogger(__name__)

EXTENSIONS_CONFIG_FILE = MCGRAPH_DIR / "extensions.json"


class ExtensionsConfig(BaseModel):
    """Settings for the extension system."""

    enabled: bool = Field(
        default=False,
        description="Load extensions at startup (disabled by default for security)"
    )
    extension_settings: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Per-extension settings keyed by extension name"
    )


def load_extensions_config(path: Path | None = None) -> ExtensionsConfig:
    """Load the extension config, writing the default file if missing.

    An unreadable or invalid file yields the defaults (extensions disabled).
    """
    path = path or EXTENSIONS_CONFIG_FILE

    if not path.exists():
        config = ExtensionsConfig()
        try:
            save_extensions_config(config, path)
        except OSError as e:
            logger.warning(f"Failed to write default extensions config: {e}")
        return config

    try:
        return ExtensionsConfig.model_validate(json.loads(path.read_text()))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Invalid extensions config ({e}), extensions disabled")
        return ExtensionsConfig()


def save_extensions_config(config: ExtensionsConfig, path: Path | None = None) -> Path:
    """Write the extension config to disk."""
    path = path or EXTENSIONS_CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(), indent=2) + "\n")
    return path
