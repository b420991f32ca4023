"""
Extension system for mcgraph chat.

Extensions are /<extension> <command> actions that don't go to the LLM.
Providers come from:
1. Built-ins (the "system" extension)
2. ~/.mcgraph/extensions/ (user-installed, only when enabled)
"""

from __future__ import annotations

from mcgraph.extensions.adapter import (
    AdaptedCommand,
    AdaptedExtension,
    Command,
    Extension,
    adapt_command,
    adapt_extension,
    probe,
)
from mcgraph.extensions.builtin import MAX_READ_BYTES, SystemExtension
from mcgraph.extensions.config import (
    ExtensionsConfig,
    load_extensions_config,
    save_extensions_config,
)
from mcgraph.extensions.loader import USER_EXTENSIONS_DIR, discover_extensions, load_bundle
from mcgraph.extensions.registry import ExtensionRegistry

__all__ = [
    "Command",
    "Extension",
    "AdaptedCommand",
    "AdaptedExtension",
    "adapt_command",
    "adapt_extension",
    "probe",
    "SystemExtension",
    "MAX_READ_BYTES",
    "ExtensionsConfig",
    "load_extensions_config",
    "save_extensions_config",
    "USER_EXTENSIONS_DIR",
    "discover_extensions",
    "load_bundle",
    "ExtensionRegistry",
]
