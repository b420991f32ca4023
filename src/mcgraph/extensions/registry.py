"""
Extension registry.

Holds every registered extension provider keyed by name, plus a parallel
name -> {command name -> command} index used for dispatch. Populated once at
startup and read-only afterwards.

Name conflicts are resolved last-registered-wins. Built-ins are registered
first, so an external provider that reports the name "system" replaces the
built-in one on purpose.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from mcgraph.core.exceptions import (
    CapabilityError,
    CommandNotFoundError,
    ExtensionError,
    ExtensionLoadError,
    ExtensionNotFoundError,
    ExtensionsDisabledError,
    McGraphError,
)
from mcgraph.extensions.adapter import Command, Extension, adapt_extension
from mcgraph.extensions.builtin import SystemExtension
from mcgraph.extensions.loader import (
    USER_EXTENSIONS_DIR,
    bundle_name,
    discover_extensions,
    load_bundle,
)

logger = logging.getLogger(__name__)


class ExtensionRegistry:
    """Registry for extension providers and their commands."""

    def __init__(self, enabled: bool = True, extensions_dir: Path | None = None):
        self.enabled = enabled
        self.extensions_dir = extensions_dir or USER_EXTENSIONS_DIR
        self._extensions: dict[str, Extension] = {}
        self._commands: dict[str, dict[str, Command]] = {}
        self._builtin_names: set[str] = set()

    @property
    def is_enabled(self) -> bool:
        return self.enabled

    def _store(self, extension: Extension, commands: list[Command]) -> None:
        name = extension.name()
        if name in self._extensions:
            if name in self._builtin_names:
                logger.info(f"Extension '{name}' overrides the built-in extension")
            else:
                logger.info(f"Extension '{name}' replaces a previously loaded extension")
            self._builtin_names.discard(name)
        self._extensions[name] = extension
        self._commands[name] = {cmd.name(): cmd for cmd in commands}

    def register_builtins(self) -> None:
        """Install the built-in providers. Native, never adapted."""
        system = SystemExtension()
        self._store(system, system.commands())
        self._builtin_names.add(system.name())
        logger.info(f"Loaded built-in extension: {system.name()} - {system.description()}")

    def register(self, provider: Any) -> Extension:
        """Adapt an arbitrary provider and register it under its reported name.

        Raises:
            CapabilityError: If the provider fails a required capability probe.
        """
        extension = adapt_extension(provider)
        self._store(extension, extension.commands())
        return extension

    def load_extension(self, path: Path) -> Extension:
        """Load a single bundle from disk and register it.

        Raises:
            ExtensionLoadError: If the bundle can't be imported or adapted.
        """
        provider = load_bundle(path)
        try:
            extension = self.register(provider)
        except CapabilityError as e:
            raise ExtensionLoadError(str(path), str(e)) from e
        except Exception as e:
            raise ExtensionLoadError(str(path), f"registration failed: {e}") from e
        logger.info(f"Loaded extension: {extension.name()} - {extension.description()}")
        return extension

    def load_extensions(self) -> int:
        """Install built-ins, then discover and load external providers.

        A no-op when the registry is disabled. Broken bundles are skipped
        with a warning.

        Returns:
            Number of external providers loaded.
        """
        if not self.enabled:
            logger.info("Extensions are disabled")
            return 0

        self.register_builtins()

        if not self.extensions_dir.exists():
            try:
                self.extensions_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning(f"Failed to create extensions directory {self.extensions_dir}: {e}")

        loaded = 0
        for path in discover_extensions(self.extensions_dir):
            try:
                self.load_extension(path)
            except ExtensionLoadError as e:
                logger.warning(f"Failed to load extension '{bundle_name(path)}': {e.reason}")
                continue
            loaded += 1

        if loaded == 0:
            logger.info("No external extensions loaded. Using built-in extensions only.")
        return loaded

    def execute(self, extension_name: str, command_name: str, args: list[str]) -> str:
        """Execute a command from an extension.

        Raises:
            ExtensionsDisabledError: The registry is disabled.
            ExtensionNotFoundError: No extension with that name.
            CommandNotFoundError: The extension has no such command.
            ExtensionError: The command itself failed.
        """
        if not self.enabled:
            raise ExtensionsDisabledError()

        if extension_name not in self._extensions:
            raise ExtensionNotFoundError(extension_name)

        command = self._commands.get(extension_name, {}).get(command_name)
        if command is None:
            raise CommandNotFoundError(extension_name, command_name)

        try:
            return command.execute(list(args))
        except McGraphError:
            raise
        except Exception as e:
            raise ExtensionError(str(e) or type(e).__name__) from e

    def get(self, name: str) -> Extension | None:
        """Get an extension by name."""
        return self._extensions.get(name)

    def list_extensions(self) -> list[Extension]:
        """Snapshot of registered extensions."""
        return list(self._extensions.values())

    def commands_for(self, extension_name: str) -> dict[str, Command]:
        """Commands of an extension by name; empty for an unknown extension."""
        return dict(self._commands.get(extension_name, {}))

    def get_completions(self) -> dict[str, str]:
        """Get "/<ext> <cmd>" strings and descriptions for completion."""
        result = {}
        for ext_name, commands in self._commands.items():
            for cmd_name, cmd in commands.items():
                result[f"/{ext_name} {cmd_name}"] = cmd.description()
        return result

    def __len__(self) -> int:
        return len(self._extensions)

    def __contains__(self, name: str) -> bool:
        return name in self._extensions
