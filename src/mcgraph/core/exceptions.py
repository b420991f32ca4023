"""
Exception classes for mcgraph.
"""

from __future__ import annotations


class McGraphError(Exception):
    """Base exception for mcgraph errors."""


# ---------------------------------------------------------------------------
# Extensions
# ---------------------------------------------------------------------------

class ExtensionError(McGraphError):
    """Base exception for extension-related errors."""


class CapabilityError(ExtensionError):
    """A provider or command is missing a capability, or it has the wrong type."""

    def __init__(self, capability: str, reason: str):
        self.capability = capability
        self.reason = reason
        super().__init__(f"{capability}(): {reason}")


class ExtensionsDisabledError(ExtensionError):
    """The extension system is turned off."""

    def __init__(self):
        super().__init__("extensions are disabled")


class ExtensionNotFoundError(ExtensionError):
    """No extension registered under the given name."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"extension '{extension}' not found")


class CommandNotFoundError(ExtensionError):
    """The extension exists but has no command with the given name."""

    def __init__(self, extension: str, command: str):
        self.extension = extension
        self.command = command
        super().__init__(f"command '{command}' not found in extension '{extension}'")


class ExtensionLoadError(ExtensionError):
    """An extension bundle could not be loaded from disk."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"failed to load extension {path}: {reason}")


class FileTooLargeError(ExtensionError):
    """File exceeds the size limit of the built-in read command."""

    def __init__(self, path: str, size: int, limit: int):
        self.path = path
        self.size = size
        self.limit = limit
        super().__init__(f"file too large (>{limit // (1024 * 1024)}MB): {path}")


# ---------------------------------------------------------------------------
# LLM providers
# ---------------------------------------------------------------------------

class ProviderError(McGraphError):
    """LLM request failed."""


class ProviderConfigError(ProviderError):
    """LLM provider is unknown or missing configuration (e.g. API key)."""


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class PersistenceError(McGraphError):
    """Conversation store operation failed."""


class ConversationNotFoundError(PersistenceError):
    """No conversation matches the given ID."""
