"""
Core module for the mcgraph package.

Holds the error taxonomy shared by extensions, providers and the store.
"""

from mcgraph.core.exceptions import (
    CapabilityError,
    CommandNotFoundError,
    ConversationNotFoundError,
    ExtensionError,
    ExtensionLoadError,
    ExtensionNotFoundError,
    ExtensionsDisabledError,
    FileTooLargeError,
    McGraphError,
    PersistenceError,
    ProviderConfigError,
    ProviderError,
)

__all__ = [
    "McGraphError",
    # Extensions
    "ExtensionError",
    "CapabilityError",
    "ExtensionsDisabledError",
    "ExtensionNotFoundError",
    "CommandNotFoundError",
    "ExtensionLoadError",
    "FileTooLargeError",
    # Providers
    "ProviderError",
    "ProviderConfigError",
    # Persistence
    "PersistenceError",
    "ConversationNotFoundError",
]
