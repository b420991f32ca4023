"""
mcgraph - terminal chat assistant for coding questions

A full-screen chat UI in front of several LLM providers, with local
/<extension> commands that run without calling the model.

Example usage:
    from mcgraph import ChatSession, ExtensionRegistry
    from mcgraph.tui.events import Submit

    registry = ExtensionRegistry()
    registry.register_builtins()

    session = ChatSession(registry=registry)
    effects = session.handle(Submit("/system pwd"))

    # Run it in a terminal (requires an API key for the provider)
    from mcgraph import ChatApp
    from mcgraph.llm import get_provider

    ChatApp(session, get_provider("openai")).run()
"""

__version__ = "0.1.0"

# Core exports
from mcgraph.core import (
    ExtensionError,
    McGraphError,
    PersistenceError,
    ProviderError,
)
from mcgraph.extensions import ExtensionRegistry
from mcgraph.tui import ChatMessage, ChatSession


# Lazy import for ChatApp (builds the prompt_toolkit application)
def __getattr__(name):
    if name == "ChatApp":
        from mcgraph.tui.app import ChatApp
        return ChatApp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    # Errors
    "McGraphError",
    "ExtensionError",
    "ProviderError",
    "PersistenceError",
    # Session
    "ChatMessage",
    "ChatSession",
    "ExtensionRegistry",
    # UI (lazy loaded)
    "ChatApp",
]
