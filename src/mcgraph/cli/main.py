#!/usr/bin/env python3
"""
CLI entry point for mcgraph (mcg command).

Chat in a full-screen terminal UI, ask one-shot questions, browse saved
conversations, and manage extensions, providers and settings.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Optional

from mcgraph import __version__
from mcgraph.core.exceptions import McGraphError

GREY = "\033[90m"
RESET = "\033[0m"


def _feedback(msg: str) -> None:
    """Print feedback message in grey to stderr."""
    print(f"{GREY}{msg}{RESET}", file=sys.stderr)


def _setup_logging(level: Optional[str], stderr: bool) -> None:
    from mcgraph.logging import configure_logging

    configure_logging(level or "INFO", stderr=stderr)


def _parse_setting(text: str) -> tuple[str, Optional[str]]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected key=value, got '{text}'")
    value = value.strip()
    # Empty value or "null" clears the setting
    return key.strip(), (None if value in ("", "null", "none") else value)


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

def cmd_chat(args):
    """Start the interactive chat UI."""
    from mcgraph.config import get_config
    from mcgraph.extensions import ExtensionRegistry, load_extensions_config
    from mcgraph.llm import get_provider
    from mcgraph.store import ConversationStore
    from mcgraph.tui import ChatApp, ChatMessage, ChatSession
    from mcgraph.tui.state import welcome_back_message, welcome_message

    config = get_config()
    _setup_logging(config.get("log_level"), stderr=False)

    llm_name = (args.llm or config.get("llm")).lower()
    provider = get_provider(llm_name, config)

    enabled = load_extensions_config().enabled and not args.no_extensions
    registry = ExtensionRegistry(enabled=enabled)
    registry.load_extensions()

    store = ConversationStore()
    history = None
    if args.continue_id:
        conversation = store.find_conversation(args.continue_id)
        history = [ChatMessage.assistant(welcome_back_message(llm_name, conversation.title), animate=False)]
        history += [
            ChatMessage.restored(m.content, is_user=m.is_user, timestamp=m.created_at)
            for m in conversation.messages
        ]
    else:
        conversation = store.create_conversation(model=llm_name)

    session = ChatSession(
        registry=registry,
        conversation_id=conversation.id,
        history=history,
        welcome=welcome_message(llm_name),
        assistant_name=config.get("assistant_name"),
        typing_step=config.get("typing_speed"),
    )
    app = ChatApp(
        session,
        provider,
        store=store,
        typing_interval_ms=config.get("typing_interval_ms"),
        thinking_interval_ms=config.get("thinking_interval_ms"),
        request_timeout=config.get("request_timeout"),
    )
    app.run()
    _feedback(f"Conversation saved: {conversation.id[:8]} (mcg chat -c {conversation.id[:8]})")


def cmd_ask(args):
    """Answer a single question and save it as a conversation."""
    from mcgraph.config import get_config
    from mcgraph.llm import get_provider
    from mcgraph.store import ConversationStore

    config = get_config()
    _setup_logging(config.get("log_level"), stderr=True)

    question = " ".join(args.question).strip()
    if not question:
        raise McGraphError("please provide a question")

    llm_name = (args.llm or config.get("llm")).lower()
    provider = get_provider(llm_name, config)
    store = ConversationStore()
    conversation = store.create_conversation(model=llm_name)
    store.add_message(conversation.id, "user", question)
    store.generate_title(conversation.id)

    _feedback(f"Asking {llm_name}...")
    answer = provider.get_response(question)
    store.add_message(conversation.id, "assistant", answer)
    print(answer)


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------

def cmd_list(args):
    """List saved conversations."""
    from mcgraph.store import ConversationStore

    conversations = ConversationStore().list_conversations()
    if args.as_json:
        print(json.dumps(
            [
                {
                    "id": c.id,
                    "title": c.title,
                    "model": c.model,
                    "messages": len(c.messages),
                    "updated_at": c.updated_at.isoformat(),
                }
                for c in conversations
            ],
            indent=2,
        ))
        return

    if not conversations:
        print("No conversations yet. Start one with: mcg chat")
        return

    print("\nConversations:")
    for c in conversations:
        updated = c.updated_at.strftime("%Y-%m-%d %H:%M")
        print(f"  {c.short_id}  {updated}  {c.title}  ({len(c.messages)} messages)")
    print()


def cmd_history(args):
    """Print a saved conversation."""
    from mcgraph.config import get_config
    from mcgraph.store import ConversationStore
    from mcgraph.tui import ChatMessage
    from mcgraph.tui.render import render_plain

    conversation = ConversationStore().find_conversation(args.id)
    print(f"\n{conversation.title} ({conversation.id})\n")
    messages = [
        ChatMessage.restored(m.content, is_user=m.is_user, timestamp=m.created_at)
        for m in conversation.messages
    ]
    if not messages:
        print("(no messages)")
        return
    width = min(os.get_terminal_size(sys.stdout.fileno()).columns, 100) if sys.stdout.isatty() else 60
    print(render_plain(messages, width, get_config().get("assistant_name")))


def cmd_delete(args):
    """Delete a saved conversation."""
    from mcgraph.store import ConversationStore

    store = ConversationStore()
    conversation = store.find_conversation(args.id)
    store.delete_conversation(conversation.id)
    print(f"Deleted conversation {conversation.short_id}: {conversation.title}")


# ---------------------------------------------------------------------------
# Extensions
# ---------------------------------------------------------------------------

def cmd_ext(args):
    """Enable, disable or list extensions."""
    from mcgraph.extensions import (
        ExtensionRegistry,
        load_extensions_config,
        save_extensions_config,
    )

    ext_config = load_extensions_config()
    action = args.action or "list"

    if action in ("enable", "disable"):
        ext_config.enabled = action == "enable"
        path = save_extensions_config(ext_config)
        print(f"Extensions {action}d ({path})")
        return

    _setup_logging("WARNING", stderr=True)
    registry = ExtensionRegistry(enabled=ext_config.enabled)
    if not registry.is_enabled:
        print("Extensions are disabled. Enable them with: mcg ext enable")
        return

    registry.load_extensions()
    print(f"\nExtensions (from {registry.extensions_dir}):")
    for ext in sorted(registry.list_extensions(), key=lambda e: e.name()):
        print(f"  /{ext.name()} - {ext.description()}")
        commands = registry.commands_for(ext.name())
        for name in sorted(commands):
            print(f"    {name}: {commands[name].description()}")
    print()


# ---------------------------------------------------------------------------
# Providers and settings
# ---------------------------------------------------------------------------

def cmd_llms(args):
    """List available LLM providers."""
    from mcgraph.config import get_config
    from mcgraph.llm import AVAILABLE_PROVIDERS, api_key_env_var

    config = get_config()
    current = config.get("llm")
    print("\nAvailable LLMs:")
    for name in AVAILABLE_PROVIDERS:
        marker = "*" if name == current else " "
        env_var = api_key_env_var(name)
        if env_var:
            status = "ready" if os.environ.get(env_var) else f"needs {env_var}"
        else:
            status = "ready" if config.get("model_path") else "needs model_path"
        model = config.get(f"{name}_model") or config.get("model_path") or ""
        print(f"  {marker} {name:<10} {model:<30} {status}")
    print()


def cmd_pick(args):
    """Set the default LLM provider."""
    from mcgraph.config import get_config_manager
    from mcgraph.llm import AVAILABLE_PROVIDERS, api_key_env_var

    name = args.name.lower()
    if name not in AVAILABLE_PROVIDERS:
        raise McGraphError(
            f"invalid LLM type: {name} (available: {', '.join(AVAILABLE_PROVIDERS)})"
        )
    get_config_manager().set("llm", name)
    print(f"Now using {name} as the active LLM.")
    env_var = api_key_env_var(name)
    if env_var:
        print(f"Make sure you have set the {env_var} environment variable.")


def cmd_config(args):
    """Show or change settings."""
    from mcgraph.config import get_config_manager

    manager = get_config_manager()
    if args.reset:
        manager.reset()
        _feedback(f"Removed {manager.CONFIG_FILE}")
    try:
        for key, value in args.set or []:
            manager.set(key, value)
            _feedback(f"Set {key} = {value}")
        for key in args.unset or []:
            manager.unset(key)
            _feedback(f"Unset {key}")
    except ValueError as e:
        raise McGraphError(str(e)) from e

    print(f"\nSettings ({manager.CONFIG_FILE}):")
    for key, value in manager.list_settings().items():
        print(f"  {key}: {value}")
    print()


def cmd_version(args):
    """Print the version."""
    print(f"mcgraph {__version__}")


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcg",
        description="McGraph - a terminal coding assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    mcg chat                    Start a new conversation
    mcg chat -c 1a2b3c4d        Continue a saved conversation
    mcg ask how do I reverse a list in Go
    mcg ext enable              Allow /<extension> commands in chat
    mcg pick claude             Use Claude by default
        """,
    )
    parser.add_argument("--version", action="version", version=f"mcgraph {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # chat command
    chat_parser = subparsers.add_parser("chat", help="Start the interactive chat UI")
    chat_parser.add_argument(
        "--continue", "-c", dest="continue_id", metavar="ID",
        help="Continue a saved conversation (full or short ID)",
    )
    chat_parser.add_argument("--llm", help="LLM provider to use for this session")
    chat_parser.add_argument(
        "--no-extensions", action="store_true", help="Disable extensions for this session"
    )
    chat_parser.set_defaults(func=cmd_chat)

    # ask command
    ask_parser = subparsers.add_parser("ask", help="Ask a single question")
    ask_parser.add_argument("question", nargs="+", help="The question")
    ask_parser.add_argument("--llm", help="LLM provider to use")
    ask_parser.set_defaults(func=cmd_ask)

    # list command
    list_parser = subparsers.add_parser("list", help="List saved conversations")
    list_parser.add_argument(
        "--json", action="store_true", dest="as_json", help="Output as JSON"
    )
    list_parser.set_defaults(func=cmd_list)

    # history command
    history_parser = subparsers.add_parser("history", help="Print a saved conversation")
    history_parser.add_argument("id", help="Conversation ID (full or short)")
    history_parser.set_defaults(func=cmd_history)

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a saved conversation")
    delete_parser.add_argument("id", help="Conversation ID (full or short)")
    delete_parser.set_defaults(func=cmd_delete)

    # ext command
    ext_parser = subparsers.add_parser("ext", help="Manage extensions")
    ext_parser.add_argument(
        "action", nargs="?", choices=["list", "enable", "disable"], help="Default: list"
    )
    ext_parser.set_defaults(func=cmd_ext)

    # llms command
    llms_parser = subparsers.add_parser("llms", help="List available LLM providers")
    llms_parser.set_defaults(func=cmd_llms)

    # pick command
    pick_parser = subparsers.add_parser("pick", help="Set the default LLM provider")
    pick_parser.add_argument("name", help="Provider name (see mcg llms)")
    pick_parser.set_defaults(func=cmd_pick)

    # config command
    config_parser = subparsers.add_parser("config", help="Show or change settings")
    config_parser.add_argument(
        "--set", metavar="KEY=VALUE", action="append", type=_parse_setting,
        help="Set a value (can repeat)",
    )
    config_parser.add_argument(
        "--unset", metavar="KEY", action="append", help="Reset a value to its default (can repeat)"
    )
    config_parser.add_argument(
        "--reset", action="store_true", help="Delete config.json and go back to all defaults"
    )
    config_parser.set_defaults(func=cmd_config)

    # version command
    version_parser = subparsers.add_parser("version", help="Print the version")
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the mcg CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Default to 'chat' if no command given
    if args.command is None:
        args = parser.parse_args(["chat"])

    try:
        args.func(args)
    except McGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
