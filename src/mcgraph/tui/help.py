"""Help text for the /help command."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcgraph.extensions import ExtensionRegistry

BUILTIN_COMMANDS = [
    ("/summarize", "Generate a summary of the current conversation"),
    ("/help", "Show this help message"),
]

KEYBOARD_SHORTCUTS = [
    ("Enter", "Send the message"),
    ("Alt+Enter", "Insert a new line in the input field"),
    ("Ctrl+C", "Quit the application"),
]


def build_help_text(registry: "ExtensionRegistry | None") -> str:
    """Markdown help listing extension commands, built-ins and shortcuts."""
    lines: list[str] = []

    if registry is None or not registry.is_enabled:
        lines.append("# Extensions are disabled\n")
        lines.append("Extensions can be enabled using the command:")
        lines.append("```\nmcg ext enable\n```\n")
    else:
        lines.append("# Available Extension Commands\n")
        extensions = sorted(registry.list_extensions(), key=lambda e: e.name())
        if not extensions:
            lines.append("No extensions are installed.")
            lines.append(
                f"Extensions should be placed in {registry.extensions_dir} "
                "as .py files or packages.\n"
            )
        for ext in extensions:
            lines.append(f"## /{ext.name()} - {ext.description()}\n")
            commands = registry.commands_for(ext.name())
            if not commands:
                lines.append("No commands available for this extension.\n")
                continue
            for cmd_name in sorted(commands):
                lines.append(f"- `/{ext.name()} {cmd_name}` - {commands[cmd_name].description()}")
            lines.append("")

    lines.append("## Built-in Commands\n")
    for usage, description in BUILTIN_COMMANDS:
        lines.append(f"- `{usage}` - {description}")

    lines.append("\n## Keyboard Shortcuts\n")
    for keys, description in KEYBOARD_SHORTCUTS:
        lines.append(f"- `{keys}` - {description}")

    return "\n".join(lines) + "\n"
