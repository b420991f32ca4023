"""
Built-in "system" extension.

Registered unconditionally whenever extensions are enabled, so there is always
something usable even with an empty extensions directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from mcgraph.core.exceptions import ExtensionError, FileTooLargeError

# Largest file the read command will return
MAX_READ_BYTES = 1024 * 1024


@dataclass(frozen=True)
class SimpleCommand:
    """A native command backed by a plain function."""

    command_name: str
    command_description: str
    func: Callable[[list[str]], str] = field(repr=False, compare=False)

    def name(self) -> str:
        return self.command_name

    def description(self) -> str:
        return self.command_description

    def execute(self, args: list[str]) -> str:
        return self.func(args)


def command_pwd(args: list[str]) -> str:
    """Print working directory."""
    return os.getcwd()


def command_ls(args: list[str]) -> str:
    """List a directory with entry sizes in bytes."""
    path = args[0] if args else "."

    try:
        entries = sorted(os.scandir(path), key=lambda e: e.name)
    except OSError as e:
        raise ExtensionError(f"cannot list {path}: {e.strerror or e}") from e

    lines = [f"Contents of {path}:"]
    for entry in entries:
        try:
            size = entry.stat().st_size
        except OSError:
            continue
        name = entry.name + "/" if entry.is_dir() else entry.name
        lines.append(f"{size:10d} {name}")

    return "\n".join(lines) + "\n"


def command_read(args: list[str]) -> str:
    """Read a whole file, refusing anything over MAX_READ_BYTES."""
    if not args:
        raise ExtensionError("please provide a file path")

    path = Path(args[0])
    try:
        size = path.stat().st_size
        if size > MAX_READ_BYTES:
            raise FileTooLargeError(str(path), size, MAX_READ_BYTES)
        data = path.read_bytes()
    except OSError as e:
        raise ExtensionError(f"cannot read {path}: {e.strerror or e}") from e

    # The file may have grown between stat and read
    if len(data) > MAX_READ_BYTES:
        raise FileTooLargeError(str(path), len(data), MAX_READ_BYTES)

    # Undecodable bytes survive a round trip through surrogateescape
    return data.decode("utf-8", errors="surrogateescape")


class SystemExtension:
    """Basic file system commands."""

    def __init__(self):
        self._commands = (
            SimpleCommand("ls", "List files in a directory", command_ls),
            SimpleCommand("pwd", "Print working directory", command_pwd),
            SimpleCommand("read", "Read file contents", command_read),
        )

    def name(self) -> str:
        return "system"

    def description(self) -> str:
        return "Basic system commands"

    def commands(self) -> list[SimpleCommand]:
        return list(self._commands)
