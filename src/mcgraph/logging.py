"""Logging configuration for mcgraph.

The chat UI owns the terminal, so logs go to ~/.mcgraph/logs/mcgraph.log.
One-shot commands additionally echo warnings to stderr in grey.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from mcgraph.config import MCGRAPH_DIR

# Directory for log files
LOGS_DIR = MCGRAPH_DIR / "logs"
LOG_FILE = LOGS_DIR / "mcgraph.log"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

GREY = "\033[90m"
RESET = "\033[0m"

# Handlers installed by configure_logging, replaced on reconfiguration
_handlers: list[logging.Handler] = []


class GreyFormatter(logging.Formatter):
    """Plain one-line records in grey."""

    def format(self, record: logging.LogRecord) -> str:
        return f"{GREY}[{record.levelname.lower()}] {record.getMessage()}{RESET}"


def _parse_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    stderr: bool = False,
) -> Optional[Path]:
    """Attach mcgraph's handlers to the ``mcgraph`` logger.

    Args:
        level: Level for the log file.
        log_file: Log file path (default ~/.mcgraph/logs/mcgraph.log).
        stderr: Also print warnings and errors to stderr (not for the TUI).

    Returns:
        The log file path, or None if it could not be opened.
    """
    close_logging()
    root = logging.getLogger("mcgraph")

    file_level = _parse_level(level)
    root.setLevel(min(file_level, logging.WARNING) if stderr else file_level)
    log_file = Path(log_file or LOG_FILE)
    path = None
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    except OSError as e:
        print(f"{GREY}Cannot open log file {log_file}: {e}{RESET}", file=sys.stderr)
    else:
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
        _handlers.append(handler)
        path = log_file

    if stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(logging.WARNING)
        console.setFormatter(GreyFormatter())
        root.addHandler(console)
        _handlers.append(console)

    return path


def close_logging() -> None:
    """Detach and close the handlers installed by configure_logging."""
    root = logging.getLogger("mcgraph")
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()
