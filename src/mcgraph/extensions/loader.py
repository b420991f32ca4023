"""
Extension loader - discovers and loads provider bundles from the user dir.

Extensions are loaded from ~/.mcgraph/extensions/. A bundle is either a single
``<name>.py`` file or a ``<name>/__init__.py`` package. The bundle must expose
an ``Extension`` symbol: an instance, a class, or a zero-argument factory.

    # ~/.mcgraph/extensions/greet.py
    class Greet:
        def name(self):
            return "greet"

        def description(self):
            return "Say hello"

        def execute(self, args):
            return "Hello, " + (" ".join(args) or "world") + "!"

    class GreetExtension:
        def name(self):
            return "hello"

        def description(self):
            return "Greeting commands"

        def commands(self):
            return [Greet()]

    Extension = GreetExtension()

Loading is a delivery mechanism only: whatever the module exposes is handed
to the adapter, which enforces the capability contract.
"""

from __future__ import annotations

import inspect
import logging
import sys
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from typing import Any

from mcgraph.config import MCGRAPH_DIR
from mcgraph.core.exceptions import ExtensionLoadError

logger = logging.getLogger(__name__)

# Default user extensions directory
USER_EXTENSIONS_DIR = MCGRAPH_DIR / "extensions"

# Symbol each bundle must export (lowercase accepted as an alias)
ENTRY_POINT = "Extension"
ENTRY_POINT_ALIASES = (ENTRY_POINT, "extension")


def discover_extensions(extensions_dir: Path) -> list[Path]:
    """
    Discover extension bundles in the given path.

    Args:
        extensions_dir: Directory to search

    Returns:
        Sorted list of bundle paths (.py files or package __init__.py files).
    """
    if not extensions_dir.exists():
        return []

    if not extensions_dir.is_dir():
        logger.warning(f"Extensions path is not a directory: {extensions_dir}")
        return []

    bundles = []
    for entry in sorted(extensions_dir.iterdir()):
        # Skip hidden and private entries
        if entry.name.startswith((".", "_")):
            continue
        if entry.is_dir():
            init_file = entry / "__init__.py"
            if init_file.exists():
                bundles.append(init_file)
            else:
                logger.debug(f"Skipping {entry.name}: no __init__.py")
        elif entry.suffix == ".py":
            bundles.append(entry)

    return bundles


def bundle_name(path: Path) -> str:
    """Name of a bundle as shown in log messages."""
    return path.parent.name if path.name == "__init__.py" else path.stem


def _import_bundle(path: Path, prefix: str) -> Any:
    module_name = f"{prefix}.{bundle_name(path)}"
    spec = spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ExtensionLoadError(str(path), "could not create module spec")

    module = module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except SyntaxError as e:
        sys.modules.pop(module_name, None)
        raise ExtensionLoadError(str(path), f"syntax error: {e}") from e
    except ImportError as e:
        sys.modules.pop(module_name, None)
        raise ExtensionLoadError(str(path), f"import error: {e}") from e
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise ExtensionLoadError(str(path), f"error: {e}") from e
    return module


def load_bundle(path: Path, prefix: str = "mcgraph_ext") -> Any:
    """
    Import a bundle and resolve its entry point.

    Args:
        path: Path to the bundle (.py file or package __init__.py).
        prefix: Module name prefix for sys.modules

    Returns:
        The provider object exported by the bundle (not yet adapted).

    Raises:
        ExtensionLoadError: If the bundle can't be imported or has no entry point.
    """
    module = _import_bundle(path, prefix)

    for symbol in ENTRY_POINT_ALIASES:
        provider = getattr(module, symbol, None)
        if provider is not None:
            break
    else:
        raise ExtensionLoadError(str(path), f"bundle does not export '{ENTRY_POINT}'")

    # Classes and factories are instantiated; instances are used as-is
    if inspect.isclass(provider) or inspect.isfunction(provider):
        try:
            provider = provider()
        except Exception as e:
            raise ExtensionLoadError(str(path), f"'{ENTRY_POINT}' factory failed: {e}") from e

    return provider
