"""
Adapter for externally supplied extension providers.

Providers are duck-typed: any object answering ``name()``, ``description()``
and ``commands()`` is accepted, and each command handle must answer
``name()``, ``description()`` and ``execute(args)``. The Go-style spellings
(``Name``, ``Description``, ``Commands``, ``Execute``) are accepted as well, so
providers written against the original plugin interface keep working.

Probing happens once, at load time. The result is a frozen ``AdaptedExtension``
holding ``AdaptedCommand`` values; nothing downstream probes again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Protocol, runtime_checkable

from mcgraph.core.exceptions import CapabilityError, ExtensionError

logger = logging.getLogger(__name__)


@runtime_checkable
class Command(Protocol):
    """Capability contract for a single extension command."""

    def name(self) -> str: ...

    def description(self) -> str: ...

    def execute(self, args: list[str]) -> str: ...


@runtime_checkable
class Extension(Protocol):
    """Capability contract for an extension provider."""

    def name(self) -> str: ...

    def description(self) -> str: ...

    def commands(self) -> list[Command]: ...


_MISSING = object()


def _lookup(value: Any, capability: str) -> Any:
    """Find a capability by its Python or Go-style name."""
    for attr in (capability, capability[:1].upper() + capability[1:]):
        try:
            return getattr(value, attr)
        except AttributeError:
            continue
        except Exception as e:
            raise CapabilityError(capability, f"raised {type(e).__name__}: {e}") from e
    return _MISSING


def probe(
    value: Any,
    capability: str,
    *args: Any,
    expect: type | tuple[type, ...] | None = None,
    call_required: bool = False,
) -> Any:
    """Invoke a named capability on a value and check the result type.

    Args:
        value: The object being probed.
        capability: Capability name, e.g. "name" (also matches "Name").
        *args: Arguments passed when the capability is callable.
        expect: Required result type, or None to accept anything.
        call_required: If True, a plain attribute is rejected.

    Returns:
        The capability's result.

    Raises:
        CapabilityError: The capability is missing, raised, or returned the wrong type.
    """
    attr = _lookup(value, capability)
    if attr is _MISSING:
        raise CapabilityError(capability, "not implemented")

    if callable(attr):
        try:
            result = attr(*args)
        except CapabilityError:
            raise
        except Exception as e:
            raise CapabilityError(capability, f"raised {type(e).__name__}: {e}") from e
    elif call_required:
        raise CapabilityError(capability, "is not callable")
    else:
        result = attr

    if expect is not None and not isinstance(result, expect):
        expected = expect.__name__ if isinstance(expect, type) else "/".join(t.__name__ for t in expect)
        raise CapabilityError(
            capability, f"returned {type(result).__name__}, expected {expected}"
        )
    return result


def _normalize_handles(result: Any) -> list[Any]:
    """Turn whatever commands() returned into a list of opaque handles."""
    if isinstance(result, (str, bytes)):
        raise CapabilityError("commands", f"returned {type(result).__name__}, expected a sequence")
    if not isinstance(result, Iterable):
        raise CapabilityError("commands", f"returned {type(result).__name__}, expected a sequence")
    try:
        if isinstance(result, Mapping):
            return list(result.values())
        return list(result)
    except Exception as e:
        raise CapabilityError("commands", f"raised {type(e).__name__}: {e}") from e


def _unwrap_result(result: Any) -> str:
    """Interpret an execute() return value.

    Accepts a plain string, or a ``(result, error)`` pair where a non-None
    error means failure.
    """
    if isinstance(result, tuple) and len(result) == 2:
        output, error = result
        if error is not None:
            if isinstance(error, BaseException):
                raise error
            raise ExtensionError(str(error))
        result = output
    if not isinstance(result, str):
        raise CapabilityError("execute", f"returned {type(result).__name__}, expected str")
    return result


@dataclass(frozen=True)
class AdaptedCommand:
    """A command with its name and description resolved at load time."""

    command_name: str
    command_description: str
    handler: Callable[[list[str]], Any] = field(repr=False, compare=False)

    def name(self) -> str:
        return self.command_name

    def description(self) -> str:
        return self.command_description

    def execute(self, args: list[str]) -> str:
        return _unwrap_result(self.handler(list(args)))


@dataclass(frozen=True)
class AdaptedExtension:
    """An extension provider with its commands normalized at load time."""

    extension_name: str
    extension_description: str
    command_list: tuple[AdaptedCommand, ...] = ()
    source: Any = field(default=None, repr=False, compare=False)

    def name(self) -> str:
        return self.extension_name

    def description(self) -> str:
        return self.extension_description

    def commands(self) -> list[AdaptedCommand]:
        return list(self.command_list)


def adapt_command(value: Any) -> AdaptedCommand:
    """Probe a command handle and wrap it.

    Raises:
        CapabilityError: If name, description or execute is missing or mistyped.
    """
    if isinstance(value, AdaptedCommand):
        return value

    name = probe(value, "name", expect=str)
    description = probe(value, "description", expect=str)
    execute = _lookup(value, "execute")
    if execute is _MISSING:
        raise CapabilityError("execute", f"not implemented by command '{name}'")
    if not callable(execute):
        raise CapabilityError("execute", f"is not callable on command '{name}'")

    return AdaptedCommand(command_name=name, command_description=description, handler=execute)


def adapt_extension(value: Any) -> AdaptedExtension:
    """Probe an extension provider and wrap it with its commands.

    A provider missing name/description/commands is rejected with a
    CapabilityError. Individual commands that fail their probes are skipped
    with a warning; the rest of the provider still loads.
    """
    if isinstance(value, AdaptedExtension):
        return value

    name = probe(value, "name", expect=str)
    description = probe(value, "description", expect=str)
    handles = _normalize_handles(probe(value, "commands"))

    commands: list[AdaptedCommand] = []
    for handle in handles:
        try:
            commands.append(adapt_command(handle))
        except CapabilityError as e:
            logger.warning(f"Skipping command in extension '{name}': {e}")

    return AdaptedExtension(
        extension_name=name,
        extension_description=description,
        command_list=tuple(commands),
        source=value,
    )
