"""Transport registry.

Maps transport name -> transport instance and enforces that a name is attached
at most once. Transports are released (`close()`) when they are removed, not
when the owning logger is garbage collected.

A transport is any object exposing:

- `name: str`
- `level: str | None` (optional per-transport threshold)
- `log(level, message, metadata)` returning None, raising, or returning an awaitable
- `close()` (optional)
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Protocol, runtime_checkable

import structlog

from .errors import ConfigurationError, DuplicateTransportError, FanlogError, NotRegisteredError

_log = structlog.get_logger(__name__)


@runtime_checkable
class Transport(Protocol):
    name: str

    def log(self, level: str, message: str, metadata: dict[str, Any]) -> Any:
        """Deliver one record; raise (or return a failing awaitable) on failure."""


# Catalog of named transport types, e.g. "console" -> ConsoleTransport.
_TRANSPORT_TYPES: dict[str, type] = {}


def register_transport_type(name: str, cls: type) -> None:
    """Make `cls` resolvable by `name` in `add`/`remove`."""
    if not callable(getattr(cls, "log", None)):
        raise ConfigurationError(f"Transport type {name!r} has no log() method")
    _TRANSPORT_TYPES[name] = cls


def transport_types() -> Mapping[str, type]:
    """Snapshot of the named transport catalog."""
    return dict(_TRANSPORT_TYPES)


def find_transport(value: Any) -> str | None:
    """Resolve the catalog name of a transport type name or class.

    Returns None for instances and for classes that were never registered.
    """
    if isinstance(value, str):
        return value if value in _TRANSPORT_TYPES else None
    if isinstance(value, type):
        for name, cls in _TRANSPORT_TYPES.items():
            if cls is value:
                return name
    return None


def _has_log(value: Any) -> bool:
    return callable(getattr(value, "log", None))


class TransportRegistry:
    """Owns the name -> transport mapping for one logger."""

    def __init__(self) -> None:
        self._transports: dict[str, Any] = {}

    def __len__(self) -> int:
        return len(self._transports)

    def __contains__(self, name: object) -> bool:
        return name in self._transports

    def __iter__(self) -> Iterator[Any]:
        # Iterate a snapshot so add/remove during a fan-out never trips iteration.
        return iter(list(self._transports.values()))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._transports)

    def get(self, name: str) -> Any | None:
        return self._transports.get(name)

    def add(self, transport: Any, options: Mapping[str, Any] | None = None) -> TransportRegistry:
        """Attach a transport given as a catalog name, a class, or an instance.

        Classes (and catalog names) are instantiated with `**options`.

        Raises:
        - `ConfigurationError` if the value cannot be resolved to a transport.
        - `DuplicateTransportError` if its name is already attached.
        """
        name = find_transport(transport)

        if isinstance(transport, str):
            if name is None:
                raise ConfigurationError(f"Unknown transport type: {transport!r}")
            transport = _TRANSPORT_TYPES[name]

        if name is None and not _has_log(transport):
            raise ConfigurationError("Unknown transport with no log() method")
        if name is not None and name in self._transports:
            raise DuplicateTransportError(name)

        if isinstance(transport, type):
            try:
                instance = transport(**dict(options or {}))
            except TypeError as exc:
                raise ConfigurationError(f"Cannot construct transport {transport.__name__}: {exc}") from exc
        else:
            if options:
                raise ConfigurationError("options only apply when adding a transport class")
            instance = transport

        instance_name = getattr(instance, "name", None)
        try:
            if not isinstance(instance_name, str) or not instance_name:
                raise ConfigurationError(f"Transport {instance!r} must declare a non-empty string name")
            if instance_name in self._transports:
                raise DuplicateTransportError(instance_name)
        except FanlogError:
            # Release what was built here; caller-owned instances are left alone.
            close = getattr(instance, "close", None)
            if instance is not transport and callable(close):
                close()
            raise

        self._transports[instance_name] = instance
        _log.debug("transport_added", transport=instance_name, level=getattr(instance, "level", None))
        return self

    def remove(self, transport: Any) -> TransportRegistry:
        """Detach a transport (by name, class, or instance) and close it.

        Raises `NotRegisteredError` if nothing is attached under the resolved name.
        """
        if isinstance(transport, str):
            name: str | None = transport
        else:
            name = find_transport(transport) or getattr(transport, "name", None)

        if name is None or name not in self._transports:
            raise NotRegisteredError(name)

        instance = self._transports.pop(name)
        close = getattr(instance, "close", None)
        if callable(close):
            close()
        _log.debug("transport_removed", transport=name)
        return self

    def clear(self) -> None:
        """Remove every transport, closing each one."""
        for name in list(self._transports):
            self.remove(name)
