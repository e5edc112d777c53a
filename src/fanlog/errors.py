"""Error taxonomy for the dispatcher.

Registry mistakes (`ConfigurationError`, `DuplicateTransportError`,
`NotRegisteredError`) are raised to the caller of `add`/`remove`. Dispatch
validation errors (`NoTransportsError`, `UnknownLevelError`) are delivered to
the dispatch callback instead. `TransportError` wraps whatever a transport
reports when it fails to log a record.
"""

from __future__ import annotations


class FanlogError(RuntimeError):
    """Base class for all errors raised or reported by fanlog."""


class ConfigurationError(FanlogError):
    """A transport value (or logger option) could not be resolved or is invalid."""


class DuplicateTransportError(FanlogError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Transport already attached: {name}")


class NotRegisteredError(FanlogError):
    def __init__(self, name: str | None) -> None:
        self.name = name
        super().__init__(f"Transport {name} not attached to this instance")


class NoTransportsError(FanlogError):
    def __init__(self) -> None:
        super().__init__("Cannot log with no transports.")


class UnknownLevelError(FanlogError):
    def __init__(self, level: str) -> None:
        self.level = level
        super().__init__(f"Unknown log level: {level}")


class TransportError(FanlogError):
    """A failure reported by a transport while logging a single record."""

    def __init__(self, transport_name: str, message: str) -> None:
        """Create an error naming the transport that failed."""
        self.transport_name = transport_name
        super().__init__(f"{transport_name}: {message}")
