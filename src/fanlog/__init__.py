"""Fan-out logging dispatcher.

One logical log call is broadcast to a dynamic set of named transports, each
filtered by severity, with per-transport outcomes aggregated into a single
completion callback. See `fanlog.logger.Logger`.
"""

from .config import LoggerConfig, load_config
from .errors import (
    ConfigurationError,
    DuplicateTransportError,
    FanlogError,
    NoTransportsError,
    NotRegisteredError,
    TransportError,
    UnknownLevelError,
)
from .events import EventChannel
from .levels import CLI_LEVELS, NPM_LEVELS, SYSLOG_LEVELS, SeverityTable
from .logger import Logger
from .models import DispatchOutcome, LogRecord, TransportFailure
from .registry import Transport, TransportRegistry, find_transport, register_transport_type
from .transports import ConsoleTransport, DuckDBTransport, InMemoryTransport

__all__ = [
    "CLI_LEVELS",
    "ConfigurationError",
    "ConsoleTransport",
    "DispatchOutcome",
    "DuckDBTransport",
    "DuplicateTransportError",
    "EventChannel",
    "FanlogError",
    "InMemoryTransport",
    "LogRecord",
    "Logger",
    "LoggerConfig",
    "NPM_LEVELS",
    "NoTransportsError",
    "NotRegisteredError",
    "SYSLOG_LEVELS",
    "SeverityTable",
    "Transport",
    "TransportError",
    "TransportFailure",
    "TransportRegistry",
    "UnknownLevelError",
    "find_transport",
    "load_config",
    "register_transport_type",
]
