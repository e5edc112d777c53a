"""Fan-out logger.

A single `log` call is broadcast to every registered transport whose threshold
admits the record's level. Each transport settles independently (synchronously
or, when its `log` returns an awaitable, later on the running event loop) and
the per-transport outcomes are folded into one completion callback:

    callback(errors, level, message, metadata)

where `errors` is None when every eligible transport succeeded, otherwise a
list of `TransportFailure`. Dispatch validation errors (`NoTransportsError`,
`UnknownLevelError`) are passed to the callback in the `errors` position
instead of being raised.

The logger also provides:
- one shortcut per severity level (`logger.info(...)`, `logger.warn(...)`, ...),
  generated at construction from the severity table;
- `profile(id, ...)`, a named interval timer that logs the elapsed time at
  "info" on the second call;
- `log`/`error` events via `on`/`once`/`off`/`subscribe`.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

import structlog

from .config import LoggerConfig
from .errors import ConfigurationError, FanlogError, NoTransportsError, TransportError, UnknownLevelError
from .events import EventChannel, EventName, Handler
from .levels import NAMED_TABLES, NPM_LEVELS, SeverityTable
from .models import DispatchCallback, DispatchOutcome, TransportFailure
from .registry import TransportRegistry

_log = structlog.get_logger(__name__)

PROFILE_LEVEL = "info"


def _normalize(metadata: Any, callback: DispatchCallback | None) -> tuple[Any, DispatchCallback | None]:
    """Apply the `(message, [metadata], [callback])` call-shape rules.

    - a callable in the metadata position with no callback is the callback
      (metadata becomes `{}`);
    - missing metadata becomes a fresh `{}`.
    """
    if callback is None and callable(metadata):
        return {}, metadata
    if metadata is None:
        metadata = {}
    return metadata, callback


def _as_transport_error(transport: Any, exc: BaseException) -> TransportError:
    if isinstance(exc, TransportError):
        return exc
    err = TransportError(_transport_name(transport), str(exc) or type(exc).__name__)
    err.__cause__ = exc
    return err


def _transport_name(transport: Any) -> str:
    return str(getattr(transport, "name", None) or type(transport).__name__)


class _Dispatch:
    """Aggregation state for one fan-out; lives until every transport settles."""

    def __init__(
        self,
        logger: Logger,
        *,
        total: int,
        level: str,
        message: Any,
        metadata: Any,
        callback: DispatchCallback | None,
    ) -> None:
        self._logger = logger
        self.total = total
        self.level = level
        self.message = message
        self.metadata = metadata
        self._callback = callback
        self._settled: set[str] = set()
        self.failures: list[TransportFailure] = []

    def settle(self, transport: Any, error: BaseException | None) -> None:
        """Record one transport's outcome; the first report per transport wins."""
        name = _transport_name(transport)
        if name in self._settled:
            _log.warning("transport_settled_twice", transport=name, level=self.level)
            return
        self._settled.add(name)

        events = self._logger.events
        if error is not None:
            self.failures.append(TransportFailure(error=error, transport=transport))
            if self._logger.emit_errors:
                events.emit("error", error, transport)
        events.emit("log", transport, self.level, self.message, self.metadata)

        if len(self._settled) == self.total and self._callback is not None:
            errors = list(self.failures) if self.failures else None
            self._callback(errors, self.level, self.message, self.metadata)


class Logger:
    """Dispatches log records to a dynamic set of named transports."""

    def __init__(
        self,
        *,
        level: str = "info",
        levels: Mapping[str, int] = NPM_LEVELS,
        transports: Iterable[Any] = (),
        emit_errors: bool | None = None,
        profiler_ttl_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create a logger.

        Args:
            level: Threshold for transports that do not declare their own level.
            levels: Severity table (lower rank = more severe).
            transports: Transport instances (or classes / catalog names) to attach.
            emit_errors: Emit `error` events for transport failures. None means True.
            profiler_ttl_s: Evict unmatched profiler entries older than this many seconds.
            clock: Monotonic seconds source used by `profile`.
        """
        self.levels = levels if isinstance(levels, SeverityTable) else SeverityTable(levels)
        self.level = level
        self.emit_errors = True if emit_errors is None else emit_errors
        self.profiler_ttl_s = profiler_ttl_s
        self.events = EventChannel()
        self.transports = TransportRegistry()

        self._clock = clock
        self._profilers: dict[str, float] = {}
        self._pending: set[asyncio.Task[None]] = set()

        try:
            for transport in transports:
                self.transports.add(transport)
            self._install_shortcuts()
        except Exception:
            self.transports.clear()
            raise

    @classmethod
    def from_config(cls, config: LoggerConfig, *, transports: Iterable[Any] = (), **kwargs: Any) -> Logger:
        """Build a logger from a validated `LoggerConfig`."""
        return cls(
            level=config.level,
            levels=NAMED_TABLES[config.levels],
            transports=transports,
            emit_errors=config.effective_emit_errors,
            profiler_ttl_s=config.profiler_ttl_s,
            **kwargs,
        )

    @property
    def level(self) -> str:
        return self._level

    @level.setter
    def level(self, value: str) -> None:
        if value not in self.levels:
            raise UnknownLevelError(value)
        self._level = value

    def _install_shortcuts(self) -> None:
        for name in self.levels.names:
            if hasattr(self, name):
                raise ConfigurationError(f"Level name {name!r} collides with a Logger attribute")
            setattr(self, name, self._make_shortcut(name))

    def _make_shortcut(self, level: str) -> Callable[..., Logger]:
        def shortcut(
            message: Any, metadata: Any = None, callback: DispatchCallback | None = None
        ) -> Logger:
            return self.log(level, message, metadata, callback)

        shortcut.__name__ = shortcut.__qualname__ = level
        shortcut.__doc__ = f"Log `message` at level {level!r}; same arguments as `Logger.log`."
        return shortcut

    # -- transports ---------------------------------------------------------

    def add(self, transport: Any, options: Mapping[str, Any] | None = None) -> Logger:
        """Attach a transport; see `TransportRegistry.add`."""
        self.transports.add(transport, options)
        return self

    def remove(self, transport: Any) -> Logger:
        """Detach and close a transport; see `TransportRegistry.remove`."""
        self.transports.remove(transport)
        return self

    def close(self) -> None:
        """Detach every transport, running each one's `close()`."""
        self.transports.clear()

    # -- events -------------------------------------------------------------

    def on(self, event: EventName, handler: Handler) -> Logger:
        self.events.on(event, handler)
        return self

    def once(self, event: EventName, handler: Handler) -> Logger:
        self.events.once(event, handler)
        return self

    def off(self, event: EventName, handler: Handler) -> Logger:
        self.events.off(event, handler)
        return self

    def subscribe(self, event: EventName) -> asyncio.Queue[tuple[Any, ...]]:
        return self.events.subscribe(event)

    # -- dispatch -----------------------------------------------------------

    def is_eligible(self, transport: Any, level: str) -> bool:
        """True if `transport` should receive a record at `level`."""
        threshold = getattr(transport, "level", None) or self.level
        if threshold not in self.levels:
            _log.warning("transport_level_unknown", transport=_transport_name(transport), level=threshold)
            return False
        return self.levels.is_at_least(level, threshold)

    def log(
        self,
        level: str,
        message: Any,
        metadata: Any = None,
        callback: DispatchCallback | None = None,
    ) -> Logger:
        """Fan a record out to every eligible transport.

        Returns immediately; asynchronous transports settle later and the
        aggregated outcome is reported through `callback`.
        """
        metadata, callback = _normalize(metadata, callback)

        if len(self.transports) == 0:
            return self._reject(NoTransportsError(), level, message, metadata, callback)
        if level not in self.levels:
            return self._reject(UnknownLevelError(level), level, message, metadata, callback)

        eligible = [t for t in self.transports if self.is_eligible(t, level)]
        if not eligible:
            # Nothing to wait for: report success now rather than never.
            if callback is not None:
                callback(None, level, message, metadata)
            return self

        dispatch = _Dispatch(
            self, total=len(eligible), level=level, message=message, metadata=metadata, callback=callback
        )
        for transport in eligible:
            self._invoke(transport, dispatch)
        return self

    async def log_async(self, level: str, message: Any, metadata: Any = None) -> DispatchOutcome:
        """Dispatch a record and wait for every eligible transport to settle."""
        fut: asyncio.Future[DispatchOutcome] = asyncio.get_running_loop().create_future()

        def _done(errors: Any, level: str, message: Any, metadata: Any) -> None:
            if fut.done():
                return
            if isinstance(errors, FanlogError):
                outcome = DispatchOutcome(rejected=errors, level=level, message=message, metadata=metadata)
            else:
                outcome = DispatchOutcome(errors=errors, level=level, message=message, metadata=metadata)
            fut.set_result(outcome)

        self.log(level, message, metadata, _done)
        return await fut

    async def flush(self) -> None:
        """Wait until every in-flight asynchronous transport call has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _reject(
        self,
        error: FanlogError,
        level: str,
        message: Any,
        metadata: Any,
        callback: DispatchCallback | None,
    ) -> Logger:
        if callback is None:
            _log.warning("dispatch_rejected", error=str(error), level=level)
        else:
            callback(error, level, message, metadata)
        return self

    def _invoke(self, transport: Any, dispatch: _Dispatch) -> None:
        try:
            result = transport.log(dispatch.level, dispatch.message, dispatch.metadata)
        except Exception as exc:  # noqa: BLE001 - transport failures are aggregated
            dispatch.settle(transport, _as_transport_error(transport, exc))
            return

        if not inspect.isawaitable(result):
            dispatch.settle(transport, None)
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(result):
                result.close()
            error = TransportError(_transport_name(transport), "returned an awaitable but no event loop is running")
            dispatch.settle(transport, error)
            return

        task = loop.create_task(
            self._await_transport(transport, result, dispatch),
            name=f"fanlog-{_transport_name(transport)}",
        )
        self._pending.add(task)
        task.add_done_callback(self._task_done)

    async def _await_transport(self, transport: Any, pending: Awaitable[Any], dispatch: _Dispatch) -> None:
        try:
            await pending
        except asyncio.CancelledError:
            dispatch.settle(transport, TransportError(_transport_name(transport), "cancelled"))
            raise
        except Exception as exc:  # noqa: BLE001 - transport failures are aggregated
            dispatch.settle(transport, _as_transport_error(transport, exc))
        else:
            dispatch.settle(transport, None)

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # Raised by a completion callback or event plumbing, not by the transport.
            _log.error("dispatch_completion_failed", task=task.get_name(), error=repr(exc))

    # -- profiling ----------------------------------------------------------

    @property
    def profilers(self) -> Mapping[str, float]:
        """Snapshot of live profiler entries (id -> start time)."""
        return MappingProxyType(dict(self._profilers))

    def _evict_stale_profilers(self, now: float) -> None:
        if self.profiler_ttl_s is None:
            return
        for key, started in list(self._profilers.items()):
            if now - started > self.profiler_ttl_s:
                del self._profilers[key]
                _log.debug("profiler_evicted", id=key, age_s=now - started)

    def profile(
        self,
        id: str,
        message: Any = None,
        metadata: Any = None,
        callback: DispatchCallback | None = None,
    ) -> Logger:
        """Start or stop the named timer `id`.

        The first call records a start time. The next call with the same `id`
        (with or without further arguments) removes the entry and logs
        `message` (default: `id`) at "info" with `metadata["duration"]` set to
        the elapsed time, e.g. `"12ms"`. A third call starts a new timer.
        """
        now = self._clock()
        self._evict_stale_profilers(now)

        started = self._profilers.pop(id, None)
        if started is None:
            self._profilers[id] = now
            return self

        # profile(id, callback) / profile(id, metadata[, callback])
        if callable(message) and metadata is None and callback is None:
            message, callback = None, message
        elif isinstance(message, Mapping) and (metadata is None or callable(metadata)):
            if callable(metadata) and callback is None:
                callback = metadata
            message, metadata = None, message

        metadata, callback = _normalize(metadata, callback)
        meta = dict(metadata) if isinstance(metadata, Mapping) else {}
        meta["duration"] = f"{int((now - started) * 1000)}ms"
        return self.log(PROFILE_LEVEL, id if message is None else message, meta, callback)
