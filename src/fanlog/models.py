"""Value models passed through a dispatch.

Nothing here is stored by the logger itself: a `LogRecord` lives only as long
as the transports that receive it keep it, and a `DispatchOutcome` is built
once per `log_async` call.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


Metadata = dict[str, Any]


class LogRecord(BaseModel):
    """A single record as handed to (and kept by) a transport."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    level: str
    message: str
    metadata: Metadata = Field(default_factory=dict)
    logged_at: datetime = Field(default_factory=utc_now)


class TransportFailure(BaseModel):
    """One failed transport within a dispatch."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    error: BaseException
    transport: Any


class DispatchOutcome(BaseModel):
    """Aggregated result of one dispatch, as returned by `Logger.log_async`."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    # None when every eligible transport succeeded.
    errors: list[TransportFailure] | None = None
    # Set instead of `errors` when the dispatch was rejected before fan-out
    # (NoTransportsError, UnknownLevelError).
    rejected: BaseException | None = None
    level: str
    message: Any
    metadata: Any = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.rejected is None


# callback(errors, level, message, metadata); errors is None, a list of
# TransportFailure, or a single validation error.
DispatchCallback = Callable[[Any, str, str, Metadata], Any]
