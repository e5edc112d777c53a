"""Bundled transports (reference implementations of the transport contract)."""

from __future__ import annotations

import asyncio
import json
import sys
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

import duckdb

from .errors import TransportError
from .models import LogRecord, Metadata
from .registry import register_transport_type


class InMemoryTransport:
    """In-memory transport for tests and local debugging."""

    def __init__(
        self,
        *,
        name: str = "memory",
        level: str | None = None,
        fail_with: BaseException | None = None,
    ) -> None:
        """Create an empty in-memory transport.

        Args:
            name: Registry name.
            level: Optional threshold overriding the logger's level.
            fail_with: When set, every `log` call raises this error instead of storing.
        """
        self.name = name
        self.level = level
        self.fail_with = fail_with
        self.closed = False
        self.close_calls = 0
        self._lock = threading.Lock()
        self._records: list[LogRecord] = []

    def log(self, level: str, message: str, metadata: Metadata) -> None:
        """Append a record to the in-memory list (thread-safe)."""
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            self._records.append(LogRecord(level=level, message=message, metadata=dict(metadata)))

    def close(self) -> None:
        self.closed = True
        self.close_calls += 1

    def snapshot(self) -> Sequence[LogRecord]:
        """Return a point-in-time copy of all recorded entries."""
        with self._lock:
            return list(self._records)


class ConsoleTransport:
    """Writes one line per record to a text stream (stdout by default)."""

    def __init__(self, *, name: str = "console", level: str | None = None, stream: TextIO | None = None) -> None:
        self.name = name
        self.level = level
        self._stream = stream

    def log(self, level: str, message: str, metadata: Metadata) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        line = f"{level}: {message}"
        if metadata:
            line += " " + json.dumps(metadata, separators=(",", ":"), sort_keys=True, default=str)
        try:
            stream.write(line + "\n")
            stream.flush()
        except (OSError, ValueError) as exc:
            raise TransportError(self.name, f"write failed: {exc}") from exc


@dataclass(frozen=True)
class DuckDBOptions:
    path: Path
    table: str = "log_records"


class DuckDBTransport:
    """DuckDB transport for durable local persistence.

    `log` returns a coroutine; the insert runs in a worker thread so the event
    loop is never blocked on disk I/O.
    """

    def __init__(
        self,
        *,
        path: str | Path,
        table: str = "log_records",
        name: str = "duckdb",
        level: str | None = None,
    ) -> None:
        """Create (or open) a DuckDB-backed transport at the given path."""
        self.name = name
        self.level = level
        self._opts = DuckDBOptions(path=Path(path), table=table)
        self._lock = threading.Lock()
        self._conn = duckdb.connect(str(self._opts.path))
        self._closed = False
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        create_sql = f"""
        create table if not exists {self._opts.table} (
          logged_at timestamptz not null,
          level varchar not null,
          message varchar not null,
          metadata_json varchar not null
        )
        """
        with self._lock:
            self._conn.execute(create_sql)

    def _write(self, record: LogRecord) -> None:
        metadata_json = json.dumps(record.metadata, separators=(",", ":"), sort_keys=True, default=str)
        insert_sql = f"""
        insert into {self._opts.table} (logged_at, level, message, metadata_json)
        values (?, ?, ?, ?)
        """
        with self._lock:
            if self._closed:
                raise TransportError(self.name, "transport is closed")
            try:
                self._conn.execute(insert_sql, [record.logged_at, record.level, record.message, metadata_json])
            except duckdb.Error as exc:
                raise TransportError(self.name, f"insert failed: {exc}") from exc

    async def log(self, level: str, message: str, metadata: Metadata) -> None:
        record = LogRecord(level=level, message=message, metadata=dict(metadata))
        await asyncio.to_thread(self._write, record)

    def rows(self) -> list[tuple[Any, ...]]:
        """Return `(level, message, metadata_json)` rows in insertion order."""
        with self._lock:
            return self._conn.execute(
                f"select level, message, metadata_json from {self._opts.table}"
            ).fetchall()

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._conn.close()


register_transport_type("memory", InMemoryTransport)
register_transport_type("console", ConsoleTransport)
register_transport_type("duckdb", DuckDBTransport)
