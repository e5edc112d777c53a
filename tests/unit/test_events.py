from __future__ import annotations

from typing import Any

import pytest

from fanlog import EventChannel, InMemoryTransport, Logger, TransportError


def test_log_event_per_transport_including_failures():
    ok = InMemoryTransport(name="ok")
    bad = InMemoryTransport(name="bad", fail_with=OSError("nope"))
    logger = Logger(transports=[ok, bad])
    seen: list[tuple[Any, ...]] = []
    logger.on("log", lambda *args: seen.append(args))

    logger.info("m", {"k": 1})

    assert [(t.name, level, msg, meta) for t, level, msg, meta in seen] == [
        ("ok", "info", "m", {"k": 1}),
        ("bad", "info", "m", {"k": 1}),
    ]


def test_error_event_carries_error_and_transport():
    bad = InMemoryTransport(name="bad", fail_with=OSError("nope"))
    logger = Logger(transports=[bad])
    errors: list[tuple[Any, ...]] = []
    logger.on("error", lambda err, transport: errors.append((err, transport)))

    logger.info("m")

    [(err, transport)] = errors
    assert isinstance(err, TransportError)
    assert transport is bad


def test_error_events_can_be_disabled_explicitly():
    bad = InMemoryTransport(name="bad", fail_with=OSError("nope"))
    logger = Logger(transports=[bad], emit_errors=False)
    errors: list[Any] = []
    logs: list[Any] = []
    calls: list[Any] = []
    logger.on("error", lambda *args: errors.append(args)).on("log", lambda *args: logs.append(args))

    logger.info("m", lambda *args: calls.append(args))

    assert errors == []
    assert len(logs) == 1
    assert len(calls[0][0]) == 1


def test_raising_listener_does_not_affect_dispatch(logger: Logger):
    def explode(*args: Any) -> None:
        raise RuntimeError("listener bug")

    calls: list[Any] = []
    logger.on("log", explode)
    logger.info("m", lambda *args: calls.append(args))
    assert calls == [(None, "info", "m", {})]


def test_once_and_off():
    channel = EventChannel()
    hits: list[Any] = []

    def handler(*args: Any) -> None:
        hits.append(args)

    channel.once("log", handler)
    assert channel.emit("log", 1) is True
    assert channel.emit("log", 2) is False

    channel.on("error", handler)
    channel.off("error", handler)
    assert channel.emit("error", 3) is False
    assert hits == [(1,)]


def test_unknown_event_name_is_rejected():
    with pytest.raises(ValueError):
        EventChannel().on("flush", print)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_subscribe_queue_receives_events(logger: Logger, memory: InMemoryTransport):
    q = logger.subscribe("log")
    logger.warn("queued")

    transport, level, message, metadata = q.get_nowait()
    assert transport is memory
    assert (level, message, metadata) == ("warn", "queued", {})

    logger.events.unsubscribe("log", q)
    logger.warn("ignored")
    assert q.empty()
    assert logger.events.listener_count("log") == 0
