from __future__ import annotations

from typing import Any

import pytest

from fanlog import CLI_LEVELS, ConfigurationError, InMemoryTransport, Logger, NPM_LEVELS


def test_one_shortcut_per_level():
    logger = Logger()
    for name in NPM_LEVELS:
        assert callable(getattr(logger, name))
        assert getattr(logger, name).__name__ == name


def test_shortcuts_follow_the_configured_table():
    logger = Logger(levels=CLI_LEVELS)
    assert callable(logger.prompt)
    assert not hasattr(logger, "http")


def test_shortcut_is_log_at_that_level(memory: InMemoryTransport):
    logger = Logger(level="silly", transports=[memory])
    calls: list[tuple[Any, ...]] = []

    logger.verbose("a")
    logger.warn("b", {"k": 1})
    logger.error("c", lambda *args: calls.append(args))
    logger.http("d", {"k": 2}, lambda *args: calls.append(args))

    assert [(r.level, r.message, r.metadata) for r in memory.snapshot()] == [
        ("verbose", "a", {}),
        ("warn", "b", {"k": 1}),
        ("error", "c", {}),
        ("http", "d", {"k": 2}),
    ]
    assert calls == [(None, "error", "c", {}), (None, "http", "d", {"k": 2})]


def test_shortcuts_are_per_instance():
    a, b = Logger(), Logger(levels={"loud": 0, "quiet": 1}, level="loud")
    assert hasattr(a, "info") and not hasattr(b, "info")
    assert hasattr(b, "quiet") and not hasattr(a, "quiet")


def test_level_name_colliding_with_logger_api_is_rejected():
    with pytest.raises(ConfigurationError):
        Logger(levels={"log": 0, "info": 1})
