"""Severity tables.

A table is an ordered mapping from level name to integer rank where a LOWER
rank is MORE severe. A record at level `r` passes a threshold `t` iff
`rank(r) <= rank(t)`.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from .errors import UnknownLevelError

NPM_LEVELS: Mapping[str, int] = MappingProxyType(
    {"error": 0, "warn": 1, "info": 2, "http": 3, "verbose": 4, "debug": 5, "silly": 6}
)

SYSLOG_LEVELS: Mapping[str, int] = MappingProxyType(
    {"emerg": 0, "alert": 1, "crit": 2, "error": 3, "warning": 4, "notice": 5, "info": 6, "debug": 7}
)

CLI_LEVELS: Mapping[str, int] = MappingProxyType(
    {
        "error": 0,
        "warn": 1,
        "help": 2,
        "data": 3,
        "info": 4,
        "debug": 5,
        "prompt": 6,
        "verbose": 7,
        "input": 8,
        "silly": 9,
    }
)

NAMED_TABLES: Mapping[str, Mapping[str, int]] = MappingProxyType(
    {"npm": NPM_LEVELS, "syslog": SYSLOG_LEVELS, "cli": CLI_LEVELS}
)


class SeverityTable(Mapping[str, int]):
    """Read-only view over a level-name -> rank mapping."""

    def __init__(self, levels: Mapping[str, int]) -> None:
        self._levels: dict[str, int] = dict(levels)

    def __getitem__(self, name: str) -> int:
        return self._levels[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    @property
    def names(self) -> tuple[str, ...]:
        """Level names in table order."""
        return tuple(self._levels)

    def rank(self, name: str) -> int:
        """Return the rank for `name` or raise `UnknownLevelError`."""
        try:
            return self._levels[name]
        except KeyError:
            raise UnknownLevelError(name) from None

    def is_at_least(self, level: str, threshold: str) -> bool:
        """True if `level` is at least as severe as `threshold`."""
        return self.rank(level) <= self.rank(threshold)
