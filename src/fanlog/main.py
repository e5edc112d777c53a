"""Demo entrypoint wiring a logger to the bundled transports.

This module intentionally contains a small, end-to-end "smoke test" that:

- Loads configuration from environment.
- Attaches a console transport and a DuckDB transport.
- Profiles a short piece of work and logs a few records at different levels.
- Flushes pending writes and closes every transport.

It is **not** intended to be production wiring; it is a convenient manual
harness for trying transports and levels.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any

from .config import load_config
from .logger import Logger
from .transports import ConsoleTransport, DuckDBTransport


def _print_error(error: BaseException, transport: Any) -> None:
    print(f"[error] {getattr(transport, 'name', transport)}: {error}")


async def run_demo(*, db_path: str | Path | None = None) -> Logger:
    """Run the demo and return the (closed) logger."""
    cfg = load_config()
    if db_path is None:
        db_path = os.getenv("FANLOG_DB_PATH", str(Path.cwd() / "fanlog.duckdb"))

    logger = Logger.from_config(cfg)
    logger.add(ConsoleTransport)
    logger.add(DuckDBTransport, {"path": db_path, "level": "debug"})
    logger.on("error", _print_error)

    try:
        logger.profile("demo")
        await asyncio.sleep(0.01)
        await logger.log_async("info", "demo started", {"pid": os.getpid()})
        await logger.log_async("debug", "only the duckdb transport sees this")
        logger.profile("demo", "demo finished")
        await logger.flush()
    finally:
        logger.close()
    return logger


def main() -> None:
    """CLI entrypoint for running the demo with `python -m fanlog.main`."""
    asyncio.run(run_demo())


if __name__ == "__main__":
    main()
