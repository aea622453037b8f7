"""Run log: one temporary file per invocation.

All diagnostic detail (commands, their output, stage timings) goes to a
fresh temp file through the ``semship`` logger. The console only shows the
summary and the log path.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

__all__ = ["LOGGER_NAME", "logger", "setup_run_log", "close_run_log", "step_timer"]

LOGGER_NAME = "semship"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_run_log(directory: Path | None = None) -> Path:
    """Attach a file handler on a new temp file and return its path.

    Handlers from a previous run in the same process are removed first.
    """
    close_run_log()

    fd, name = tempfile.mkstemp(
        prefix="semship-",
        suffix=".log",
        dir=str(directory) if directory is not None else None,
    )
    os.close(fd)
    path = Path(name)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return path


def close_run_log() -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@contextmanager
def step_timer(step_name: str) -> Generator[None, None, None]:
    """Log the start and duration of a pipeline stage."""
    logger.info("> %s: started", step_name)
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("< %s: finished in %.0f ms", step_name, elapsed_ms)
