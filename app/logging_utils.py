"""
app/logging_utils.py

One-line JSON log events for report builds.

``timed_event`` wraps a build step: callers add result fields to the yielded
dict, and the event is logged with ``elapsed_ms`` when the block finishes.
A block that raises is logged as ``<event>_failed`` at ERROR and the
exception propagates unchanged.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator


def format_event(event: str, fields: dict[str, Any]) -> str:
    return json.dumps({"event": event, **fields}, default=str, sort_keys=True, ensure_ascii=False)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    if logger.isEnabledFor(level):
        logger.log(level, format_event(event, fields))


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


@contextmanager
def timed_event(logger: logging.Logger, event: str, **fields: Any) -> Iterator[dict[str, Any]]:
    context: dict[str, Any] = dict(fields)
    started = time.perf_counter()
    try:
        yield context
    except Exception as exc:
        log_event(
            logger,
            logging.ERROR,
            f"{event}_failed",
            **context,
            error=str(exc),
            elapsed_ms=_elapsed_ms(started),
        )
        raise
    log_event(logger, logging.INFO, event, **context, elapsed_ms=_elapsed_ms(started))
