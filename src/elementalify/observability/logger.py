"""JSON-lines logging for the converters.

The converters log through :func:`get_logger`.  Every record becomes a
single JSON object, and the structured fields a converter attaches with
``extra={"extra_fields": {...}}`` land at the top level::

    {"ts": "2026-01-01T12:00:00.123456+00:00", "level": "DEBUG",
     "logger": "elementalify.converter", "message": "Elemental converted",
     "op": "elemental_to_editor", "channel": "email", "nodes": 7,
     "warnings": 0}

Usage::

    from elementalify.observability import get_logger

    log = get_logger("elementalify.converter")
    log.warning("node dropped", extra={"extra_fields": {"node_type": "x"}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

# Keys written for every record; structured fields may not replace them.
_RESERVED_KEYS: frozenset[str] = frozenset({"ts", "level", "logger", "message"})


class StructuredFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as one line of JSON.

    ``exception`` and ``stack_info`` keys are added when the record
    carries them.  Values that are not JSON serializable are written as
    their ``str()``.  A structured field named like a reserved key is
    written with an ``extra_`` prefix.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in (getattr(record, "extra_fields", None) or {}).items():
            entry[f"extra_{key}" if key in _RESERVED_KEYS else key] = value

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(entry, default=str)


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


_handled: set[str] = set()


def get_logger(
    name: str = "elementalify",
    *,
    level: int | str = logging.WARNING,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Return the logger *name*, wired to a JSON handler on first use.

    Parameters
    ----------
    name:
        Logger name.
    level:
        Threshold as an ``int`` or a level name in any case.  Ignored
        once *name* has been configured.
    stream:
        Handler stream; ``sys.stderr`` when omitted.

    Returns
    -------
    logging.Logger
        The same object on every call with the same *name*.  Records are
        not propagated to the root logger.
    """
    logger = logging.getLogger(name)
    if name in _handled:
        return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.setLevel(_resolve_level(level))
    logger.propagate = False
    _handled.add(name)
    return logger
