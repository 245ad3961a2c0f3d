"""
Logging setup for the combo-roster CLI.

Call ``configure_logging(config)`` once at CLI entry, before a session is
opened. Library modules only ever use ``logging.getLogger(__name__)``.

Graph, store and coordinator log lines carry context fields via ``extra=``
(``settings_path``, ``modifiers_path``, ``modifier_count``, ``combo_count``,
``roster_size``, ``invalid_combo_ids``). Both output formats keep them:

Text (default)::

    2026-10-19T12:00:00Z [INFO] combo_roster.persistence.coordinator: Settings saved (3 combos) | combo_count=3 roster_size=2

JSON (``json_format = true`` in the ``[logging]`` section), one object per line::

    {"ts": "2026-10-19T12:00:00Z", "level": "INFO", "logger": "...", "msg": "...", "combo_count": 3}
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from combo_roster.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Fields attached to ``record`` through ``extra=``, in insertion order."""
    return {
        key: val
        for key, val in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class _ContextFormatter(logging.Formatter):
    """Plain-text lines with ``key=value`` context appended after ``|``."""

    converter = time.gmtime

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        first, sep, rest = line.partition("\n")
        pairs = " ".join(f"{key}={val}" for key, val in context.items())
        return f"{first} | {pairs}{sep}{rest}"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg`` plus context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(record_context(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Installs a stdout handler, plus a UTF-8 file handler when ``log_file`` is
    set (its parent directory is created). Replaces any handlers installed by
    an earlier call.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter: logging.Formatter = _JsonFormatter() if config.json_format else _ContextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
