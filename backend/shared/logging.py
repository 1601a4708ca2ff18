"""Logging for court hosts: structlog events rendered through stdlib handlers.

Every court command emits one key/value event (`court command applied` or
`court command rejected`). A host gets those on stdout, and additionally in a
per-club-night file when it passes a log directory.

Environment variables:
- LOG_FORMAT: "json" for one JSON object per line, "console" or unset for
  human-readable output.
- LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING", "ERROR", or "CRITICAL".
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

LOG_FILE_PREFIX = "club-night"
LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LogOptions(NamedTuple):
    json_mode: bool
    level: int


def _plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _serialize_values(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Render court enums (actions, teams, error codes) and timestamps as plain strings."""
    for key, value in event_dict.items():
        event_dict[key] = {k: _plain(v) for k, v in value.items()} if isinstance(value, dict) else _plain(value)
    return event_dict


def _is_test() -> bool:
    return "pytest" in sys.modules


def resolve_options(level: int | None = None) -> LogOptions:
    """Read LOG_FORMAT and LOG_LEVEL; an explicit level overrides the env var."""
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format not in {"", "json", "console"}:
        msg = f"Invalid LOG_FORMAT={log_format!r}. Must be 'json', 'console', or unset."
        raise ValueError(msg)

    if level is None:
        name = os.environ.get("LOG_LEVEL", "INFO").upper()
        if name not in _LOG_LEVELS:
            msg = f"Invalid LOG_LEVEL={name!r}. Must be one of {', '.join(_LOG_LEVELS)}."
            raise ValueError(msg)
        level = logging.getLevelName(name)

    return LogOptions(json_mode=log_format == "json", level=level)


def _handler(handler: logging.Handler, options: LogOptions, *, colors: bool) -> logging.Handler:
    renderer = (
        structlog.processors.JSONRenderer() if options.json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        ),
    )
    return handler


def _club_night_log_path(log_dir: Path | str) -> Path:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    started = datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)
    return directory / f"{LOG_FILE_PREFIX}-{started}.log"


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
) -> Path | None:
    """Route structlog through the root logger to stdout and, optionally, a file.

    Returns the log file path when one was opened. No file is opened while
    running under pytest.
    """
    options = resolve_options(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _serialize_values,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.setLevel(options.level)
    root.handlers.clear()
    root.addHandler(_handler(logging.StreamHandler(sys.stdout), options, colors=sys.stdout.isatty()))

    if log_dir is None or _is_test():
        return None

    log_path = _club_night_log_path(log_dir)
    root.addHandler(_handler(logging.FileHandler(log_path, encoding="utf-8"), options, colors=False))
    return log_path
