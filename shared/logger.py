"""
elfsym Structured Logger
=========================

:class:`ElfsymLogger` writes coloured records to stderr through Rich and,
optionally, plain-text or JSON-lines records to a rotating file.  Each
record carries the component name and the operation in progress.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Keyword arguments the stdlib logging calls understand themselves.
_STDLIB_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})


class _JSONFormatter(logging.Formatter):
    """One JSON object per line::

        {"timestamp": "...", "level": "WARNING", "logger": "elfsym.engine",
         "message": "...", "tool_name": "engine", "operation": "collect_symbols",
         "fields": {"section": 3}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "tool_name": getattr(record, "tool_name", None),
        }
        operation = getattr(record, "operation", None)
        if operation:
            entry["operation"] = operation
        fields = getattr(record, "elfsym_fields", None)
        if fields:
            entry["fields"] = fields
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _stderr_handler(level: int) -> RichHandler:
    # stdout is reserved for command output (tables, JSON reports).
    return RichHandler(
        level=level,
        console=Console(theme=_LOG_THEME, stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )


def _file_handler(
    path: Path, level: int, json_logs: bool, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    return handler


class ElfsymLogger:
    """Logger bound to one elfsym component.

    Extra keyword arguments to the log methods are attached to the record
    as structured fields and show up in JSON log files.

    Usage::

        log = ElfsymLogger("engine", log_file="elfsym.log", json_logs=True)
        with log.operation("collect_symbols"):
            log.warning("Skipping entry", section=3, entry=12)
        with log.timed("load /bin/ls"):
            ...

    Args:
        tool_name:       Component name; the stdlib logger is ``elfsym.<tool_name>``.
        log_level:       Minimum level name (``DEBUG`` .. ``CRITICAL``).
        log_file:        Rotating log file, or ``None`` for stderr only.
        json_logs:       Write JSON lines instead of text to *log_file*.
        max_bytes:       Rotation threshold of *log_file* (default 10 MiB).
        backup_count:    Rotated files to keep.
        console_output:  Attach the Rich stderr handler.
    """

    def __init__(
        self,
        tool_name: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._tool_name = tool_name
        self._operation: str | None = None

        level = getattr(logging, log_level.upper(), logging.INFO)
        self._logger = logging.getLogger(f"elfsym.{tool_name}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        # Re-creating a logger for the same component replaces its handlers.
        self._logger.handlers.clear()

        if console_output:
            self._logger.addHandler(_stderr_handler(level))
        if log_file is not None:
            self._logger.addHandler(
                _file_handler(Path(log_file), level, json_logs, max_bytes, backup_count)
            )

    @property
    def tool_name(self) -> str:
        return self._tool_name

    # ------------------------------------------------------------------ #
    #  Scopes
    # ------------------------------------------------------------------ #

    @contextmanager
    def operation(self, name: str) -> Iterator[ElfsymLogger]:
        """Tag every record emitted inside the block with ``operation=name``."""
        previous, self._operation = self._operation, name
        try:
            yield self
        finally:
            self._operation = previous

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        """Log the start and the elapsed time of the block at DEBUG level."""
        start = time.perf_counter()
        self.debug("Started: %s", label)
        try:
            yield
        finally:
            self.debug("Completed: %s (%.3f sec)", label, time.perf_counter() - start)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _log(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        passthrough = {k: kwargs.pop(k) for k in list(kwargs) if k in _STDLIB_KWARGS}
        extra: dict[str, Any] = {
            "tool_name": self._tool_name,
            "operation": self._operation,
        }
        if kwargs:
            extra["elfsym_fields"] = kwargs
        self._logger.log(level, msg, *args, extra=extra, **passthrough)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, args, kwargs)
