# src/taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

APP_LOGGER_PREFIX = "taskboard"


def level_from_name(name: str | int | None, default: int = logging.INFO) -> int:
    """'debug' / 'WARNING' / 10 -> logging level; unknown names give `default`."""
    if isinstance(name, int):
        return name
    if not name:
        return default
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else default


class ConsoleNoiseFilter(logging.Filter):
    """
    Console filter for an interactive dashboard session.

    Application loggers pass, except the `quiet` ones (background refresh
    ticks by default) which need `quiet_level`. Everything else, including
    captured py.warnings, needs ERROR.
    """

    def __init__(
        self,
        quiet: Iterable[str] = (),
        *,
        quiet_level: int = logging.WARNING,
        app_prefix: str = APP_LOGGER_PREFIX,
    ) -> None:
        super().__init__()
        self.quiet = tuple(quiet)
        self.quiet_level = quiet_level
        self.app_prefix = app_prefix

    def _is_quiet(self, name: str) -> bool:
        return any(name == q or name.startswith(q + ".") for q in self.quiet)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == self.app_prefix or name.startswith(self.app_prefix + "."):
            if self._is_quiet(name):
                return record.levelno >= self.quiet_level
            return True
        return record.levelno >= logging.ERROR


def setup_logging(settings: Any) -> Path:
    """
    Install a filtered console handler and a full file handler on the root logger.

    Levels, the quiet loggers and the log file come from Settings. Replaces
    any handlers already on the root logger, so calling it twice is safe.
    Returns the log file path.
    """
    log_file = Path(settings.log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level_from_name(settings.log_level, logging.INFO))
    console.setFormatter(fmt)
    console.addFilter(
        ConsoleNoiseFilter(
            settings.quiet_loggers,
            quiet_level=level_from_name(settings.quiet_log_level, logging.WARNING),
        )
    )
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(level_from_name(settings.log_file_level, logging.DEBUG))
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
