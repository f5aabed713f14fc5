from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import WatchedFileHandler
from pathlib import Path
from typing import TextIO


def _level_name_to_int(level_name: str, default: int) -> int:
    name = level_name.strip().upper()
    if not name:
        return default
    candidate: object = getattr(logging, name, None)
    if isinstance(candidate, int):
        return candidate
    return default


class UtcMillisFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{int(record.msecs):03d}Z"


@dataclass(frozen=True)
class LoggingContract:
    env_prefix: str
    app_logger_prefix: str

    @property
    def env_log_level(self) -> str:
        return f"{self.env_prefix}_LOG_LEVEL"

    @property
    def env_log_file(self) -> str:
        return f"{self.env_prefix}_LOG_FILE"


def configure_logging(
    *,
    env_prefix: str = "ROTATELOGS",
    app_logger_prefix: str = "rotatelogs",
    stream: TextIO | None = None,
) -> Path | None:
    """Configure diagnostics for the rotatelogs process itself.

    Diagnostics always go to stderr (stdout is never touched; stdin is the
    payload). `<PREFIX>_LOG_LEVEL` sets our level (default WARNING) and
    `<PREFIX>_LOG_FILE` adds a file handler that survives external rotation.

    Returns the diagnostics log file path, if one is configured.
    """
    contract = LoggingContract(env_prefix=env_prefix, app_logger_prefix=app_logger_prefix)

    our_level = _level_name_to_int(os.getenv(contract.env_log_level) or "", logging.WARNING)
    formatter = UtcMillisFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setLevel(logging.NOTSET)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    log_file: Path | None = None
    raw_log_file = os.getenv(contract.env_log_file, "").strip()
    if raw_log_file:
        log_file = Path(raw_log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = WatchedFileHandler(log_file, encoding="utf-8")
        handler.setLevel(logging.NOTSET)
        handler.setFormatter(formatter)
        handlers.append(handler)

    # Only our logger tree; we don't own the root in library use.
    app_logger = logging.getLogger(app_logger_prefix)
    for old in list(app_logger.handlers):
        app_logger.removeHandler(old)
        old.close()
    for handler in handlers:
        app_logger.addHandler(handler)
    app_logger.setLevel(our_level)
    app_logger.propagate = False

    return log_file
