from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from rotatelogs.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_KEEP_COUNT = 5

_COUNT_BLOCK = 1 << 16


@dataclass(frozen=True)
class RotationConfig:
    target_path: Path
    max_size_bytes: int = 0
    max_lines: int | None = None
    keep_count: int = DEFAULT_KEEP_COUNT
    rotate_on_start: bool = False

    def __post_init__(self) -> None:
        if not str(self.target_path).strip():
            raise ConfigError("a target file path is required")
        object.__setattr__(self, "target_path", Path(self.target_path))
        if self.max_size_bytes < 0:
            raise ConfigError(f"size must be >= 0, got {self.max_size_bytes}")
        if self.max_lines is not None and self.max_lines < 0:
            raise ConfigError(f"lines must be >= 0, got {self.max_lines}")
        if self.keep_count < 0:
            raise ConfigError(f"count must be >= 0, got {self.keep_count}")

    @property
    def lines_enabled(self) -> bool:
        # 0 means disabled, same as size.
        return self.max_lines is not None and self.max_lines > 0


class LineCounter:
    """Bytes and newlines written to the current file since the last rotation."""

    def __init__(self, bytes_written: int = 0, lines_written: int = 0) -> None:
        self.bytes_written = bytes_written
        self.lines_written = lines_written

    @classmethod
    def from_file(cls, path: Path) -> "LineCounter":
        """Seed counters from a file we are about to append to."""
        counter = cls()
        try:
            with path.open("rb") as f:
                while True:
                    block = f.read(_COUNT_BLOCK)
                    if not block:
                        break
                    counter.record(block)
        except FileNotFoundError:
            pass
        return counter

    def record(self, data: bytes) -> None:
        self.bytes_written += len(data)
        self.lines_written += data.count(b"\n")

    def reset(self) -> None:
        self.bytes_written = 0
        self.lines_written = 0

    def __repr__(self) -> str:
        return f"LineCounter(bytes={self.bytes_written}, lines={self.lines_written})"


def should_rotate(counter: LineCounter, pending_signal: bool, config: RotationConfig) -> bool:
    if pending_signal:
        return True
    if config.max_size_bytes > 0 and counter.bytes_written >= config.max_size_bytes:
        return True
    if config.lines_enabled and counter.lines_written >= config.max_lines:
        return True
    return False


def bytes_until_threshold(data: bytes, counter: LineCounter, config: RotationConfig) -> int:
    """Return how many leading bytes of `data` fit before the next threshold.

    Writing exactly that many bytes lands the counter on the size or line
    limit, so callers can rotate at the same stream offset whatever the
    chunking of the input was. Returns `len(data)` when no limit is hit.
    """
    cut = len(data)

    if config.max_size_bytes > 0:
        room = config.max_size_bytes - counter.bytes_written
        cut = min(cut, max(room, 0))

    if config.lines_enabled:
        needed = config.max_lines - counter.lines_written
        if needed <= 0:
            return 0
        pos = -1
        for _ in range(needed):
            pos = data.find(b"\n", pos + 1, cut)
            if pos < 0:
                break
        else:
            cut = pos + 1

    return cut


class Archiver:
    """Rename chain `<file>` -> `<file>.1` -> ... -> `<file>.<keep_count>`."""

    def __init__(self, target_path: Path, keep_count: int = DEFAULT_KEEP_COUNT) -> None:
        self.target_path = Path(target_path)
        self.keep_count = keep_count

    def archive_path(self, index: int) -> Path:
        return self.target_path.with_name(f"{self.target_path.name}.{index}")

    def archives(self) -> list[Path]:
        """Existing archives, newest (`.1`) first."""
        return [
            self.archive_path(i)
            for i in range(1, self.keep_count + 1)
            if self.archive_path(i).is_file()
        ]

    def open_current(self) -> BinaryIO:
        self.target_path.parent.mkdir(parents=True, exist_ok=True)
        return self.target_path.open("ab")

    def rotate(self, current: BinaryIO | None = None) -> BinaryIO:
        """Archive the current file and return a fresh handle for `target_path`.

        `current` is flushed and closed before anything is renamed. Missing
        archive slots are normal; any other OSError propagates.
        """
        if current is not None and not current.closed:
            current.flush()
            current.close()

        self._drop_stale()

        if self.keep_count == 0:
            _unlink_if_exists(self.target_path)
            logger.info("rotated %s (no archives kept)", self.target_path)
            return self.open_current()

        _unlink_if_exists(self.archive_path(self.keep_count))
        for i in range(self.keep_count - 1, 0, -1):
            _rename_if_exists(self.archive_path(i), self.archive_path(i + 1))
        _rename_if_exists(self.target_path, self.archive_path(1))

        logger.info("rotated %s -> %s", self.target_path, self.archive_path(1))
        return self.open_current()

    def _drop_stale(self) -> None:
        # Archives past keep_count survive from runs with a larger count.
        index = self.keep_count + 1
        while _unlink_if_exists(self.archive_path(index)):
            logger.debug("removed stale archive %s", self.archive_path(index))
            index += 1


def _unlink_if_exists(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def _rename_if_exists(src: Path, dst: Path) -> bool:
    try:
        os.replace(src, dst)
    except FileNotFoundError:
        return False
    return True
