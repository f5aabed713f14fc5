from __future__ import annotations

import logging
from typing import BinaryIO

from rotatelogs.errors import RotationIOError
from rotatelogs.rotation import (
    Archiver,
    LineCounter,
    RotationConfig,
    bytes_until_threshold,
    should_rotate,
)
from rotatelogs.signals import PendingSignal

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class StreamPump:
    """Copy an input byte stream into `config.target_path`, rotating as needed.

    Owns the current file handle and counters. Rotation always happens
    between writes on this thread, so old and new files never interleave.
    """

    def __init__(
        self,
        config: RotationConfig,
        pending: PendingSignal | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.config = config
        self.pending = pending if pending is not None else PendingSignal()
        self.chunk_size = chunk_size
        self.archiver = Archiver(config.target_path, config.keep_count)
        self.counter = LineCounter()
        self.rotations = 0
        self._file: BinaryIO | None = None

    def run(self, input_stream: BinaryIO) -> int:
        """Pump until end of input. Returns the number of rotations performed."""
        try:
            self._open()
            if self.config.rotate_on_start:
                self._rotate("startup")

            read = getattr(input_stream, "read1", None) or input_stream.read
            while True:
                try:
                    chunk = read(self.chunk_size)
                except OSError as e:
                    raise RotationIOError(f"reading input: {e}") from e
                if not chunk:
                    break
                self._pump_chunk(chunk)
        finally:
            self._close()

        logger.debug("end of input after %d rotation(s)", self.rotations)
        return self.rotations

    def _pump_chunk(self, chunk: bytes) -> None:
        while chunk:
            cut = bytes_until_threshold(chunk, self.counter, self.config)
            if cut == 0:
                # Counters already at a threshold (seeded from an existing file).
                self._rotate("threshold")
                continue

            segment, chunk = chunk[:cut], chunk[cut:]
            self._write(segment)
            self.counter.record(segment)
            logger.debug("wrote %d bytes, %r", len(segment), self.counter)

            signalled = self.pending.consume()
            if should_rotate(self.counter, signalled, self.config):
                self._rotate("signal" if signalled else "threshold")

    def _open(self) -> None:
        path = self.config.target_path
        try:
            self.counter = LineCounter.from_file(path)
            self._file = self.archiver.open_current()
        except OSError as e:
            raise RotationIOError(f"opening {path}: {e}") from e

    def _write(self, data: bytes) -> None:
        f = self._file
        if f is None:
            raise RotationIOError(f"writing {self.config.target_path}: file is not open")
        try:
            f.write(data)
            f.flush()
        except OSError as e:
            raise RotationIOError(f"writing {self.config.target_path}: {e}") from e

    def _rotate(self, reason: str) -> None:
        logger.info("rotating %s (%s, %r)", self.config.target_path, reason, self.counter)
        current, self._file = self._file, None
        try:
            self._file = self.archiver.rotate(current)
        except OSError as e:
            raise RotationIOError(f"rotating {self.config.target_path}: {e}") from e
        self.counter.reset()
        self.rotations += 1

    def _close(self) -> None:
        if self._file is None:
            return
        f, self._file = self._file, None
        try:
            f.close()
        except OSError as e:
            raise RotationIOError(f"closing {self.config.target_path}: {e}") from e
