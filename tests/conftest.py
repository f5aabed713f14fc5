from __future__ import annotations

import logging
from pathlib import Path

import pytest


class ChunkedReader:
    """Binary stream handing out pre-split chunks via `read1`."""

    def __init__(self, chunks, on_read=None):
        self._chunks = [bytes(c) for c in chunks if c]
        self._reads = 0
        self._on_read = on_read

    def read1(self, size: int = -1) -> bytes:
        if self._on_read is not None:
            self._on_read(self._reads)
        self._reads += 1
        if not self._chunks:
            return b""
        chunk = self._chunks[0]
        if 0 < size < len(chunk):
            self._chunks[0] = chunk[size:]
            return chunk[:size]
        self._chunks.pop(0)
        return chunk


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


def reassemble(target: Path) -> bytes:
    """Oldest archive first, current file last."""
    archives = sorted(
        target.parent.glob(target.name + ".*"),
        key=lambda p: int(p.name.rsplit(".", 1)[1]),
        reverse=True,
    )
    parts = [p.read_bytes() for p in archives]
    if target.exists():
        parts.append(target.read_bytes())
    return b"".join(parts)


@pytest.fixture()
def isolated_logging():
    app_logger = logging.getLogger("rotatelogs")
    previous_handlers = list(app_logger.handlers)
    previous_level = app_logger.level
    previous_propagate = app_logger.propagate

    try:
        yield
    finally:
        for handler in app_logger.handlers:
            if handler not in previous_handlers:
                try:
                    handler.close()
                except Exception:
                    pass
        app_logger.handlers = previous_handlers
        app_logger.setLevel(previous_level)
        app_logger.propagate = previous_propagate
