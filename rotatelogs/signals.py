"""Rotate-on-signal plumbing.

`PendingSignal` is the only state shared between the signal handler and the
pump. Handlers run on the main thread between bytecodes and may interrupt the
pump anywhere, so the flag is a plain attribute and no locks are taken.
"""

from __future__ import annotations

import logging
import signal
from types import FrameType
from typing import Any

from rotatelogs.errors import SignalInstallError

logger = logging.getLogger(__name__)


class PendingSignal:
    def __init__(self) -> None:
        self._pending = False

    def set(self) -> None:
        self._pending = True

    def is_set(self) -> bool:
        return self._pending

    def consume(self) -> bool:
        """Return whether a rotation was requested, clearing the request."""
        if not self._pending:
            return False
        self._pending = False
        return True


def _default_signum() -> int:
    signum = getattr(signal, "SIGHUP", None)
    if signum is None:  # pragma: no cover - windows
        raise SignalInstallError("SIGHUP is not available on this platform")
    return signum


class SignalListener:
    """Set `pending` whenever `signum` (default SIGHUP) is delivered."""

    def __init__(self, pending: PendingSignal, signum: int | None = None) -> None:
        self.pending = pending
        self.signum = signum
        self._previous: Any = None
        self._installed = False

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        # No I/O here: just flag it for the pump.
        self.pending.set()

    def install(self) -> None:
        if self._installed:
            return
        if self.signum is None:
            self.signum = _default_signum()
        try:
            self._previous = signal.signal(self.signum, self._handle)
        except (ValueError, OSError) as e:
            raise SignalInstallError(f"cannot install handler for signal {self.signum}: {e}") from e
        self._installed = True
        logger.debug("listening for signal %s", self.signum)

    def uninstall(self) -> None:
        if not self._installed:
            return
        previous = self._previous if self._previous is not None else signal.SIG_DFL
        signal.signal(self.signum, previous)
        self._installed = False

    def __enter__(self) -> "SignalListener":
        self.install()
        return self

    def __exit__(self, *exc: object) -> None:
        self.uninstall()
