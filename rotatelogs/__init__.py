"""rotatelogs: write piped stdin to a size/line/signal rotated set of files."""

__all__ = [
    "__version__",
    "Archiver",
    "ConfigError",
    "LineCounter",
    "PendingSignal",
    "RotateLogsError",
    "RotationConfig",
    "RotationIOError",
    "SignalInstallError",
    "SignalListener",
    "StreamPump",
    "configure_logging",
    "should_rotate",
]

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("rotatelogs")
except Exception:  # pragma: no cover
    __version__ = "0.0.0"

from rotatelogs.errors import (  # noqa: E402  (intentional re-export)
    ConfigError,
    RotateLogsError,
    RotationIOError,
    SignalInstallError,
)
from rotatelogs.logging import configure_logging  # noqa: E402
from rotatelogs.pump import StreamPump  # noqa: E402
from rotatelogs.rotation import (  # noqa: E402
    Archiver,
    LineCounter,
    RotationConfig,
    should_rotate,
)
from rotatelogs.signals import PendingSignal, SignalListener  # noqa: E402
