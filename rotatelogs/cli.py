from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rotatelogs.errors import ConfigError, RotateLogsError
from rotatelogs.logging import configure_logging
from rotatelogs.pump import StreamPump
from rotatelogs.rotation import DEFAULT_KEEP_COUNT, RotationConfig
from rotatelogs.signals import PendingSignal, SignalListener

logger = logging.getLogger(__name__)

_SIZE_UNITS = {"k": 1024, "m": 1024**2, "g": 1024**3}


def parse_size(value: str) -> int:
    """Parse byte counts like '4096', '10K', '25M', '1G' (binary units)."""
    raw = value.strip().lower()
    if raw.endswith("b"):
        raw = raw[:-1]
    if not raw:
        raise ValueError("Empty size")
    multiplier = 1
    if raw[-1] in _SIZE_UNITS:
        multiplier = _SIZE_UNITS[raw[-1]]
        raw = raw[:-1]
    if not raw.isdigit():
        raise ValueError(f"Invalid size: {value}")
    return int(raw) * multiplier


def _size_arg(value: str) -> int:
    try:
        return parse_size(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _count_arg(value: str) -> int:
    if not value.strip().isdigit():
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value!r}")
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rotatelogs",
        description="On-demand logrotate for piped stdout. Send SIGHUP to rotate now.",
        add_help=True,
    )
    parser.add_argument("-f", "--file", required=True, help="Output log file path")
    parser.add_argument(
        "-s",
        "--size",
        type=_size_arg,
        default=0,
        help="Rotate once the file reaches this many bytes (e.g. 1048576, 10M). Default: 0 (off)",
    )
    parser.add_argument(
        "-l", "--lines", type=_count_arg, default=None, help="Rotate after this many lines"
    )
    parser.add_argument(
        "-c",
        "--count",
        type=_count_arg,
        default=DEFAULT_KEEP_COUNT,
        help=f"Number of rotated files to keep. Default: {DEFAULT_KEEP_COUNT}",
    )
    parser.add_argument(
        "-r", "--rotate", action="store_true", help="Rotate the existing file on startup"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> RotationConfig:
    path = Path(args.file) if args.file and args.file.strip() else None
    if path is None:
        raise ConfigError("a target file path is required (--file)")
    if path.is_dir():
        raise ConfigError(f"{path} is a directory")
    return RotationConfig(
        target_path=path,
        max_size_bytes=args.size,
        max_lines=args.lines,
        keep_count=args.count,
        rotate_on_start=args.rotate,
    )


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        raise SystemExit(f"rotatelogs: {e}") from e

    configure_logging()

    pending = PendingSignal()
    try:
        with SignalListener(pending):
            pump = StreamPump(config, pending)
            pump.run(sys.stdin.buffer)
    except RotateLogsError as e:
        logger.debug("fatal error", exc_info=True)
        raise SystemExit(f"rotatelogs: {e}") from e
    except KeyboardInterrupt:
        return


if __name__ == "__main__":
    main()
