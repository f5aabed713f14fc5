from __future__ import annotations


class RotateLogsError(Exception):
    """Base class for all fatal rotatelogs errors."""


class ConfigError(RotateLogsError):
    """Invalid or missing configuration, detected before any input is read."""


class RotationIOError(RotateLogsError):
    """Open/read/write/flush/rename failure while pumping. Always fatal."""


class SignalInstallError(RotateLogsError):
    """The rotate-request signal handler could not be registered."""
