"""Logging and debugging output with a pluggable destination."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Optional

from rsyncsig.core import PACKAGE_NAME, LogLevel

LOG_PRIMASK = 7
"""Mask that extracts the priority part of a level."""

LOG_NONAME = 8
"""Flag bit: do not show the function name in the message."""

_MESSAGE_LIMIT = 999
_LINE_LIMIT = 1039

_SEVERITIES = (
    "EMERGENCY! ",
    "ALERT! ",
    "CRITICAL! ",
    "ERROR: ",
    "Warning: ",
    "",
    "",
    "",
)

TraceCallback = Callable[[LogLevel, str], None]


def trace_stderr(level: LogLevel, msg: str) -> None:
    """Default trace callback: write the message to standard error."""
    sys.stderr.write(msg)


@dataclass
class _TraceConfig:
    callback: Optional[TraceCallback] = trace_stderr
    level: int = LogLevel.INFO


_config = _TraceConfig()


def set_level(level: int) -> None:
    """Set the least important severity that will be output."""
    _config.level = int(level)


def trace_to(callback: Optional[TraceCallback]) -> None:
    """Send log messages to callback; None silences all output."""
    _config.callback = callback


def supports_trace() -> bool:
    """Report whether debugging trace is available."""
    return True


def trace_enabled() -> bool:
    """True when debug-level trace messages will be output."""
    return (_config.level & LOG_PRIMASK) >= LogLevel.DEBUG


def log(level: int, message: str, function: str = "", noname: bool = False) -> None:
    """Emit message at the given level, prefixed by the package name.

    The function name is shown in parentheses unless noname is set, the
    LOG_NONAME bit is present in level, or function is empty.
    """
    flags = int(level)
    priority = flags & LOG_PRIMASK
    callback = _config.callback
    if callback is None or priority > _config.level:
        return
    body = message[:_MESSAGE_LIMIT]
    severity = _SEVERITIES[priority]
    if noname or flags & LOG_NONAME or not function:
        line = f"{PACKAGE_NAME}: {severity}{body}\n"
    else:
        line = f"{PACKAGE_NAME}: {severity}({function}) {body}\n"
    callback(LogLevel(priority), line[:_LINE_LIMIT])


def debug(message: str, function: str = "") -> None:
    """Emit a debug-level trace message."""
    log(LogLevel.DEBUG, message, function)


def warn(message: str, function: str = "") -> None:
    """Emit a warning."""
    log(LogLevel.WARNING, message, function)


def error(message: str, function: str = "") -> None:
    """Emit an error message."""
    log(LogLevel.ERR, message, function)