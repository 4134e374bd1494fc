"""Shared enumerations, constants and the error type for rsync signatures."""

from __future__ import annotations

from enum import IntEnum

PACKAGE_NAME = "rsyncsig"
PACKAGE_VERSION = "1.0.0"
LIBRARY_VERSION = f"{PACKAGE_NAME} {PACKAGE_VERSION}"

MD4_SUM_LENGTH = 16
BLAKE2_SUM_LENGTH = 32
MAX_STRONG_SUM_LENGTH = 32

DEFAULT_BLOCK_LEN = 2048
"""Block length used when nothing else determines it."""

DEFAULT_MIN_STRONG_LEN = 12
"""Minimum strong sum length used when the file size is unknown."""


class MagicNumber(IntEnum):
    """Magic numbers written big-endian at the start of rsync files."""

    DELTA = 0x72730236
    MD4_SIG = 0x72730136
    BLAKE2_SIG = 0x72730137
    RK_MD4_SIG = 0x72730146
    RK_BLAKE2_SIG = 0x72730147

    def to_bytes_be(self) -> bytes:
        """Return the four bytes as they appear on the wire."""
        return int(self).to_bytes(4, "big")


class LogLevel(IntEnum):
    """Log severity levels, matching syslog."""

    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


_DESCRIPTIONS = {
    0: "completed successfully",
    1: "blocked waiting for more data",
    2: "still running",
    77: "test neither passed nor failed",
    100: "error in file or network IO",
    101: "command line syntax error",
    102: "out of memory",
    103: "unexpected end of input",
    104: "bad magic number at start of stream",
    105: "unimplemented case",
    106: "unbelievable value in stream",
    107: "internal error",
    108: "bad value passed in to library",
}


class Result(IntEnum):
    """Outcome codes of rsync operations."""

    DONE = 0
    BLOCKED = 1
    RUNNING = 2
    TEST_SKIPPED = 77
    IO_ERROR = 100
    SYNTAX_ERROR = 101
    MEM_ERROR = 102
    INPUT_ENDED = 103
    BAD_MAGIC = 104
    UNIMPLEMENTED = 105
    CORRUPT = 106
    INTERNAL_ERROR = 107
    PARAM_ERROR = 108

    @property
    def description(self) -> str:
        """A short English description of this result."""
        return _DESCRIPTIONS[int(self)]

    @property
    def is_error(self) -> bool:
        """True for results that indicate failure."""
        return self >= Result.IO_ERROR


class RsyncError(Exception):
    """Raised when an operation fails with an error result."""

    def __init__(self, result: Result, message: str | None = None) -> None:
        self.result = Result(result)
        self.message = message if message is not None else self.result.description
        super().__init__(self.message)