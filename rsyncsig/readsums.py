"""Load a signature file into an in-memory Signature."""

from __future__ import annotations

import io
import os
import stat
from typing import BinaryIO, Callable, Optional, Union

from rsyncsig import trace
from rsyncsig.core import MAX_STRONG_SUM_LENGTH, Result, RsyncError
from rsyncsig.stats import Stats
from rsyncsig.stream import Buffers, Stream
from rsyncsig.sumset import Signature

_INT_LEN = 4
_READ_CHUNK = 1024 * 16
"""Read size for signature files: room for 1024 sixteen-byte block sums."""

PathOrFile = Union[str, "os.PathLike[str]", BinaryIO]


def _file_size(file: BinaryIO) -> int:
    """Size of a regular file, or -1 if it cannot be determined."""
    try:
        info = os.fstat(file.fileno())
    except (AttributeError, OSError, io.UnsupportedOperation):
        return -1
    return info.st_size if stat.S_ISREG(info.st_mode) else -1


class SignatureLoader:
    """Incrementally parse a signature stream fed in arbitrary pieces.

    The stream holds a big-endian header of magic, block length and strong
    sum length, followed by blocks of a 4-byte weak sum and a strong sum.
    """

    def __init__(self, sig_fsize: int = -1) -> None:
        self.sig_fsize = sig_fsize
        self.signature: Optional[Signature] = None
        self.stats = Stats(op="loadsig")
        self.done = False
        self._stream = Stream(Buffers())
        self._state: Callable[[], Result] = self._read_magic
        self._magic = 0
        self._block_len = 0
        self._weak_sum = 0

    def feed(self, data: bytes = b"", eof: bool = False) -> bool:
        """Consume data; return True once the whole signature has been read.

        Returns False while more input is needed. Raises RsyncError on a
        corrupt or truncated stream.
        """
        if self.done:
            if data:
                raise RsyncError(
                    Result.PARAM_ERROR, "signature has already been fully loaded"
                )
            return True
        buffers = self._stream.buffers
        buffers.next_in = bytes(buffers.next_in) + bytes(data)
        buffers.eof_in = eof
        while True:
            result = self._state()
            if result is Result.BLOCKED:
                return False
            if result is Result.DONE:
                self.done = True
                return True

    def _read_int(self) -> Optional[int]:
        raw = self._stream.scoop_read(_INT_LEN)
        if raw is None:
            return None
        return int.from_bytes(raw, "big", signed=True)

    def _read_magic(self) -> Result:
        value = self._read_int()
        if value is None:
            return Result.BLOCKED
        trace.debug(f"got signature magic {value:#x}", "loadsig_magic")
        self._magic = value
        self._state = self._read_block_len
        return Result.RUNNING

    def _read_block_len(self) -> Result:
        value = self._read_int()
        if value is None:
            return Result.BLOCKED
        if value < 1:
            message = f"block length of {value} is bogus"
            trace.error(message, "loadsig_blocklen")
            raise RsyncError(Result.CORRUPT, message)
        trace.debug(f"got block length {value}", "loadsig_blocklen")
        self._block_len = value
        self.stats.block_len = value
        self._state = self._read_strong_len
        return Result.RUNNING

    def _read_strong_len(self) -> Result:
        value = self._read_int()
        if value is None:
            return Result.BLOCKED
        if value < 0 or value > MAX_STRONG_SUM_LENGTH:
            message = f"strong sum length {value} is implausible"
            trace.error(message, "loadsig_stronglen")
            raise RsyncError(Result.CORRUPT, message)
        trace.debug(f"got strong sum length {value}", "loadsig_stronglen")
        self.signature = Signature(self._magic, self._block_len, value, self.sig_fsize)
        self._state = self._read_weak
        return Result.RUNNING

    def _read_weak(self) -> Result:
        try:
            value = self._read_int()
        except RsyncError as exc:
            if exc.result is Result.INPUT_ENDED:
                return Result.DONE
            raise
        if value is None:
            return Result.BLOCKED
        self._weak_sum = value & 0xFFFFFFFF
        self._state = self._read_strong
        return Result.RUNNING

    def _read_strong(self) -> Result:
        signature = self.signature
        assert signature is not None
        strong = self._stream.scoop_read(signature.strong_sum_len)
        if strong is None:
            return Result.BLOCKED
        self._state = self._read_weak
        if trace.trace_enabled():
            trace.debug(
                f"got block: weak={self._weak_sum:08x}, strong={strong.hex()}",
                "loadsig_add_sum",
            )
        signature.add_block(self._weak_sum, strong)
        self.stats.sig_blocks += 1
        return Result.RUNNING


def load_signature(data: bytes) -> tuple[Signature, Stats]:
    """Parse a complete signature held in memory.

    Returns the signature and the loading statistics. Call
    build_hash_table() on the signature before matching against it.
    """
    loader = SignatureLoader(len(data))
    loader.feed(data, eof=True)
    assert loader.signature is not None
    return loader.signature, loader.stats


def load_signature_file(file: PathOrFile) -> tuple[Signature, Stats]:
    """Read a signature from a binary file object or a path."""
    if isinstance(file, (str, os.PathLike)):
        with open(file, "rb") as handle:
            return load_signature_file(handle)
    loader = SignatureLoader(_file_size(file))
    while True:
        chunk = file.read(_READ_CHUNK)
        if not chunk:
            loader.feed(b"", eof=True)
            break
        if loader.feed(chunk):
            break
    assert loader.signature is not None
    return loader.signature, loader.stats