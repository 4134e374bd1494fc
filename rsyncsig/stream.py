"""Stream IO: readahead from caller input (the scoop) and queued output (the tube).

Input and output are caller-supplied buffers. The scoop holds input that was
taken from the caller but not yet consumed, so that callers can ask for a
fixed amount of data even when it arrives in small pieces. The tube holds
output that did not fit in the caller's output space, plus at most one
pending instruction to copy bytes straight from input to output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from rsyncsig import trace
from rsyncsig.core import Result, RsyncError

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass
class Buffers:
    """Input and output space offered by the caller for one round of work.

    next_in holds the input not yet consumed; it shrinks from the front as
    data is taken. Output is appended to output, and avail_out is reduced by
    the number of bytes written.
    """

    next_in: BytesLike = b""
    eof_in: bool = False
    avail_out: int = 0
    output: bytearray = field(default_factory=bytearray)

    @property
    def avail_in(self) -> int:
        """Number of input bytes not yet consumed."""
        return len(self.next_in)

    def _take_input(self, length: int) -> bytes:
        view = memoryview(self.next_in)
        taken = bytes(view[:length])
        self.next_in = view[length:]
        return taken

    def _emit(self, data: BytesLike) -> None:
        self.output += data
        self.avail_out -= len(data)


class Stream:
    """Readahead and output queueing on top of a Buffers instance."""

    def __init__(self, buffers: Optional[Buffers] = None) -> None:
        self.buffers = buffers if buffers is not None else Buffers()
        self._scoop = bytearray()
        self._write_buf = bytearray()
        self.copy_len = 0

    @property
    def scoop_avail(self) -> int:
        """Number of bytes waiting in the scoop."""
        return len(self._scoop)

    @property
    def write_len(self) -> int:
        """Number of literal bytes waiting in the tube."""
        return len(self._write_buf)

    # -- scoop ---------------------------------------------------------

    def scoop_input(self, length: int) -> None:
        """Move input into the scoop so that it holds up to length bytes."""
        if length <= self.scoop_avail:
            raise ValueError(
                f"scoop already holds {self.scoop_avail} bytes, "
                f"need more than that to scoop {length}"
            )
        buffers = self.buffers
        tocopy = min(length - self.scoop_avail, buffers.avail_in)
        self._scoop += buffers._take_input(tocopy)
        trace.debug(f"accepted {tocopy} bytes from input to scoop", "scoop_input")

    def scoop_advance(self, length: int) -> None:
        """Skip over length bytes of data previously seen by readahead.

        Bytes come from the scoop if it holds anything, otherwise from the
        input; never a mixture of both.
        """
        if length < 0:
            raise ValueError(f"cannot advance over {length} bytes")
        if self._scoop:
            if length > self.scoop_avail:
                raise ValueError(
                    f"cannot advance {length} bytes over a scoop of {self.scoop_avail}"
                )
            trace.debug(f"advance over {length} bytes from scoop", "scoop_advance")
            del self._scoop[:length]
        else:
            if length > self.buffers.avail_in:
                raise ValueError(
                    f"cannot advance {length} bytes over input of "
                    f"{self.buffers.avail_in}"
                )
            trace.debug(f"advance over {length} bytes from input buffer", "scoop_advance")
            self.buffers._take_input(length)

    def scoop_readahead(self, length: int) -> Optional[bytes]:
        """Return the next length bytes without consuming them.

        Returns None if not enough data has arrived yet; any input present is
        then kept in the scoop. Raises RsyncError(INPUT_ENDED) if there is not
        enough data and the input is at end of file.
        """
        buffers = self.buffers
        if not self._scoop and buffers.avail_in >= length:
            trace.debug(f"got {length} bytes direct from input", "scoop_readahead")
            return bytes(memoryview(buffers.next_in)[:length])
        if self.scoop_avail < length and buffers.avail_in:
            trace.debug(
                f"scoop has less than {length} bytes, scooping from "
                f"{buffers.avail_in} input bytes",
                "scoop_readahead",
            )
            self.scoop_input(length)
        if self.scoop_avail >= length:
            trace.debug(
                f"scoop has at least {self.scoop_avail} bytes, this is enough",
                "scoop_readahead",
            )
            return bytes(self._scoop[:length])
        if buffers.eof_in:
            trace.debug("reached end of input stream", "scoop_readahead")
            raise RsyncError(Result.INPUT_ENDED)
        trace.debug("blocked with insufficient input data", "scoop_readahead")
        return None

    def scoop_read(self, length: int) -> Optional[bytes]:
        """Return and consume the next length bytes, or None if blocked."""
        data = self.scoop_readahead(length)
        if data is not None:
            self.scoop_advance(length)
        return data

    def scoop_read_rest(self) -> Optional[bytes]:
        """Return and consume all data in the scoop and input.

        Returns None if there is none yet; raises RsyncError(INPUT_ENDED) if
        there is none and the input is at end of file.
        """
        length = self.scoop_total_avail()
        if length:
            return self.scoop_read(length)
        if self.buffers.eof_in:
            raise RsyncError(Result.INPUT_ENDED)
        return None

    def scoop_total_avail(self) -> int:
        """Total bytes available from the scoop and the input together."""
        return self.scoop_avail + self.buffers.avail_in

    # -- tube ----------------------------------------------------------

    def _catchup_write(self) -> None:
        buffers = self.buffers
        length = min(self.write_len, buffers.avail_out)
        if length:
            buffers._emit(self._write_buf[:length])
            del self._write_buf[:length]
        trace.debug(
            f"wrote {length} bytes from tube, {self.write_len} left to write",
            "tube_catchup",
        )

    def _copy_from_scoop(self) -> None:
        buffers = self.buffers
        length = min(self.copy_len, self.scoop_avail, buffers.avail_out)
        if length:
            buffers._emit(self._scoop[:length])
            del self._scoop[:length]
            self.copy_len -= length
        trace.debug(
            f"copied {length} bytes from scoop, {self.scoop_avail} left in scoop, "
            f"{self.copy_len} left to copy",
            "tube_catchup",
        )

    def _copy_from_stream(self) -> None:
        buffers = self.buffers
        length = min(self.copy_len, buffers.avail_in, buffers.avail_out)
        if length:
            buffers._emit(buffers._take_input(length))
            self.copy_len -= length
        trace.debug(
            f"copied {length} bytes from stream, {buffers.avail_in} left in stream, "
            f"{self.copy_len} left to copy",
            "tube_catchup",
        )

    def tube_catchup(self) -> bool:
        """Send as much queued output as fits.

        Returns True once the tube is empty and ready for another command,
        False while output is still waiting. Raises RsyncError(INPUT_ENDED)
        if a pending copy can never finish because the input has ended.
        """
        if self._write_buf:
            self._catchup_write()
            if self._write_buf:
                return False
        if self.copy_len:
            if self._scoop:
                self._copy_from_scoop()
            if self.copy_len and not self._scoop:
                self._copy_from_stream()
            if self.copy_len:
                buffers = self.buffers
                if buffers.eof_in and not buffers.avail_in and not self._scoop:
                    trace.error("reached end of file while copying data", "tube_catchup")
                    raise RsyncError(
                        Result.INPUT_ENDED, "reached end of file while copying data"
                    )
                return False
        return True

    def tube_is_idle(self) -> bool:
        """True when the previous command has finished all its output."""
        return not self._write_buf and self.copy_len == 0

    def tube_write(self, data: BytesLike) -> None:
        """Queue literal bytes for output."""
        if self.copy_len:
            raise RsyncError(
                Result.INTERNAL_ERROR, "cannot queue data while a copy is pending"
            )
        self._write_buf += data

    def tube_copy(self, length: int) -> None:
        """Queue a copy of length bytes from the input to the output."""
        if self.copy_len:
            raise RsyncError(Result.INTERNAL_ERROR, "a copy is already pending")
        if length < 0:
            raise ValueError(f"cannot copy {length} bytes")
        self.copy_len = length