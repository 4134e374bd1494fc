"""Performance statistics for encoding and decoding operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rsyncsig import trace
from rsyncsig.core import LogLevel


@dataclass
class Stats:
    """Counters gathered while running an operation."""

    op: Optional[str] = None
    lit_cmds: int = 0
    lit_bytes: int = 0
    lit_cmdbytes: int = 0
    copy_cmds: int = 0
    copy_bytes: int = 0
    copy_cmdbytes: int = 0
    sig_cmds: int = 0
    sig_bytes: int = 0
    false_matches: int = 0
    sig_blocks: int = 0
    block_len: int = 0
    in_bytes: int = 0
    out_bytes: int = 0
    start: float = 0
    end: float = 0

    def format(self) -> str:
        """Return a human-readable one-line summary."""
        parts = [f"{self.op or 'noop'} statistics: "]
        if self.lit_cmds:
            parts.append(
                f"literal[{self.lit_cmds} cmds, {self.lit_bytes} bytes, "
                f"{self.lit_cmdbytes} cmdbytes] "
            )
        if self.sig_cmds:
            parts.append(
                f"in-place-signature[{self.sig_cmds} cmds, {self.sig_bytes} bytes] "
            )
        if self.copy_cmds or self.false_matches:
            parts.append(
                f"copy[{self.copy_cmds} cmds, {self.copy_bytes} bytes, "
                f"{self.copy_cmdbytes} cmdbytes, {self.false_matches} false]"
            )
        if self.sig_blocks:
            parts.append(
                f"signature[{self.sig_blocks} blocks, "
                f"{self.block_len} bytes per block]"
            )
        sec = int(self.end - self.start) or 1
        mb_in = self.in_bytes / 1e6
        mb_out = self.out_bytes / 1e6
        parts.append(
            f" speed[{mb_in:.1f} MB ({mb_in / sec:.1f} MB/s) in, "
            f"{mb_out:.1f} MB ({mb_out / sec:.1f} MB/s) out, {sec} sec]"
        )
        return "".join(parts)

    def log(self) -> None:
        """Write the summary to the trace log at informational level."""
        trace.log(LogLevel.INFO, self.format(), noname=True)