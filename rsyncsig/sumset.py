"""Block signatures of a file and fast lookup of matching blocks."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

from Crypto.Hash import MD4

from rsyncsig import trace
from rsyncsig.core import (
    BLAKE2_SUM_LENGTH,
    DEFAULT_BLOCK_LEN,
    DEFAULT_MIN_STRONG_LEN,
    MAX_STRONG_SUM_LENGTH,
    MD4_SUM_LENGTH,
    LogLevel,
    MagicNumber,
    Result,
    RsyncError,
)
from rsyncsig.util import long_ln2, long_sqrt

_MASK32 = 0xFFFFFFFF
_HEADER_LEN = 12
_WEAK_SUM_LEN = 4


class WeakSumKind(Enum):
    """Rolling checksum used for the weak sums of a signature."""

    ROLLSUM = "rollsum"
    RABINKARP = "rabinkarp"


class StrongSumKind(Enum):
    """Hash used for the strong sums of a signature."""

    MD4 = "md4"
    BLAKE2 = "blake2"


_MAX_STRONG_LEN = {
    MagicNumber.BLAKE2_SIG: BLAKE2_SUM_LENGTH,
    MagicNumber.RK_BLAKE2_SIG: BLAKE2_SUM_LENGTH,
    MagicNumber.MD4_SIG: MD4_SUM_LENGTH,
    MagicNumber.RK_MD4_SIG: MD4_SUM_LENGTH,
}


def _mix32(h: int) -> int:
    """Scramble the bits of a 32-bit value to spread rollsum weak sums."""
    h &= _MASK32
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & _MASK32
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & _MASK32
    h ^= h >> 16
    return h


def _ratio(part: int, whole: int) -> float:
    return part / whole if whole else float("nan")


def sig_args(
    old_fsize: int = -1, magic: int = 0, block_len: int = 0, strong_len: int = 0
) -> tuple[MagicNumber, int, int]:
    """Resolve recommended signature arguments for a basis file size.

    old_fsize is -1 when unknown. magic and block_len of 0 mean
    "recommended"; strong_len of 0 means "maximum" and -1 "minimum".
    Returns (magic, block_len, strong_len); raises RsyncError on bad input.
    """
    magic = magic or MagicNumber.RK_BLAKE2_SIG
    try:
        resolved_magic = MagicNumber(magic)
        max_strong_len = _MAX_STRONG_LEN[resolved_magic]
    except (ValueError, KeyError):
        trace.error(f"invalid magic {int(magic):#x}", "sig_args")
        raise RsyncError(Result.BAD_MAGIC, f"invalid magic {int(magic):#x}") from None

    if old_fsize < 0:
        rec_block_len = DEFAULT_BLOCK_LEN
    elif old_fsize <= 256 * 256:
        rec_block_len = 256
    else:
        rec_block_len = long_sqrt(old_fsize) & ~127
    if block_len == 0:
        block_len = rec_block_len
    if block_len < 0:
        trace.error(f"invalid block_len={block_len}", "sig_args")
        raise RsyncError(Result.PARAM_ERROR, f"invalid block_len={block_len}")

    if old_fsize < 0:
        min_strong_len = DEFAULT_MIN_STRONG_LEN
    else:
        min_strong_len = 2 + (
            long_ln2(old_fsize + (1 << 24)) + long_ln2(old_fsize // block_len + 1) + 7
        ) // 8

    if strong_len == 0:
        strong_len = max_strong_len
    elif strong_len == -1:
        strong_len = min_strong_len
    elif strong_len < 0 or strong_len > max_strong_len:
        message = f"invalid strong_len={strong_len} for magic={int(resolved_magic):#x}"
        trace.error(message, "sig_args")
        raise RsyncError(Result.PARAM_ERROR, message)
    elif old_fsize >= 0 and strong_len < min_strong_len:
        trace.warn(
            f"strong_len={strong_len} smaller than recommended minimum "
            f"{min_strong_len} for old_fsize={old_fsize} with block_len={block_len}",
            "sig_args",
        )
    return resolved_magic, block_len, strong_len


class _BlockSig(NamedTuple):
    weak_sum: int
    strong_sum: bytes


@dataclass
class _HashTable:
    """Index of block signatures by weak sum, with lookup statistics."""

    buckets: dict[int, list[int]] = field(default_factory=dict)
    count: int = 0
    find_count: int = 0
    match_count: int = 0
    hashcmp_count: int = 0
    entrycmp_count: int = 0

    def add(self, weak_sum: int, index: int) -> None:
        self.buckets.setdefault(weak_sum, []).append(index)
        self.count += 1

    def reset_stats(self) -> None:
        self.find_count = self.match_count = 0
        self.hashcmp_count = self.entrycmp_count = 0


class Signature:
    """The block signatures of a whole file, plus an index for matching."""

    def __init__(
        self,
        magic: int = 0,
        block_len: int = 0,
        strong_len: int = 0,
        sig_fsize: int = -1,
    ) -> None:
        self.magic, self.block_len, self.strong_sum_len = sig_args(
            -1, magic, block_len, strong_len
        )
        # Number of blocks a signature file of sig_fsize bytes holds.
        self.expected_count = (
            0
            if sig_fsize < _HEADER_LEN
            else (sig_fsize - _HEADER_LEN) // (_WEAK_SUM_LEN + self.strong_sum_len)
        )
        self.blocks: list[_BlockSig] = []
        self.hashtable: Optional[_HashTable] = None
        self.calc_strong_count = 0

    @property
    def count(self) -> int:
        """Number of blocks in the signature."""
        return len(self.blocks)

    @property
    def weaksum_kind(self) -> WeakSumKind:
        return WeakSumKind.ROLLSUM if (self.magic & 0xF0) == 0x30 else WeakSumKind.RABINKARP

    @property
    def strongsum_kind(self) -> StrongSumKind:
        return StrongSumKind.MD4 if (self.magic & 0x0F) == 0x06 else StrongSumKind.BLAKE2

    def calc_strong_sum(self, data: bytes) -> bytes:
        """Return the full strong hash of data for this signature's kind."""
        if self.strongsum_kind is StrongSumKind.MD4:
            return MD4.new(bytes(data)).digest()
        return hashlib.blake2b(bytes(data), digest_size=BLAKE2_SUM_LENGTH).digest()

    def add_block(self, weak_sum: int, strong_sum: bytes) -> _BlockSig:
        """Append a block's sums; rollsum weak sums are mixed first."""
        if len(strong_sum) < self.strong_sum_len:
            raise ValueError(
                f"strong sum of {len(strong_sum)} bytes is shorter than "
                f"{self.strong_sum_len}"
            )
        weak_sum &= _MASK32
        if self.weaksum_kind is WeakSumKind.ROLLSUM:
            weak_sum = _mix32(weak_sum)
        block = _BlockSig(weak_sum, bytes(strong_sum[: self.strong_sum_len]))
        self.blocks.append(block)
        return block

    def _table(self) -> _HashTable:
        if self.hashtable is None:
            raise RsyncError(Result.PARAM_ERROR, "hash table has not been built")
        return self.hashtable

    def _find(
        self, weak_sum: int, strong_sum: Optional[bytes], data: bytes
    ) -> Optional[int]:
        table = self._table()
        table.find_count += 1
        for index in table.buckets.get(weak_sum, ()):
            table.hashcmp_count += 1
            table.entrycmp_count += 1
            if strong_sum is None:
                self.calc_strong_count += 1
                strong_sum = self.calc_strong_sum(data)[: self.strong_sum_len]
            if self.blocks[index].strong_sum == strong_sum:
                table.match_count += 1
                return index
        return None

    def build_hash_table(self) -> None:
        """Index the blocks for matching; duplicate blocks keep the first."""
        self.hashtable = _HashTable()
        for index, block in enumerate(self.blocks):
            if self._find(block.weak_sum, block.strong_sum, b"") is None:
                self.hashtable.add(block.weak_sum, index)
        self.hashtable.reset_stats()

    def find_match(self, weak_sum: int, data: bytes) -> Optional[int]:
        """Return the basis offset of a block matching data, or None.

        The strong sum of data is computed only if some block has the
        same weak sum.
        """
        index = self._find(weak_sum & _MASK32, None, data)
        return None if index is None else index * self.block_len

    def log_stats(self) -> None:
        """Log the match statistics gathered by find_match."""
        t = self._table()
        finds = t.find_count
        trace.log(
            LogLevel.INFO,
            f"match statistics: signature[{finds} searches, {t.match_count} "
            f"({100.0 * _ratio(t.match_count, finds):.3f}%) matches, "
            f"{t.hashcmp_count} ({_ratio(t.hashcmp_count, finds):.3f}x) weak sum "
            f"compares, {t.entrycmp_count} "
            f"({100.0 * _ratio(t.entrycmp_count, finds):.3f}%) strong sum compares, "
            f"{self.calc_strong_count} "
            f"({100.0 * _ratio(self.calc_strong_count, finds):.3f}%) strong sum calcs]",
            noname=True,
        )

    def dump(self) -> None:
        """Log the signature header and every block's sums."""
        trace.log(
            LogLevel.INFO,
            f"sumset info: magic={int(self.magic):#x}, block_len={self.block_len}, "
            f"block_num={self.count}",
            noname=True,
        )
        for index, block in enumerate(self.blocks):
            trace.log(
                LogLevel.INFO,
                f"sum {index:6d}: weak={block.weak_sum:08x}, "
                f"strong={block.strong_sum.hex()}",
                noname=True,
            )


assert MAX_STRONG_SUM_LENGTH >= max(_MAX_STRONG_LEN.values())