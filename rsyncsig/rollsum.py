"""The classic rsync rolling checksum."""

from __future__ import annotations

from dataclasses import dataclass

CHAR_OFFSET = 31
_MASK16 = 0xFFFF


@dataclass
class Rollsum:
    """Rolling checksum over a window of bytes, kept as two 16-bit sums."""

    count: int = 0
    s1: int = 0
    s2: int = 0

    def reset(self) -> None:
        """Clear the checksum back to its initial state."""
        self.count = self.s1 = self.s2 = 0

    def update(self, data: bytes) -> None:
        """Append all bytes of data to the window."""
        s1, s2 = self.s1, self.s2
        for byte in data:
            s1 += byte
            s2 += s1
        n = len(data)
        s1 += n * CHAR_OFFSET
        s2 += (n * (n + 1) // 2) * CHAR_OFFSET
        self.count += n
        self.s1 = s1 & _MASK16
        self.s2 = s2 & _MASK16

    def rollin(self, in_byte: int) -> None:
        """Append one byte to the window."""
        self.s1 = (self.s1 + in_byte + CHAR_OFFSET) & _MASK16
        self.s2 = (self.s2 + self.s1) & _MASK16
        self.count += 1

    def rollout(self, out_byte: int) -> None:
        """Remove the oldest byte from the window."""
        self.s1 = (self.s1 - (out_byte + CHAR_OFFSET)) & _MASK16
        self.s2 = (self.s2 - self.count * (out_byte + CHAR_OFFSET)) & _MASK16
        self.count -= 1

    def rotate(self, out_byte: int, in_byte: int) -> None:
        """Slide the window by one byte: drop out_byte, append in_byte."""
        self.s1 = (self.s1 + in_byte - out_byte) & _MASK16
        self.s2 = (self.s2 + self.s1 - self.count * (out_byte + CHAR_OFFSET)) & _MASK16

    def digest(self) -> int:
        """Return the 32-bit checksum value."""
        return ((self.s2 & _MASK16) << 16) | (self.s1 & _MASK16)