"""32-bit wrapping sequence numbers and conversion to absolute 64-bit ones."""

from __future__ import annotations

from dataclasses import dataclass

_MOD = 1 << 32
_HALF = 1 << 31


@dataclass(frozen=True)
class WrappingInt32:
    """A 32-bit integer, expressed relative to an arbitrary initial sequence number."""

    raw_value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_value", self.raw_value % _MOD)

    def __add__(self, other: int) -> WrappingInt32:
        """The point ``other`` steps past this one."""
        if not isinstance(other, int):
            return NotImplemented
        return WrappingInt32(self.raw_value + other)

    def __sub__(self, other: WrappingInt32 | int) -> WrappingInt32 | int:
        """Signed offset from another WrappingInt32, or the point ``other`` steps before."""
        if isinstance(other, WrappingInt32):
            diff = (self.raw_value - other.raw_value) % _MOD
            return diff - _MOD if diff >= _HALF else diff
        if isinstance(other, int):
            return WrappingInt32(self.raw_value - other)
        return NotImplemented

    def __int__(self) -> int:
        return self.raw_value

    def __str__(self) -> str:
        return str(self.raw_value)


def wrap(n: int, isn: WrappingInt32) -> WrappingInt32:
    """Turn an absolute sequence number into a relative 32-bit one."""
    return isn + (n % _MOD)


def unwrap(n: WrappingInt32, isn: WrappingInt32, checkpoint: int) -> int:
    """Return the absolute sequence number that wraps to ``n`` and is closest to ``checkpoint``."""
    offset = (n.raw_value - isn.raw_value) % _MOD
    seqno = checkpoint - (checkpoint % _MOD) + offset
    if seqno > checkpoint:
        if seqno < _MOD:
            return seqno
        if seqno - checkpoint < checkpoint + _MOD - seqno:
            return seqno
        return seqno - _MOD
    if checkpoint - seqno < seqno + _MOD - checkpoint:
        return seqno
    return seqno + _MOD