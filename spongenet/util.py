"""Error types, system-call checking, randomness, timing, checksums and hexdumps."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import Any, Callable, TextIO, TypeVar, Union

T = TypeVar("T")
BytesLike = Union[bytes, bytearray, memoryview]

_PROGRAM_START_NS = time.monotonic_ns()


class TaggedError(OSError):
    """An OSError that also records what was being attempted."""

    def __init__(self, attempt: str, code: int, message: str) -> None:
        super().__init__(code, message)
        self.attempt = attempt

    def __str__(self) -> str:
        return f"{self.attempt}: {self.strerror}"


class UnixError(TaggedError):
    """A TaggedError for a failed system call."""

    def __init__(self, attempt: str, code: int) -> None:
        super().__init__(attempt, code, os.strerror(code))


def system_call(attempt: str, func: Callable[..., T], *args: Any) -> T:
    """Call ``func(*args)``, turning an OSError into a UnixError naming ``attempt``."""
    try:
        return func(*args)
    except OSError as exc:
        if isinstance(exc, TaggedError) or exc.errno is None:
            raise
        raise UnixError(attempt, exc.errno) from exc


def get_random_generator() -> random.Random:
    """A Mersenne Twister generator seeded with plenty of system entropy."""
    return random.Random(int.from_bytes(os.urandom(624 * 4), "little"))


def timestamp_ms() -> int:
    """Milliseconds since the program started."""
    return (time.monotonic_ns() - _PROGRAM_START_NS) // 1_000_000


class InternetChecksum:
    """The Internet checksum, computed incrementally over any number of chunks."""

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._parity = False

    def add(self, data: BytesLike) -> None:
        """Fold more bytes into the running sum."""
        total = self._sum
        parity = self._parity
        for byte in bytes(data):
            total += byte if parity else byte << 8
            parity = not parity
        self._sum = total & 0xFFFFFFFF
        self._parity = parity

    def value(self) -> int:
        """The checksum in host byte order."""
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte < 0x7F else "."


def format_hexdump(data: BytesLike, indent: int = 0) -> str:
    """Render bytes as offset, grouped hex and printable characters, 16 per line."""
    data = bytes(data)
    prefix = " " * indent
    parts: list[str] = []
    chars = ""
    for printed, byte in enumerate(data):
        if printed % 16 == 0:
            if printed:
                parts.append(f"    {chars}\n")
                chars = ""
            parts.append(f"{prefix}{printed:08x}:    ")
        elif printed % 2 == 0:
            parts.append(" ")
        parts.append(f"{byte:02x}")
        chars += _printable(byte)
    remainder = (16 - len(data) % 16) % 16
    parts.append(" " * (2 * remainder + remainder // 2 + 4))
    parts.append(chars or " ")
    parts.append("\n\n")
    return "".join(parts)


def hexdump(data: BytesLike, indent: int = 0, file: TextIO | None = None) -> None:
    """Write a hexdump of ``data`` to ``file`` (standard output by default)."""
    out = file if file is not None else sys.stdout
    out.write(format_hexdump(data, indent))
    out.flush()