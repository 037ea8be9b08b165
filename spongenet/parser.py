"""Parsing and serialising big-endian integers in network packets."""

from __future__ import annotations

from enum import Enum

from .buffer import Buffer, BytesLike


class ParseResult(Enum):
    """The outcome of parsing or unparsing a datagram, segment, frame or message."""

    NoError = 0
    BadChecksum = 1
    PacketTooShort = 2
    WrongIPVersion = 3
    HeaderTooShort = 4
    TruncatedPacket = 5
    Unsupported = 6

    def __str__(self) -> str:
        return self.name


class ParseError(ValueError):
    """Raised when parsing fails; ``result`` says why."""

    def __init__(self, result: ParseResult) -> None:
        super().__init__(str(result))
        self.result = result


class NetParser:
    """Reads network-byte-order integers from the front of a Buffer."""

    def __init__(self, buffer: Buffer | BytesLike) -> None:
        source = buffer.view() if isinstance(buffer, Buffer) else buffer
        self._buffer = Buffer(source)

    def buffer(self) -> Buffer:
        """The bytes not yet consumed."""
        return Buffer(self._buffer.view())

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            raise ParseError(ParseResult.PacketTooShort)

    def _parse_int(self, length: int) -> int:
        self._check_size(length)
        value = int.from_bytes(self._buffer[:length], "big")
        self._buffer.remove_prefix(length)
        return value

    def u32(self) -> int:
        """Parse a 32-bit integer in network byte order."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit integer in network byte order."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes."""
        self._check_size(n)
        self._buffer.remove_prefix(n)


def _pack(value: int, length: int) -> bytes:
    return (value & ((1 << (8 * length)) - 1)).to_bytes(length, "big")


def pack_u32(value: int) -> bytes:
    """Serialise a 32-bit integer in network byte order."""
    return _pack(value, 4)


def pack_u16(value: int) -> bytes:
    """Serialise a 16-bit integer in network byte order."""
    return _pack(value, 2)


def pack_u8(value: int) -> bytes:
    """Serialise an 8-bit integer."""
    return _pack(value, 1)