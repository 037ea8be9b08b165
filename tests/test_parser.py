import pytest

from spongenet.buffer import Buffer
from spongenet.parser import (
    NetParser,
    ParseError,
    ParseResult,
    pack_u8,
    pack_u16,
    pack_u32,
)


def test_parse_result_names():
    parser = NetParser(b"")
    with pytest.raises(ParseError) as info:
        parser.u8()
    assert str(info.value.result) == "PacketTooShort"
    assert str(ParseError(ParseResult.BadChecksum).result) == "BadChecksum"
    assert str(ParseError(ParseResult.TruncatedPacket).result) == "TruncatedPacket"


def test_pack_u16_network_order():
    assert pack_u16(0x1234) == b"\x12\x34"


def test_pack_lengths():
    assert len(pack_u32(7)) == 4
    assert len(pack_u16(7)) == 2
    assert len(pack_u8(7)) == 1


@pytest.mark.parametrize("value", [0, 1, 0xFF, 0xABCD, 0xDEADBEEF, 0xFFFFFFFF])
def test_u32_round_trip(value):
    assert NetParser(pack_u32(value)).u32() == value


@pytest.mark.parametrize("value", [0, 1, 0xFF, 0xABCD, 0xFFFF])
def test_u16_round_trip(value):
    assert NetParser(pack_u16(value)).u16() == value


def test_mixed_sequence_round_trip():
    data = pack_u8(4) + pack_u16(513) + pack_u32(123456789) + b"rest"
    parser = NetParser(Buffer(data))
    assert parser.u8() == 4
    assert parser.u16() == 513
    assert parser.u32() == 123456789
    assert parser.buffer().copy() == b"rest"


def test_pack_truncates_to_width():
    assert pack_u8(0x1FF) == pack_u8(0xFF)
    assert pack_u16(0x10000) == pack_u16(0)


def test_too_short_raises():
    parser = NetParser(b"\x01\x02\x03")
    with pytest.raises(ParseError) as info:
        parser.u32()
    assert info.value.result is ParseResult.PacketTooShort


def test_too_short_leaves_buffer_untouched():
    parser = NetParser(b"\x01")
    with pytest.raises(ParseError):
        parser.u16()
    assert parser.u8() == 1


def test_remove_prefix():
    parser = NetParser(b"abcdef")
    parser.remove_prefix(4)
    assert parser.buffer().copy() == b"ef"
    with pytest.raises(ParseError) as info:
        parser.remove_prefix(3)
    assert info.value.result is ParseResult.PacketTooShort


def test_parser_does_not_consume_original_buffer():
    original = Buffer(b"\x00\x01\x02")
    parser = NetParser(original)
    parser.u8()
    assert original.copy() == b"\x00\x01\x02"
    assert len(parser.buffer()) == 2