import socket

import pytest

from spongenet.address import Address
from spongenet.util import TaggedError


def test_from_ip_accessors():
    addr = Address.from_ip("127.0.0.1", 8080)
    assert addr.ip() == "127.0.0.1"
    assert addr.port() == 8080
    assert addr.ip_port() == ("127.0.0.1", 8080)
    assert str(addr) == "127.0.0.1:8080"


def test_default_port_is_zero():
    assert Address.from_ip("10.0.0.1").port() == 0


def test_resolve_numeric():
    assert Address.resolve("127.0.0.1", "8080") == Address.from_ip("127.0.0.1", 8080)


def test_invalid_ip_raises_tagged_error():
    with pytest.raises(TaggedError) as info:
        Address.from_ip("not an ip", 80)
    assert "getaddrinfo(not an ip, 80)" in str(info.value)


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Address.from_ip("127.0.0.1", 70000)


def test_from_ipv4_numeric_loopback():
    assert Address.from_ipv4_numeric(0x7F000001).ip() == "127.0.0.1"


def test_ipv4_numeric_round_trip():
    addr = Address.from_ip("18.243.0.1")
    assert Address.from_ipv4_numeric(addr.ipv4_numeric()) == addr


def test_equality_and_hash():
    a = Address.from_ip("1.1.1.1", 53)
    b = Address.from_ip("1.1.1.1", 53)
    c = Address.from_ip("1.1.1.1", 54)
    assert a == b
    assert hash(a) == hash(b)
    assert a != c


def test_from_sockaddr_round_trip():
    addr = Address.from_ip("8.8.8.8", 53)
    again = Address.from_sockaddr(addr.sockaddr())
    assert again == addr
    assert again.family == socket.AF_INET


def test_unix_address_is_not_ipv4():
    addr = Address.from_sockaddr("/tmp/some.sock")
    assert addr.family == socket.AF_UNIX
    with pytest.raises(ValueError):
        addr.ipv4_numeric()
    with pytest.raises(TaggedError):
        addr.ip_port()


def test_from_sockaddr_rejects_bad_shape():
    with pytest.raises(ValueError):
        Address.from_sockaddr(("1.2.3.4",))