import socket

import pytest

from spongenet.address import Address
from spongenet.buffer import BufferList
from spongenet.file_descriptor import FileDescriptor
from spongenet.socket_wrappers import LocalStreamSocket, TCPSocket, UDPSocket
from spongenet.util import UnixError

LOCALHOST = "127.0.0.1"


def _bound_udp() -> UDPSocket:
    sock = UDPSocket()
    sock.bind(Address.from_ip(LOCALHOST, 0))
    return sock


def test_udp_round_trip():
    with _bound_udp() as receiver, _bound_udp() as sender:
        sender.sendto(receiver.local_address(), b"hello")
        dgram = receiver.recv()
        assert dgram.payload == b"hello"
        assert dgram.source_address == sender.local_address()
        assert receiver.read_count == 1
        assert sender.write_count == 1


def test_udp_local_address_is_bound_ip():
    with _bound_udp() as sock:
        assert sock.local_address().ip() == LOCALHOST


def test_udp_oversized_datagram_raises():
    with _bound_udp() as receiver, _bound_udp() as sender:
        sender.sendto(receiver.local_address(), b"abcdef")
        with pytest.raises(RuntimeError, match="oversized"):
            receiver.recv(mtu=2)
        assert receiver.read_count == 0


def test_udp_connected_send_of_buffer_list():
    with _bound_udp() as receiver, _bound_udp() as sender:
        sender.connect(receiver.local_address())
        payload = BufferList(b"ab")
        payload.append(b"cd")
        sender.send(payload)
        assert receiver.recv().payload == b"abcd"


def _connected_pair():
    listener = TCPSocket()
    listener.set_reuseaddr()
    listener.bind(Address.from_ip(LOCALHOST, 0))
    listener.listen()
    client = TCPSocket()
    client.connect(listener.local_address())
    server = listener.accept()
    return listener, client, server


def test_tcp_accept_and_exchange():
    listener, client, server = _connected_pair()
    with listener, client, server:
        assert server.peer_address() == client.local_address()
        assert client.peer_address() == server.local_address()
        assert listener.read_count == 1
        client.write(b"ping")
        assert server.read(4) == b"ping"


def test_tcp_shutdown_write_gives_peer_eof():
    listener, client, server = _connected_pair()
    with listener, client, server:
        server.shutdown(socket.SHUT_WR)
        assert server.write_count == 1
        assert client.read() == b""
        assert client.eof is True


def test_tcp_shutdown_both_counts_read_and_write():
    listener, client, server = _connected_pair()
    with listener, client, server:
        client.shutdown(socket.SHUT_RDWR)
        assert (client.read_count, client.write_count) == (1, 1)


def test_shutdown_unconnected_raises_unix_error():
    with TCPSocket() as sock:
        with pytest.raises(UnixError) as info:
            sock.shutdown(socket.SHUT_RDWR)
        assert info.value.attempt == "shutdown"


def test_set_reuseaddr_sets_option():
    with TCPSocket() as sock:
        probe = socket.fromfd(sock.fd_num, socket.AF_INET, socket.SOCK_STREAM)
        try:
            before = bool(probe.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR))
            sock.set_reuseaddr()
            after = bool(probe.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR))
        finally:
            probe.close()
        assert before is False
        assert after is True


def test_local_stream_socket_pair():
    a, b = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
    left = LocalStreamSocket(FileDescriptor(a.detach()))
    right = LocalStreamSocket(FileDescriptor(b.detach()))
    with left, right:
        left.write(b"over the wire")
        assert right.read() == b"over the wire"


def test_local_stream_socket_rejects_wrong_domain():
    udp = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    with FileDescriptor(udp.detach()) as fd:
        with pytest.raises(RuntimeError, match="domain mismatch"):
            LocalStreamSocket(fd)


def test_local_stream_socket_rejects_wrong_type():
    a, b = socket.socketpair(socket.AF_UNIX, socket.SOCK_DGRAM)
    b.close()
    with FileDescriptor(a.detach()) as fd:
        with pytest.raises(RuntimeError, match="type mismatch"):
            LocalStreamSocket(fd)