"""Thin, counted wrappers over UDP, TCP and Unix-domain stream sockets."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

from .address import Address
from .buffer import Buffer, BufferList, BufferViewList, BytesLike
from .file_descriptor import FileDescriptor
from .util import system_call

Payload = Union[BufferViewList, BufferList, Buffer, BytesLike, str]

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)
_SO_DOMAIN = getattr(socket, "SO_DOMAIN", None)


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    _DOMAIN: int = socket.AF_INET
    _TYPE: int = socket.SOCK_STREAM

    def __init__(self, domain: int, type_: int, fd: Optional[FileDescriptor] = None) -> None:
        if fd is None:
            sock = system_call("socket", socket.socket, domain, type_, 0)
            super().__init__(sock.detach())
            return
        self._internal = fd._internal
        self._verify(domain, type_)

    @classmethod
    def _adopt(cls, fd: FileDescriptor) -> Socket:
        """Wrap an existing descriptor, checking it has this class's domain and type."""
        obj = cls.__new__(cls)
        Socket.__init__(obj, cls._DOMAIN, cls._TYPE, fd)
        return obj

    @contextmanager
    def _borrow(self) -> Iterator[socket.socket]:
        """A temporary socket object over our descriptor that never closes it."""
        sock = system_call("socket", socket.socket, -1, -1, -1, self.fd_num)
        try:
            yield sock
        finally:
            sock.detach()

    def _verify(self, domain: int, type_: int) -> None:
        with self._borrow() as sock:
            if _SO_DOMAIN is not None:
                actual_domain = system_call(
                    "getsockopt", sock.getsockopt, socket.SOL_SOCKET, _SO_DOMAIN
                )
            else:
                actual_domain = int(sock.family)
            if actual_domain != domain:
                raise RuntimeError("socket domain mismatch")
            actual_type = system_call(
                "getsockopt", sock.getsockopt, socket.SOL_SOCKET, socket.SO_TYPE
            )
            if actual_type != type_:
                raise RuntimeError("socket type mismatch")

    def _setsockopt(self, level: int, option: int, value: Any) -> None:
        with self._borrow() as sock:
            system_call("setsockopt", sock.setsockopt, level, option, value)

    def bind(self, address: Address) -> None:
        """Bind to a local address."""
        with self._borrow() as sock:
            system_call("bind", sock.bind, address.sockaddr())

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrow() as sock:
            system_call("connect", sock.connect, address.sockaddr())

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        with self._borrow() as sock:
            system_call("shutdown", sock.shutdown, how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The local address of the socket."""
        with self._borrow() as sock:
            return Address.from_sockaddr(system_call("getsockname", sock.getsockname))

    def peer_address(self) -> Address:
        """The address of the socket's peer."""
        with self._borrow() as sock:
            return Address.from_sockaddr(system_call("getpeername", sock.getpeername))

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


def _as_view_list(payload: Payload) -> BufferViewList:
    return payload if isinstance(payload, BufferViewList) else BufferViewList(payload)


def _sendmsg(sock: socket.socket, payload: Payload, destination: Optional[Address]) -> None:
    views = _as_view_list(payload)
    args: tuple = (views.as_views(), (), 0)
    if destination is not None:
        args += (destination.sockaddr(),)
    sent = system_call("sendmsg", sock.sendmsg, *args)
    if sent != len(views):
        raise RuntimeError("datagram payload too big for sendmsg()")


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    _DOMAIN = socket.AF_INET
    _TYPE = socket.SOCK_DGRAM

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raise if it is larger than ``mtu``."""
        buf = bytearray(mtu)
        with self._borrow() as sock:
            nbytes, source = system_call("recvfrom", sock.recvfrom_into, buf, mtu, _MSG_TRUNC)
        if nbytes > mtu:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address.from_sockaddr(source), bytes(buf[:nbytes]))

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        with self._borrow() as sock:
            _sendmsg(sock, payload, destination)
        self._register_write()

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected peer."""
        with self._borrow() as sock:
            _sendmsg(sock, payload, None)
        self._register_write()


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    _DOMAIN = socket.AF_INET
    _TYPE = socket.SOCK_STREAM

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting connections."""
        with self._borrow() as sock:
            system_call("listen", sock.listen, backlog)

    def accept(self) -> TCPSocket:
        """Block until a connection arrives and return a socket connected to the peer."""
        self._register_read()
        with self._borrow() as sock:
            conn, _ = system_call("accept", sock.accept)
        adopted = TCPSocket._adopt(FileDescriptor(conn.detach()))
        assert isinstance(adopted, TCPSocket)
        return adopted


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket built from an existing descriptor."""

    _DOMAIN = socket.AF_UNIX
    _TYPE = socket.SOCK_STREAM

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)