"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from .util import TaggedError


def _gai_error(attempt: str, exc: socket.gaierror) -> TaggedError:
    code = exc.errno if exc.errno is not None else 0
    return TaggedError(attempt, code, exc.strerror or str(exc))


class Address:
    """A socket address, usually IPv4, with conversions to common forms."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, family: int, sockaddr: Any) -> None:
        self._family = family
        self._sockaddr = sockaddr

    @classmethod
    def _lookup(cls, node: str, service: str, flags: int) -> Address:
        try:
            results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
        except socket.gaierror as exc:
            raise _gai_error(f"getaddrinfo({node}, {service})", exc) from exc
        if not results:
            raise RuntimeError("getaddrinfo returned successfully but with no results")
        family, _, _, _, sockaddr = results[0]
        return cls(family, sockaddr)

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a hostname and a service name (or numeric port)."""
        return cls._lookup(hostname, service, getattr(socket, "AI_ALL", 0))

    @classmethod
    def from_ip(cls, ip: str, port: int = 0) -> Address:
        """Build from a dotted-quad string and a numeric port, without any lookup."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        return cls._lookup(ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV)

    @classmethod
    def from_sockaddr(cls, sockaddr: Any) -> Address:
        """Build from an address as returned by the socket module."""
        if isinstance(sockaddr, (str, bytes)):
            return cls(socket.AF_UNIX, sockaddr)
        sockaddr = tuple(sockaddr)
        if len(sockaddr) == 2:
            return cls(socket.AF_INET, sockaddr)
        if len(sockaddr) == 4:
            return cls(socket.AF_INET6, sockaddr)
        raise ValueError(f"unrecognised socket address: {sockaddr!r}")

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build from a 32-bit numeric IPv4 address (port 0)."""
        return cls(socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0))

    @property
    def family(self) -> int:
        """The address family."""
        return self._family

    def ip_port(self) -> tuple[str, int]:
        """The numeric host string and the port."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError(
                "getnameinfo", getattr(socket, "EAI_FAMILY", 0), "address family not supported"
            )
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise _gai_error("getnameinfo", exc) from exc
        return host, int(port)

    def ip(self) -> str:
        """The numeric host string, e.g. ``"18.243.0.1"``."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The numeric port."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer."""
        if self._family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def sockaddr(self) -> Any:
        """The address in the form the socket module expects."""
        return self._sockaddr

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address({self._family!r}, {self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))