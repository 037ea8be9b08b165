"""File descriptors for existing persistent Linux TUN and TAP devices."""

from __future__ import annotations

import fcntl
import os
import struct

from .file_descriptor import FileDescriptor
from .util import system_call

CLONEDEV = "/dev/net/tun"
TUNSETIFF = 0x400454CA
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
IFNAMSIZ = 16

# struct ifreq: interface name, then the flags short, padded to the union's size.
_IFREQ = struct.Struct(f"{IFNAMSIZ}sH22x")


class TunTapFD(FileDescriptor):
    """A descriptor attached to a TUN (IP datagrams) or TAP (Ethernet frames) device."""

    def __init__(self, devname: str, is_tun: bool) -> None:
        super().__init__(system_call("open", os.open, CLONEDEV, os.O_RDWR))
        flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
        name = devname.encode()[: IFNAMSIZ - 1]
        request = _IFREQ.pack(name, flags)
        try:
            system_call("ioctl", fcntl.ioctl, self.fd_num, TUNSETIFF, request)
        except BaseException:
            self.close()
            raise


class TunFD(TunTapFD):
    """A descriptor attached to an existing TUN device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor attached to an existing TAP device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)