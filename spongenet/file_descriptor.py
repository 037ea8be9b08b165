"""A reference-counted handle on a kernel file descriptor."""

from __future__ import annotations

import os
import sys
from typing import Optional

from .buffer import Buffer, BufferList, BufferViewList, BytesLike
from .util import system_call

_MAX_READ = 1024 * 1024


class _FDWrapper:
    """The shared state behind every duplicate of a FileDescriptor."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        system_call("close", os.close, self.fd)
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A file descriptor that tracks EOF and read/write counts, closed when unused."""

    def __init__(self, fd: int) -> None:
        self._internal = _FDWrapper(fd)

    @classmethod
    def _from_wrapper(cls, wrapper: _FDWrapper) -> FileDescriptor:
        twin = cls.__new__(cls)
        twin._internal = wrapper
        return twin

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def read(self, limit: Optional[int] = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); fewer may be returned."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        data = system_call("read", os.read, self.fd_num, size)
        if size > 0 and not data:
            self._internal.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(
        self, data: BufferViewList | BufferList | Buffer | BytesLike | str, write_all: bool = True
    ) -> int:
        """Write ``data``, looping until all is written if ``write_all``; return bytes written."""
        pending = data if isinstance(data, BufferViewList) else BufferViewList(data)
        total = 0
        while True:
            written = system_call("writev", os.writev, self.fd_num, pending.as_views())
            if written == 0 and len(pending) != 0:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > len(pending):
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            pending.remove_prefix(written)
            total += written
            if not (write_all and len(pending)):
                return total

    def close(self) -> None:
        """Close the underlying descriptor for every duplicate."""
        self._internal.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle sharing the same descriptor and counters."""
        return FileDescriptor._from_wrapper(self._internal)

    def set_blocking(self, blocking_state: bool) -> None:
        """Make the descriptor blocking (True) or non-blocking (False)."""
        system_call("fcntl", os.set_blocking, self.fd_num, blocking_state)

    @property
    def fd_num(self) -> int:
        """The descriptor number."""
        return self._internal.fd

    @property
    def eof(self) -> bool:
        """Whether a read has reached end of file."""
        return self._internal.eof

    @property
    def closed(self) -> bool:
        """Whether the descriptor has been closed."""
        return self._internal.closed

    @property
    def read_count(self) -> int:
        """How many times the descriptor has been read."""
        return self._internal.read_count

    @property
    def write_count(self) -> int:
        """How many times the descriptor has been written."""
        return self._internal.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.closed:
            self.close()