"""Read-only byte buffers that can cheaply discard bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Union

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """A shared read-only byte string that can discard bytes from its front."""

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: BytesLike = b"") -> None:
        self._storage = bytes(data)
        self._offset = 0

    def _clone(self) -> Buffer:
        twin = Buffer.__new__(Buffer)
        twin._storage = self._storage
        twin._offset = self._offset
        return twin

    def view(self) -> memoryview:
        """A zero-copy view of the remaining bytes."""
        return memoryview(self._storage)[self._offset :]

    def __bytes__(self) -> bytes:
        return self.copy()

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __getitem__(self, index):
        item = self.view()[index]
        return bytes(item) if isinstance(index, slice) else item

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return self.view() == other.view()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.view() == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Buffer({self.copy()!r})"

    def copy(self) -> bytes:
        """The remaining bytes as a new bytes object."""
        return bytes(self.view())

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes without copying."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer.remove_prefix: not enough bytes")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0


class BufferList:
    """A discontiguous byte string made of several Buffers."""

    def __init__(self, data: Buffer | BytesLike | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if data is None:
            return
        if isinstance(data, Buffer):
            self._buffers.append(data._clone())
        else:
            self._buffers.append(Buffer(data))

    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying Buffers, in order."""
        return tuple(self._buffers)

    def append(self, other: BufferList | Buffer | BytesLike) -> None:
        """Append another BufferList (or anything one can be built from)."""
        if not isinstance(other, BufferList):
            other = BufferList(other)
        self._buffers.extend(buf._clone() for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Return the content as a single Buffer; only valid if contiguous."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._clone()
        raise ValueError(
            "BufferList: use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the Buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList.remove_prefix: not enough bytes")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def concatenate(self) -> bytes:
        """All bytes as one new bytes object."""
        return b"".join(buf.view() for buf in self._buffers)


class BufferViewList:
    """A non-owning view of a discontiguous byte string."""

    def __init__(self, data: BufferList | Buffer | BytesLike | str) -> None:
        if isinstance(data, str):
            data = data.encode()
        if isinstance(data, BufferList):
            views: Iterable[memoryview] = (buf.view() for buf in data.buffers())
        elif isinstance(data, Buffer):
            views = (data.view(),)
        else:
            views = (memoryview(data).cast("B"),)
        self._views: deque[memoryview] = deque(views)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the views."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferViewList.remove_prefix: not enough bytes")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_views(self) -> list[memoryview]:
        """The views as a list, ready for scatter/gather writes."""
        return list(self._views)