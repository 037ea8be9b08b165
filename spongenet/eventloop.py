"""Polling file descriptors and dispatching callbacks when they are ready."""

from __future__ import annotations

import select
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from .file_descriptor import FileDescriptor
from .util import UnixError

Callback = Callable[[], None]
Interest = Callable[[], bool]


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    In = select.POLLIN
    Out = select.POLLOUT


class Result(Enum):
    """What a call to EventLoop.wait_next_event achieved."""

    Success = auto()
    Timeout = auto()
    Exit = auto()


def _always() -> bool:
    return True


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Optional[Callback]

    def service_count(self) -> int:
        if self.direction is Direction.In:
            return self.fd.read_count
        return self.fd.write_count


class EventLoop:
    """Waits for events on file descriptors and runs the matching callbacks."""

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest = _always,
        cancel: Optional[Callback] = None,
    ) -> None:
        """Call ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` holds."""
        self._rules.append(_Rule(fd.duplicate(), direction, callback, interest, cancel))

    def _drop(self, rule: _Rule) -> None:
        if rule.cancel is not None:
            rule.cancel()
        self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once, up to ``timeout_ms`` (negative waits forever), and dispatch callbacks."""
        polled: list[tuple[_Rule, int]] = []
        something_to_poll = False
        for rule in list(self._rules):
            if (rule.direction is Direction.In and rule.fd.eof) or rule.fd.closed:
                self._drop(rule)
                continue
            if rule.interest():
                events = rule.direction.value
                something_to_poll = True
            else:
                events = 0
            polled.append((rule, events))

        if not something_to_poll:
            return Result.Exit

        combined: dict[int, int] = {}
        for rule, events in polled:
            combined[rule.fd.fd_num] = combined.get(rule.fd.fd_num, 0) | events
        poller = select.poll()
        for fd_num, events in combined.items():
            poller.register(fd_num, events)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.Exit
        except OSError as exc:
            raise UnixError("poll", exc.errno or 0) from exc
        if not ready:
            return Result.Timeout

        revents_by_fd = dict(ready)
        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num, 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # Only a hangup: nothing more will ever be read or written.
                self._drop(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd "
                        "and is still interested"
                    )

        return Result.Success