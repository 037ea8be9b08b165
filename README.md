# spongenet

Small pieces for building a TCP/IP stack in user space. The package covers
sequence-number arithmetic, byte buffers, wire parsing, checksums,
addresses, sockets, file descriptors, a poll-based event loop and Linux
TUN/TAP devices.

## Modules

### `spongenet.wrapping_integers`

- `WrappingInt32(raw_value)` is a frozen 32-bit value. Its `raw_value` is
  reduced modulo 2**32.
  - `a + n` steps forward by an integer.
  - `a - n` steps back by an integer.
  - `a - b`, where `b` is another `WrappingInt32`, gives the signed offset
    from `b` to `a`.
  - `str(a)` and `int(a)` give the raw value.
- `wrap(n, isn)` turns an absolute 64-bit sequence number into a
  `WrappingInt32`.
- `unwrap(n, isn, checkpoint)` returns the absolute sequence number that
  wraps to `n` and lies closest to `checkpoint`.

### `spongenet.buffer`

- `Buffer(data)` is a read-only byte string.
  - `remove_prefix(n)` drops bytes from the front without copying. It raises
    `IndexError` if `n` is larger than what remains.
  - It also has `view()` (a `memoryview`), `copy()` and `bytes()`,
    `len()`, indexing and slicing, and `==` against buffers or bytes.
- `BufferList(data)` is a sequence of `Buffer`s.
  - It has `append`, `buffers()`, `remove_prefix`, `len()` and
    `concatenate()`.
  - `to_buffer()` returns the content as a single `Buffer`. It raises
    `ValueError` if the list holds more than one buffer.
- `BufferViewList(data)` holds non-owning `memoryview`s over a `BufferList`,
  a `Buffer`, bytes or a `str`.
  - It has `remove_prefix`, `len()` and `as_views()`. The result of
    `as_views()` is ready for `os.writev` or `socket.sendmsg`.

### `spongenet.util`

- `InternetChecksum(initial_sum=0)` computes the Internet checksum over
  chunks fed in one by one.
  - `add(data)` folds in another chunk.
  - `value()` gives the 16-bit checksum. Run over data that already carries
    a correct checksum, it returns 0.
- `format_hexdump(data, indent=0)` returns a hexdump of `data` as a string,
  16 bytes per line. Each line shows the offset, the bytes in hex and the
  printable characters.
- `hexdump(data, indent=0, file=None)` writes that dump to `file`, or to
  standard output if none is given.
- `timestamp_ms()` returns the milliseconds elapsed since the module was
  imported.
- `get_random_generator()` returns a `random.Random` seeded from
  `os.urandom`.
- `system_call(attempt, func, *args)` calls `func(*args)`. If it raises an
  `OSError`, that becomes a `UnixError` whose message starts with
  `attempt`.
- The exceptions are `TaggedError(attempt, code, message)` and
  `UnixError(attempt, code)`. Both are subclasses of `OSError`.

### `spongenet.parser`

- `NetParser(buffer)` reads big-endian integers from a `Buffer` or from
  bytes.
  - `u8()`, `u16()` and `u32()` each read one integer.
  - `remove_prefix(n)` skips bytes.
  - `buffer()` returns what has not yet been read.
  - Running short of data raises
    `ParseError(ParseResult.PacketTooShort)`.
- `ParseResult` is an enum with these members: `NoError`, `BadChecksum`,
  `PacketTooShort`, `WrongIPVersion`, `HeaderTooShort`, `TruncatedPacket`
  and `Unsupported`. `str()` of a member gives its name.
- `pack_u8`, `pack_u16` and `pack_u32` serialise integers in network byte
  order.

### `spongenet.address`

`Address` has these constructors:

- `Address.resolve(hostname, service)` looks up an IPv4 address.
- `Address.from_ip(ip, port=0)` takes numeric values only and does no
  lookup.
- `Address.from_sockaddr(sockaddr)` takes an address in the form the
  `socket` module returns.
- `Address.from_ipv4_numeric(n)` takes a 32-bit number.

It has these methods and attributes:

- `ip_port()`, `ip()`, `port()`, `ipv4_numeric()`, `sockaddr()` and
  `family`.
- `str()` gives a string such as `"8.8.8.8:53"`.
- Equality comparison and hashing.

Resolver failures raise `TaggedError`.

### `spongenet.file_descriptor`

`FileDescriptor(fd)` is a handle on a kernel descriptor.

- `duplicate()` returns a new handle that shares the same descriptor, flags
  and counters.
- `read(limit=None)` reads at most 1 MiB per call. If a read returns no
  data, it sets `eof`.
- `write(data, write_all=True)` writes with `os.writev`.
- `set_blocking(flag)` switches blocking mode.
- `close()` closes the descriptor.
- It can be used as a context manager, which closes the descriptor on exit.
- It exposes the properties `fd_num`, `eof`, `closed`, `read_count` and
  `write_count`.

A descriptor that is still open when its last handle goes away is closed
then.

### `spongenet.socket_wrappers`

- `UDPSocket()` has these methods:
  - `recv(mtu=65536)`, which returns a `ReceivedDatagram` holding
    `source_address` and `payload`.
  - `sendto(address, payload)`.
  - `send(payload)`.
- `TCPSocket()` has these methods:
  - `listen(backlog=16)`.
  - `accept()`, which blocks and returns a connected `TCPSocket`.
- `LocalStreamSocket(fd)` wraps an existing Unix-domain stream descriptor.
  It checks that the descriptor has the right domain and type.
- All three share these methods: `bind`, `connect`, `shutdown(how)`,
  `local_address()`, `peer_address()` and `set_reuseaddr()`.
- They are `FileDescriptor`s, so they also count reads and writes.

### `spongenet.eventloop`

`EventLoop.add_rule(fd, direction, callback, interest=..., cancel=None)`
registers a `FileDescriptor` for `Direction.In` or `Direction.Out`.

`wait_next_event(timeout_ms)` polls once and runs the callbacks of the
rules that are ready. It returns one of these `Result` values:

- `Result.Success` if at least one rule was triggered.
- `Result.Timeout` if nothing became ready in time.
- `Result.Exit` if no rule is left to poll, or if the poll was interrupted.

Rules are dropped, and their `cancel` callback is called, in these cases:

- The descriptor is closed.
- The rule is for reading and the descriptor has reached EOF.
- The poll reports only a hangup for it.

A callback that neither reads nor writes its descriptor while its rule
stays interested raises `RuntimeError` (busy-wait detection).

### `spongenet.tun`

`TunFD(devname)` and `TapFD(devname)` attach to an existing, persistent
Linux TUN or TAP device through `/dev/net/tun`. A TUN device carries IP
datagrams and a TAP device carries Ethernet frames. Both are subclasses of
`TunTapFD(devname, is_tun)`.

## Example

```python
from spongenet.wrapping_integers import WrappingInt32, wrap, unwrap
from spongenet.parser import NetParser, pack_u16, pack_u32
from spongenet.util import InternetChecksum, format_hexdump

isn = WrappingInt32(2**32 - 2)
seqno = wrap(5, isn)
assert seqno.raw_value == 3
assert unwrap(seqno, isn, 0) == 5

parser = NetParser(pack_u16(0xBEEF) + pack_u32(7))
assert parser.u16() == 0xBEEF
assert parser.u32() == 7

checksum = InternetChecksum()
checksum.add(b"\x45\x00\x00\x1c")
print(hex(checksum.value()))
print(format_hexdump(b"hello, world"))
```

## What it does not do

This package provides building blocks only. It does not include:

- a TCP sender, receiver or connection state machine;
- a byte stream or stream reassembler;
- IP, Ethernet or ARP datagram types;
- a command-line program.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```

The event loop uses `select.poll` and the sockets rely on POSIX behaviour.
Opening TUN/TAP devices requires Linux and a device that already exists.