"""Building blocks for a user-space TCP/IP stack: sequence numbers, buffers, parsing, sockets, descriptors, event loop, TUN/TAP."""

__version__ = "0.1.0"