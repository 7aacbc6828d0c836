"""Length-prefixed chunk framing of packets over a stream socket."""

from __future__ import annotations

import logging
import select
import socket
from collections import deque
from typing import Deque, List

_log = logging.getLogger(__name__)

CHUNK_SIZE = 32768
HEADER_SIZE = 2
END_HEADER = b"\x00\x00"
BUFFER_SIZE = 1024
DEFAULT_MAX_CLIENTS = 192
POLL_TIMEOUT = 1.0
MAX_SEND_RETRIES = 100


class ClientDisconnected(ConnectionError):
    """The peer on the other end of a socket has gone away."""

    def __init__(self, fd: int) -> None:
        super().__init__(f"peer disconnected (SFD: {fd})")
        self.fd = fd


def encode_frames(data: bytes) -> bytes:
    """Split ``data`` into chunks, each preceded by its 2-byte big-endian size.

    The frame ends with a zero-size header.
    """
    view = memoryview(bytes(data))
    out = bytearray()
    for offset in range(0, len(view), CHUNK_SIZE):
        chunk = view[offset:offset + CHUNK_SIZE]
        out += len(chunk).to_bytes(HEADER_SIZE, "big")
        out += chunk
    out += END_HEADER
    return bytes(out)


class FrameDecoder:
    """Reassembles packets from framed bytes fed in arbitrary pieces."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._packet = bytearray()

    def feed(self, data: bytes) -> List[bytes]:
        """Add received bytes and return every packet they complete, in order."""
        self._buffer += data
        packets: List[bytes] = []
        while len(self._buffer) >= HEADER_SIZE:
            size = int.from_bytes(self._buffer[:HEADER_SIZE], "big")
            if size == 0:
                del self._buffer[:HEADER_SIZE]
                packets.append(bytes(self._packet))
                self._packet.clear()
                continue
            if len(self._buffer) < HEADER_SIZE + size:
                break
            self._packet += self._buffer[HEADER_SIZE:HEADER_SIZE + size]
            del self._buffer[:HEADER_SIZE + size]
        return packets


class PacketSocket:
    """A stream socket that sends and receives whole framed packets."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._decoder = FrameDecoder()
        self._ready: Deque[bytes] = deque()

    @classmethod
    def listen(cls, port: int, max_clients: int = DEFAULT_MAX_CLIENTS) -> "PacketSocket":
        """Open a server socket listening on all interfaces on ``port``."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("", port))
            sock.listen(max_clients)
        except OSError:
            sock.close()
            raise
        return cls(sock)

    @classmethod
    def connect(cls, host: str, port: int) -> "PacketSocket":
        """Open a connection to ``host``:``port``."""
        return cls(socket.create_connection((host, port)))

    def accept(self) -> "PacketSocket":
        """Accept one incoming connection."""
        conn, _ = self._sock.accept()
        return type(self)(conn)

    def fileno(self) -> int:
        """The socket's file descriptor, or -1 once closed."""
        return self._sock.fileno()

    @property
    def closed(self) -> bool:
        return self._sock.fileno() == -1

    def send_packet(self, data: bytes) -> None:
        """Send one packet; failures are logged, not raised."""
        if self.closed or not data:
            _log.warning("Skipping send: invalid fd or empty data")
            return
        fd = self.fileno()
        pending = memoryview(encode_frames(data))
        try:
            retries = 0
            while pending:
                retries += 1
                if retries > MAX_SEND_RETRIES:
                    _log.warning("Max retries reached while sending data (SFD: %d)", fd)
                    break
                _, writable, _ = select.select([], [self._sock], [], POLL_TIMEOUT)
                if not writable:
                    continue
                sent = self._sock.send(pending)
                pending = pending[sent:]
            _log.debug("Sent a packet of size %d (SFD: %d)", len(data), fd)
        except OSError as err:
            _log.error("Error while sending packet (SFD: %d): %s", fd, err)

    def receive_packet(self) -> bytes:
        """Block until a whole packet arrives and return it.

        Returns empty bytes if the socket is closed or unusable; raises
        ``ClientDisconnected`` when the peer hangs up.
        """
        while True:
            if self._ready:
                return self._ready.popleft()
            if self.closed:
                return b""
            fd = self.fileno()
            try:
                readable, _, _ = select.select([self._sock], [], [], POLL_TIMEOUT)
            except (OSError, ValueError):
                return b""
            if not readable:
                continue
            try:
                chunk = self._sock.recv(BUFFER_SIZE)
            except (ConnectionResetError, BrokenPipeError) as err:
                raise ClientDisconnected(fd) from err
            if not chunk:
                raise ClientDisconnected(fd)
            self._ready.extend(self._decoder.feed(chunk))

    def close(self) -> None:
        """Close the socket; closing twice does nothing."""
        if not self.closed:
            self._sock.close()