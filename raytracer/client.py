"""Network client of the render cluster."""

from __future__ import annotations

import logging
import select
from typing import Callable, Optional

from raytracer.channel import Channel
from raytracer.framing import PacketSocket
from raytracer.packets import Packet

_log = logging.getLogger(__name__)

POLL_TIMEOUT = 0.2


class EmptyPacket(ValueError):
    """An empty packet was received."""

    def __init__(self) -> None:
        super().__init__("received an empty packet")


class Client:
    """A connection to the render server with queues of packets in and out."""

    def __init__(self, server_address: str, port: int) -> None:
        try:
            self._socket = PacketSocket.connect(server_address, port)
        except OSError as err:
            raise ConnectionError(
                f"could not connect to {server_address} on port {port}: "
                f"{err.strerror or err}"
            ) from err
        self._to_send = Channel()
        self._to_process = Channel()
        self._running = False
        _log.info("Server successfully connected to %s on port %d", server_address, port)

    def fileno(self) -> int:
        return self._socket.fileno()

    def send_packet(self, packet: Optional[Packet]) -> None:
        """Send a packet now; None is ignored."""
        if packet is None:
            return
        self._socket.send_packet(packet.serialize())

    def receive_packet(self) -> Packet:
        """Block until a packet arrives and decode it."""
        raw = self._socket.receive_packet()
        if not raw:
            raise EmptyPacket()
        _log.debug("Received Packet")
        return Packet.from_bytes(raw)

    def push_packet(self, packet: Packet) -> None:
        """Queue a packet to be sent by ``run``."""
        self._to_send.push(packet)

    def pop_packet(self) -> Optional[Packet]:
        """Take the oldest received packet, or None if there is none."""
        return self._to_process.pop()

    def has_packet_to_process(self) -> bool:
        return not self._to_process.empty()

    def run(self, on_error: Callable[[BaseException], None]) -> None:
        """Send queued packets and collect incoming ones until stopped.

        Any error ends the loop and is handed to ``on_error``.
        """
        self._running = True
        try:
            while self._running:
                outgoing = self._to_send.pop()
                if outgoing is not None:
                    self.send_packet(outgoing)
                readable, _, _ = select.select([self._socket], [], [], POLL_TIMEOUT)
                if readable:
                    self._to_process.push(self.receive_packet())
        except Exception as exc:  # noqa: BLE001 - handed to the caller
            on_error(exc)
        finally:
            self._running = False

    def stop(self) -> None:
        self._running = False

    def close(self) -> None:
        self._running = False
        if not self._socket.closed:
            self._socket.close()
            _log.info("Disconnecting from server.")

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()