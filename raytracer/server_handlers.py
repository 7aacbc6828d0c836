"""Server-side handling of packets received from cluster clients."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from raytracer.packets import Packet, PacketType, Pong, packet_type_name
from raytracer.session import Session, SessionState, current_timestamp

_log = logging.getLogger(__name__)

Handler = Callable[[Packet, Session], None]


class ClockSkew(RuntimeError):
    """A pong carries a timestamp from the future."""

    def __init__(self, sent: int, now: int) -> None:
        super().__init__(f"pong timestamp {sent} is later than now ({now})")
        self.sent = sent
        self.now = now


def handle_pong(packet: Pong, session: Session) -> None:
    """Set the session's latency from the timestamp echoed by the client."""
    _log.debug("Pong (SID: %d)", session.id)
    now = current_timestamp()
    sent = packet.timestamp
    if sent > now:
        raise ClockSkew(sent, now)
    session.latency = now - sent


def handle_cestciao(packet: Packet, session: Session) -> None:
    """Mark the session of a leaving client as dead."""
    _log.debug("Cestciao (SID: %d)", session.id)
    session.state = SessionState.DEADASS


class ServerPacketDispatcher:
    """Routes each received packet to the handler registered for its type."""

    def __init__(self) -> None:
        self._handlers: Dict[PacketType, Handler] = {}
        self.register(PacketType.PONG, handle_pong)
        self.register(PacketType.CESTCIAO, handle_cestciao)

    def register(self, packet_type: PacketType, handler: Handler) -> None:
        """Register ``handler`` for a packet type, unless one is already set."""
        self._handlers.setdefault(packet_type, handler)
        _log.debug("Registered Packet handler %s", packet_type_name(packet_type))

    def handler_for(self, packet_type: PacketType) -> Optional[Handler]:
        return self._handlers.get(packet_type)

    def dispatch(self, packet: Packet, session: Session) -> bool:
        """Handle ``packet``; return False if no handler is registered for it."""
        _log.debug(
            "Received Packet %s (SID: %d)",
            packet_type_name(packet.packet_type), session.id,
        )
        handler = self.handler_for(packet.packet_type)
        if handler is None:
            _log.debug("No handler has been registered for this kind of Packet. Ignoring.")
            return False
        handler(packet, session)
        return True