"""Server-side sessions, one per connected client."""

from __future__ import annotations

import enum
import logging
import time
from typing import Dict, List

from raytracer.framing import PacketSocket
from raytracer.packets import Kiss, Ping
from raytracer.tile import Tile

_log = logging.getLogger(__name__)


def current_timestamp() -> int:
    """Milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


class SessionState(enum.Enum):
    READY = "ready"
    RENDERING = "rendering"
    DEADASS = "deadass"


class Session:
    """A connected client: its socket, latency and current work."""

    def __init__(self, sock: PacketSocket, session_id: int) -> None:
        self.id = session_id
        self.control_socket = sock
        self.latency = 0
        self.last_latency_refresh = time.monotonic()
        self.state = SessionState.READY
        self.current_tile = Tile()

    def refresh_latency(self) -> None:
        """Send a ping stamped with the current time; the pong gives the latency."""
        self.control_socket.send_packet(Ping(current_timestamp()).serialize())


class SessionManager:
    """Keeps one session for each client socket, keyed by file descriptor."""

    def __init__(self) -> None:
        self._sessions_created = 0
        self._sessions: Dict[int, Session] = {}

    def create_session(self, sock: PacketSocket) -> Session:
        """Create a session for ``sock`` unless it has one; return its session."""
        fd = sock.fileno()
        existing = self._sessions.get(fd)
        if existing is not None:
            return existing
        session = Session(sock, self._sessions_created)
        self._sessions_created += 1
        self._sessions[fd] = session
        return session

    def close_session(self, sock: PacketSocket) -> None:
        """Close the session of ``sock``; raises KeyError if it has none."""
        fd = sock.fileno()
        session = self._sessions[fd]
        session.control_socket.close()
        del self._sessions[fd]

    def close_all_sessions(self) -> None:
        """Tell every client to disconnect and close all sessions."""
        for session in self._sessions.values():
            session.control_socket.send_packet(Kiss().serialize())
            session.control_socket.close()
        self._sessions.clear()

    def has_session(self, sock: PacketSocket) -> bool:
        return sock.fileno() in self._sessions

    def sessions(self) -> List[Session]:
        return list(self._sessions.values())

    def get_session(self, sock: PacketSocket) -> Session:
        """The session of ``sock``; raises KeyError if it has none."""
        return self._sessions[sock.fileno()]