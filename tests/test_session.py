import socket

import pytest

from raytracer.framing import PacketSocket
from raytracer.packets import Kiss, Packet, Ping
from raytracer.session import (
    Session,
    SessionManager,
    SessionState,
    current_timestamp,
)
from raytracer.tile import Tile


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    left, right = PacketSocket(a), PacketSocket(b)
    yield left, right
    left.close()
    right.close()


def test_new_session_defaults(pair):
    left, _ = pair
    session = Session(left, 7)
    assert session.id == 7
    assert session.control_socket is left
    assert session.latency == 0
    assert session.state is SessionState.READY
    assert session.current_tile == Tile()


def test_refresh_latency_sends_ping(pair):
    left, right = pair
    before = current_timestamp()
    Session(left, 0).refresh_latency()
    packet = Packet.from_bytes(right.receive_packet())
    after = current_timestamp()
    assert isinstance(packet, Ping)
    assert before <= packet.timestamp <= after


def test_current_timestamp_is_monotonic_enough():
    first = current_timestamp()
    second = current_timestamp()
    assert second >= first


def test_create_session_assigns_increasing_ids():
    manager = SessionManager()
    pairs = [socket.socketpair() for _ in range(2)]
    try:
        socks = [PacketSocket(a) for a, _ in pairs]
        s0 = manager.create_session(socks[0])
        s1 = manager.create_session(socks[1])
        assert (s0.id, s1.id) == (0, 1)
        assert manager.has_session(socks[0]) and manager.has_session(socks[1])
        assert manager.get_session(socks[1]) is s1
        assert set(map(id, manager.sessions())) == {id(s0), id(s1)}
    finally:
        for a, b in pairs:
            a.close()
            b.close()


def test_create_session_twice_keeps_first(pair):
    left, _ = pair
    manager = SessionManager()
    first = manager.create_session(left)
    second = manager.create_session(left)
    assert second is first
    assert len(manager.sessions()) == 1


def test_close_session_closes_socket(pair):
    left, right = pair
    manager = SessionManager()
    manager.create_session(left)
    manager.close_session(left)
    assert left.closed is True
    assert manager.sessions() == []


def test_close_unknown_session_raises(pair):
    left, _ = pair
    with pytest.raises(KeyError):
        SessionManager().close_session(left)


def test_get_unknown_session_raises(pair):
    left, _ = pair
    manager = SessionManager()
    assert manager.has_session(left) is False
    with pytest.raises(KeyError):
        manager.get_session(left)


def test_close_all_sessions_sends_kiss(pair):
    left, right = pair
    manager = SessionManager()
    manager.create_session(left)
    manager.close_all_sessions()
    raw = right.receive_packet()
    assert raw == Kiss().serialize()
    assert isinstance(Packet.from_bytes(raw), Kiss)
    assert left.closed is True
    assert manager.sessions() == []


def test_session_state_can_change(pair):
    left, _ = pair
    session = Session(left, 1)
    session.state = SessionState.RENDERING
    session.current_tile = Tile(0, 0, 4, 4)
    assert session.state is SessionState.RENDERING
    assert session.current_tile.width == 4