import pytest

from raytracer.packets import Cestciao, Kiss, PacketType, Ping, Pong
from raytracer.server_handlers import (
    ClockSkew,
    ServerPacketDispatcher,
    handle_cestciao,
    handle_pong,
)
from raytracer.session import Session, SessionState, current_timestamp


class FakeSocket:
    def fileno(self):
        return 3

    def send_packet(self, data):
        pass

    def close(self):
        pass


def make_session():
    return Session(FakeSocket(), 0)


def test_pong_sets_latency():
    session = make_session()
    handle_pong(Pong(current_timestamp() - 50), session)
    assert session.latency >= 50


def test_pong_from_future_raises():
    session = make_session()
    with pytest.raises(ClockSkew):
        handle_pong(Pong(current_timestamp() + 10_000_000), session)
    assert session.latency == 0


def test_cestciao_marks_session_dead():
    session = make_session()
    handle_cestciao(Cestciao(), session)
    assert session.state is SessionState.DEADASS


def test_default_handlers():
    dispatcher = ServerPacketDispatcher()
    assert dispatcher.handler_for(PacketType.PONG) is handle_pong
    assert dispatcher.handler_for(PacketType.CESTCIAO) is handle_cestciao
    assert dispatcher.handler_for(PacketType.PING) is None


def test_dispatch_routes_packet():
    dispatcher = ServerPacketDispatcher()
    session = make_session()
    assert dispatcher.dispatch(Cestciao(), session) is True
    assert session.state is SessionState.DEADASS


def test_dispatch_unhandled_packet():
    dispatcher = ServerPacketDispatcher()
    session = make_session()
    assert dispatcher.dispatch(Ping(1), session) is False
    assert session.state is SessionState.READY


def test_register_custom_handler():
    dispatcher = ServerPacketDispatcher()
    seen = []
    dispatcher.register(PacketType.KISS, lambda p, s: seen.append((p, s)))
    session = make_session()
    packet = Kiss()
    assert dispatcher.dispatch(packet, session) is True
    assert seen == [(packet, session)]


def test_register_keeps_first_handler():
    dispatcher = ServerPacketDispatcher()
    dispatcher.register(PacketType.PONG, lambda p, s: None)
    assert dispatcher.handler_for(PacketType.PONG) is handle_pong