import socket
import threading
import time

import pytest

from raytracer.client import Client, EmptyPacket
from raytracer.framing import PacketSocket
from raytracer.packets import Kiss, Ping, Pong


def _free_port():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def connected():
    port = _free_port()
    server = PacketSocket.listen(port, 4)
    client = Client("127.0.0.1", port)
    peer = server.accept()
    yield client, peer
    client.close()
    peer.close()
    server.close()


def test_connection_refused():
    with pytest.raises(ConnectionError):
        Client("127.0.0.1", _free_port())


def test_receive_packet(connected):
    client, peer = connected
    peer.send_packet(Ping(5).serialize())
    assert client.receive_packet() == Ping(5)


def test_send_packet(connected):
    client, peer = connected
    client.send_packet(Kiss())
    assert peer.receive_packet() == Kiss().serialize()


def test_send_none_is_ignored(connected):
    client, peer = connected
    client.send_packet(None)
    client.send_packet(Pong(9))
    assert peer.receive_packet() == Pong(9).serialize()


def test_empty_packet_raises():
    with socket.create_server(("127.0.0.1", 0)) as srv:
        port = srv.getsockname()[1]
        with Client("127.0.0.1", port) as client:
            conn, _ = srv.accept()
            with conn:
                conn.sendall(b"\x00\x00")
                with pytest.raises(EmptyPacket):
                    client.receive_packet()


def test_queues(connected):
    client, _ = connected
    assert client.has_packet_to_process() is False
    assert client.pop_packet() is None


def test_run_sends_and_receives(connected):
    client, peer = connected
    errors = []
    worker = threading.Thread(target=client.run, args=(errors.append,))
    worker.start()
    try:
        client.push_packet(Pong(3))
        assert peer.receive_packet() == Pong(3).serialize()
        peer.send_packet(Ping(7).serialize())
        deadline = time.monotonic() + 5
        while not client.has_packet_to_process() and time.monotonic() < deadline:
            time.sleep(0.01)
        assert client.pop_packet() == Ping(7)
    finally:
        client.stop()
        worker.join(timeout=5)
    assert errors == []
    assert not worker.is_alive()


def test_run_reports_disconnection(connected):
    client, peer = connected
    errors = []
    worker = threading.Thread(target=client.run, args=(errors.append,))
    worker.start()
    peer.close()
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert len(errors) == 1
    assert isinstance(errors[0], ConnectionError)


def test_close_via_context_manager():
    port = _free_port()
    server = PacketSocket.listen(port, 4)
    try:
        with Client("127.0.0.1", port) as client:
            assert client.fileno() >= 0
        assert client.fileno() == -1
    finally:
        server.close()