import socket

import pytest

from hrsdk.clients import EventClient, FileClient, RobotConnection
from hrsdk.tcp_client import SocketState


@pytest.fixture
def listener():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(4)
    yield server
    server.close()


def _free_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def _check_connect_succeeds(conn, port):
    with conn:
        conn.connect()
        assert conn.state is SocketState.CONNECTED
        assert conn.robot_ip == "127.0.0.1"
        assert conn.port == port


def _check_connect_twice_refused(conn):
    with conn:
        conn.connect()
        with pytest.raises(ConnectionError):
            conn.connect()
        assert conn.state is SocketState.CONNECTED


def _check_connect_failure_raises(conn):
    conn.max_num_tries = 1
    conn.reconnection_time = 0
    with pytest.raises(ConnectionError):
        conn.connect()
    assert conn.state is SocketState.INVALID


def test_robot_connection_connect_succeeds(listener):
    port = listener.getsockname()[1]
    _check_connect_succeeds(RobotConnection("127.0.0.1", port), port)


def test_event_client_connect_succeeds(listener):
    port = listener.getsockname()[1]
    _check_connect_succeeds(EventClient("127.0.0.1", port), port)


def test_file_client_connect_succeeds(listener):
    port = listener.getsockname()[1]
    _check_connect_succeeds(FileClient("127.0.0.1", port), port)


def test_robot_connection_connect_twice_refused(listener):
    port = listener.getsockname()[1]
    _check_connect_twice_refused(RobotConnection("127.0.0.1", port))


def test_event_client_connect_twice_refused(listener):
    port = listener.getsockname()[1]
    _check_connect_twice_refused(EventClient("127.0.0.1", port))


def test_file_client_connect_twice_refused(listener):
    port = listener.getsockname()[1]
    _check_connect_twice_refused(FileClient("127.0.0.1", port))


def test_robot_connection_connect_failure_raises():
    _check_connect_failure_raises(RobotConnection("127.0.0.1", _free_port()))


def test_event_client_connect_failure_raises():
    _check_connect_failure_raises(EventClient("127.0.0.1", _free_port()))


def test_file_client_connect_failure_raises():
    _check_connect_failure_raises(FileClient("127.0.0.1", _free_port()))


def test_default_retry_settings():
    conn = EventClient("127.0.0.1", 1504)
    assert conn.max_num_tries == 2
    assert conn.reconnection_time == 5.0


def test_data_flows_through_file_client(listener):
    port = listener.getsockname()[1]
    with FileClient("127.0.0.1", port) as conn:
        conn.connect()
        peer, _ = listener.accept()
        try:
            conn.write(b"ping")
            assert peer.recv(8) == b"ping"
            peer.sendall(b"pong")
            assert conn.read(8) == b"pong"
        finally:
            peer.close()