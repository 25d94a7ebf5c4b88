import socket

import pytest

from hrsdk.tcp_client import NotConnectedError, SocketState, TCPClient


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


def test_new_client_is_invalid():
    assert TCPClient().state is SocketState.INVALID


def test_read_without_connection_raises():
    with pytest.raises(NotConnectedError):
        TCPClient().read(10)


def test_write_without_connection_raises():
    with pytest.raises(NotConnectedError):
        TCPClient().write(b"abc")


def test_setup_connects_and_exchanges_data(listener):
    port = listener.getsockname()[1]
    client = TCPClient()
    client.setup("127.0.0.1", port, 1, 0)
    peer, _ = listener.accept()
    try:
        assert client.state is SocketState.CONNECTED
        assert client.write(b"hello") == 5
        assert peer.recv(16) == b"hello"
        peer.sendall(b"world")
        assert client.read(16) == b"world"
    finally:
        peer.close()
        client.close()


def test_setup_twice_raises(listener):
    port = listener.getsockname()[1]
    with TCPClient() as client:
        client.setup("127.0.0.1", port, 1, 0)
        with pytest.raises(ConnectionError):
            client.setup("127.0.0.1", port, 1, 0)
        assert client.state is SocketState.CONNECTED


def test_setup_gives_up_after_retries():
    client = TCPClient()
    with pytest.raises(ConnectionError):
        client.setup("127.0.0.1", _free_port(), 2, 0)
    assert client.state is SocketState.INVALID


def test_close_sets_closed_and_blocks_io(listener):
    port = listener.getsockname()[1]
    client = TCPClient()
    client.setup("127.0.0.1", port, 1, 0)
    client.close()
    assert client.state is SocketState.CLOSED
    client.close()
    assert client.state is SocketState.CLOSED
    with pytest.raises(NotConnectedError):
        client.write(b"x")


def test_peer_close_marks_disconnected(listener):
    port = listener.getsockname()[1]
    with TCPClient() as client:
        client.setup("127.0.0.1", port, 1, 0)
        peer, _ = listener.accept()
        peer.close()
        assert client.read(8) == b""
        assert client.state is SocketState.DISCONNECTED
        with pytest.raises(NotConnectedError):
            client.read(8)


def test_receive_timeout_applies(listener):
    port = listener.getsockname()[1]
    with TCPClient() as client:
        client.setup("127.0.0.1", port, 1, 0)
        peer, _ = listener.accept()
        try:
            client.set_receive_timeout(0.05)
            with pytest.raises(TimeoutError):
                client.read(8)
        finally:
            peer.close()


def test_receive_timeout_set_before_connect(listener):
    port = listener.getsockname()[1]
    with TCPClient() as client:
        client.set_receive_timeout(0.05)
        client.setup("127.0.0.1", port, 1, 0)
        peer, _ = listener.accept()
        try:
            with pytest.raises(TimeoutError):
                client.read(8)
        finally:
            peer.close()


def test_context_manager_closes(listener):
    port = listener.getsockname()[1]
    with TCPClient() as client:
        client.setup("127.0.0.1", port, 1, 0)
    assert client.state is SocketState.CLOSED