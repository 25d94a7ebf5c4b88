"""A small blocking TCP client with retrying connection setup."""

from __future__ import annotations

import enum
import logging
import socket
import time

logger = logging.getLogger(__name__)

DEFAULT_RECONNECTION_TIME = 10.0


class SocketState(enum.Enum):
    """Lifecycle state of a :class:`TCPClient`."""

    INVALID = "invalid"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    CLOSED = "closed"


class NotConnectedError(ConnectionError):
    """Raised when reading or writing on a socket that is not connected."""


class TCPClient:
    """Blocking IPv4 TCP client.

    ``setup`` opens the connection, retrying on failure; ``read`` and
    ``write`` move raw bytes once connected.
    """

    def __init__(self) -> None:
        self._sock: socket.socket | None = None
        self._state = SocketState.INVALID
        self._recv_timeout: float | None = None

    @property
    def state(self) -> SocketState:
        """The current connection state."""
        return self._state

    def _apply_options(self) -> None:
        assert self._sock is not None
        self._sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        quickack = getattr(socket, "TCP_QUICKACK", None)
        if quickack is not None:
            try:
                self._sock.setsockopt(socket.IPPROTO_TCP, quickack, 1)
            except OSError:
                pass
        if self._recv_timeout is not None:
            self._sock.settimeout(self._recv_timeout)

    def setup(
        self,
        ip_addr: str,
        port: int,
        max_num_tries: int = 0,
        reconnection_time: float = DEFAULT_RECONNECTION_TIME,
    ) -> None:
        """Connect to ``ip_addr:port``.

        A failed attempt is followed by a pause of ``reconnection_time``
        seconds and another attempt. With ``max_num_tries`` of zero the
        client retries forever; otherwise it gives up and raises
        :class:`ConnectionError` once the retries are used up.
        """
        if self._state is SocketState.CONNECTED:
            raise ConnectionError("socket is already connected")

        failures = 0
        while True:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                sock.connect((ip_addr, port))
            except OSError:
                sock.close()
            else:
                self._sock = sock
                break

            if max_num_tries > 0:
                if failures >= max_num_tries:
                    self._state = SocketState.INVALID
                    message = (
                        f"Failed to establish connection for {ip_addr}:{port} "
                        f"after {max_num_tries} tries"
                    )
                    logger.error(message)
                    raise ConnectionError(message)
                failures += 1

            self._state = SocketState.INVALID
            logger.warning("Failed to connect to robot.")
            time.sleep(reconnection_time)

        self._apply_options()
        self._state = SocketState.CONNECTED
        logger.info("Connection established for %s:%d", ip_addr, port)

    def read(self, size: int) -> bytes:
        """Receive up to ``size`` bytes.

        Returns ``b""`` when the peer has closed the connection, in which
        case the state becomes :attr:`SocketState.DISCONNECTED`.
        """
        if self._state is not SocketState.CONNECTED or self._sock is None:
            raise NotConnectedError("attempt to read on a non-connected socket")
        data = self._sock.recv(size)
        if not data:
            self._state = SocketState.DISCONNECTED
        return data

    def write(self, data: bytes) -> int:
        """Send all of ``data`` and return the number of bytes written."""
        if self._state is not SocketState.CONNECTED or self._sock is None:
            raise NotConnectedError("attempt to write on a non-connected socket")
        self._sock.sendall(data)
        return len(data)

    def close(self) -> None:
        """Close the socket if one is open."""
        if self._sock is not None:
            self._state = SocketState.CLOSED
            self._sock.close()
            self._sock = None

    def set_receive_timeout(self, timeout: float | None) -> None:
        """Set the timeout in seconds for blocking reads; ``None`` blocks."""
        self._recv_timeout = timeout
        if self._state is SocketState.CONNECTED:
            self._apply_options()

    def __enter__(self) -> TCPClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()