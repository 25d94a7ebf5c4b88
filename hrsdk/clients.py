"""Connections to the individual service ports of a robot controller."""

from __future__ import annotations

import logging

from hrsdk.tcp_client import SocketState, TCPClient

logger = logging.getLogger(__name__)


class RobotConnection(TCPClient):
    """A TCP connection to one port of the robot controller."""

    max_num_tries: int = 2
    reconnection_time: float = 5.0

    def __init__(self, robot_ip: str, port: int) -> None:
        super().__init__()
        self.robot_ip = robot_ip
        self.port = port

    def connect(self) -> None:
        """Open the connection; raises :class:`ConnectionError` on failure."""
        if self.state is SocketState.CONNECTED:
            message = "Socket is already connected. Refusing to reconnect."
            logger.warning(message)
            raise ConnectionError(message)
        self.setup(self.robot_ip, self.port, self.max_num_tries, self.reconnection_time)


class EventClient(RobotConnection):
    """Connection to the controller's event port."""


class FileClient(RobotConnection):
    """Connection to the controller's file port."""