"""High-level driver combining the controller's command, event and file ports."""

from __future__ import annotations

import contextlib
import logging
import re
import socket
import struct
from typing import Sequence

from hrsdk.clients import EventClient, FileClient
from hrsdk.commander import ALL_AXES, ROBOT_AXES, Commander
from hrsdk.protocol import CommandError, ControlMode, LogLevel, MotionStatus
from hrsdk.tcp_client import NotConnectedError

logger = logging.getLogger(__name__)

COMMAND_PORT = 1503
EVENT_PORT = 1504
FILE_PORT = 1505

_VERSION_PATTERNS = (
    re.compile(r"HRDLL (\d+\.\d+\.\d+)", re.ASCII),
    re.compile(r"HRSS (\d+\.\d+\.\d+)", re.ASCII),
)
_ERROR_PATTERN = re.compile(
    r"Err([0-9A-Fa-f]{2})-([0-9A-Fa-f]{2})-([0-9A-Fa-f]{2})", re.ASCII
)
_MODBUS_FRAME_SIZE = 12


def parse_version(version_info: str) -> str:
    """Extract the ``x.y.z`` version number from the controller's version text.

    The ``HRDLL`` number is preferred over the ``HRSS`` one; text holding
    neither gives ``"0.0.0"``.
    """
    for pattern in _VERSION_PATTERNS:
        match = pattern.search(version_info)
        if match:
            return match.group(1)
    return "0.0.0"


def _version_parts(text: str) -> list[int]:
    parts = text.split(".")
    if parts[-1] == "":
        parts.pop()
    return [int(part) for part in parts]


def compare_versions(version: str, required_version: str) -> bool:
    """Whether dotted ``version`` is at least ``required_version``.

    Missing trailing components count as zero.
    """
    current = _version_parts(version)
    required = _version_parts(required_version)
    width = max(len(current), len(required))
    current.extend([0] * (width - len(current)))
    required.extend([0] * (width - len(required)))
    return current >= required


def _as_float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _check_axis_count(count: int) -> None:
    if not ROBOT_AXES <= count <= ALL_AXES:
        raise ValueError(
            f"axis count must be between {ROBOT_AXES} and {ALL_AXES}, got {count}"
        )


def _check_length(values: Sequence[float], what: str) -> None:
    if len(values) > ALL_AXES:
        raise ValueError(f"at most {ALL_AXES} {what} are accepted, got {len(values)}")


def set_do_modbus(ip: str, port: int, do_index: int, value: bool) -> bool:
    """Set one digital output through a Modbus TCP "write single coil" request.

    Returns whether a complete reply arrived; connection failures give False.
    """
    request = bytes(
        [
            0x00, 0x01,  # transaction id
            0x00, 0x00,  # protocol id
            0x00, 0x06,  # length
            0x01,  # unit id
            0x05,  # function code: write single coil
            (do_index >> 8) & 0xFF,
            do_index & 0xFF,
            0xFF if value else 0x00,
            0x00,
        ]
    )
    reply = bytearray()
    try:
        with socket.create_connection((ip, port)) as sock:
            sock.sendall(request)
            while len(reply) < _MODBUS_FRAME_SIZE:
                chunk = sock.recv(_MODBUS_FRAME_SIZE - len(reply))
                if not chunk:
                    break
                reply += chunk
    except OSError as exc:
        logger.warning("Modbus request to %s:%d failed: %s", ip, port, exc)
        return False
    return len(reply) >= _MODBUS_FRAME_SIZE


class HiwinDriver:
    """Drives a robot controller over its command, event and file ports."""

    def __init__(self, robot_ip: str) -> None:
        self.robot_ip = robot_ip
        self._version_info = ""
        self._version_number = ""
        self._commander: Commander | None = None
        self._event_client: EventClient | None = None
        self._file_client: FileClient | None = None

    @property
    def version_info(self) -> str:
        """The version text the controller reported on connection."""
        return self._version_info

    def _require(self) -> Commander:
        if self._commander is None:
            raise NotConnectedError("driver is not connected")
        return self._commander

    def connect(
        self,
        command_port: int = COMMAND_PORT,
        event_port: int = EVENT_PORT,
        file_port: int = FILE_PORT,
    ) -> None:
        """Open all three connections and prepare the controller for motion.

        Raises :class:`ConnectionError` if a port cannot be reached.
        """
        try:
            self._commander = Commander(self.robot_ip, command_port)
            self._commander.connect()
            self._event_client = EventClient(self.robot_ip, event_port)
            self._event_client.connect()
            self._file_client = FileClient(self.robot_ip, file_port)
            self._file_client.connect()
        except ConnectionError:
            self.disconnect()
            raise

        commander = self._commander
        with contextlib.suppress(CommandError):
            self._version_info = commander.get_robot_version()
        logger.info("%s", self._version_info)

        setup_steps = (
            commander.get_permissions,
            lambda: commander.set_log_level(LogLevel.SET_COMMAND),
            lambda: commander.set_robot_mode(ControlMode.AUTO),
            lambda: commander.set_ptp_speed(100),
            lambda: commander.set_override_ratio(100),
            lambda: commander.set_servo_amp_state(True),
        )
        for step in setup_steps:
            try:
                step()
            except CommandError as exc:
                logger.warning("%s", exc)

    def disconnect(self) -> None:
        """Close every open connection."""
        for client in (self._commander, self._event_client, self._file_client):
            if client is not None:
                client.close()
        self._commander = None
        self._event_client = None
        self._file_client = None

    def __enter__(self) -> HiwinDriver:
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()

    def robot_version(self) -> str:
        """The ``x.y.z`` version number taken from the controller's version text."""
        self._version_number = parse_version(self._version_info)
        return self._version_number

    def is_version_greater_or_equal(self, required_version: str) -> bool:
        """Whether the version last read by :meth:`robot_version` is recent enough."""
        return compare_versions(self._version_number, required_version)

    def get_robot_mode(self) -> ControlMode:
        """The controller's operating mode."""
        return self._require().get_robot_mode()

    def is_estopped(self) -> bool:
        """Emergency stop state; the controller does not report it."""
        return False

    def is_drives_powered(self) -> bool:
        """Whether the servo amplifiers are on; False if the query fails."""
        try:
            return self._require().get_servo_amp_state()
        except CommandError:
            return False

    def is_motion_possible(self) -> bool:
        """Whether drives are powered, an error is listed and remote mode is on."""
        return (
            self.is_drives_powered()
            and self.is_in_error()
            and self._require().is_remote_mode()
        )

    def is_in_motion(self) -> bool:
        """Whether the robot is moving."""
        return self._require().get_motion_state() is MotionStatus.MOVING

    def _error_list(self) -> list[str]:
        try:
            return self._require().get_error_codes()
        except CommandError:
            return []

    def is_in_error(self) -> bool:
        """Whether the controller lists any active error."""
        return bool(self._error_list())

    def get_error_code(self) -> int:
        """The most recent error as one integer, or 0 when there is none."""
        errors = self._error_list()
        if not errors:
            return 0
        match = _ERROR_PATTERN.fullmatch(errors[-1])
        if not match:
            return 0
        first, second, third = (int(group, 16) for group in match.groups())
        return (first << 16) | (second << 8) | third

    def get_joint_velocity(self, count: int = ROBOT_AXES) -> list[float]:
        """Speeds of the robot axes, followed by external axes up to ``count``."""
        _check_axis_count(count)
        commander = self._require()
        values = commander.get_actual_rpm()
        if count > ROBOT_AXES:
            values += commander.get_ext_actual_rpm()[: count - ROBOT_AXES]
        return values

    def get_joint_effort(self, count: int = ROBOT_AXES) -> list[float]:
        """Currents of the robot axes; external axes, up to ``count``, read zero."""
        _check_axis_count(count)
        values = self._require().get_actual_current()
        return values + [0.0] * (count - ROBOT_AXES)

    def get_joint_position(self, count: int = ROBOT_AXES) -> list[float]:
        """Joint positions in radians, external axes included up to ``count``."""
        _check_axis_count(count)
        commander = self._require()
        values = commander.get_actual_position()
        if count > ROBOT_AXES:
            values += commander.get_ext_actual_position()[: count - ROBOT_AXES]
        return values

    def write_joint_command(self, positions: Sequence[float]) -> None:
        """Move to joint ``positions`` (radians); more than six include external axes."""
        _check_length(positions, "joint positions")
        commander = self._require()
        if len(positions) > ROBOT_AXES:
            commander.ext_ptp_joint(positions)
        else:
            commander.ptp_joint(positions)

    def write_trajectory_spline_point(
        self,
        positions: Sequence[float],
        goal_time: float,
        velocities: Sequence[float] | None = None,
        accelerations: Sequence[float] | None = None,
    ) -> None:
        """Send one trajectory point.

        Positions alone give a linear segment, with velocities a cubic one,
        and with velocities and accelerations a quintic one.
        """
        if accelerations is not None and velocities is None:
            raise ValueError("accelerations require velocities")
        _check_length(positions, "positions")
        if velocities is not None:
            _check_length(velocities, "velocities")
        if accelerations is not None:
            _check_length(accelerations, "accelerations")

        commander = self._require()
        seconds = _as_float32(goal_time)
        if velocities is None:
            commander.linear_spline_point(positions, seconds)
        elif accelerations is None:
            commander.cubic_spline_point(positions, velocities, seconds)
        else:
            commander.quintic_spline_point(positions, velocities, accelerations, seconds)

    def motion_abort(self) -> None:
        """Abort the current motion."""
        self._require().motion_abort()

    def clear_error(self) -> None:
        """Reset the controller's errors and switch the servo amplifiers back on."""
        commander = self._require()
        commander.clear_error()
        commander.set_servo_amp_state(True)