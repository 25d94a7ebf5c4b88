"""Request/response client for the robot controller's command port."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from hrsdk.clients import RobotConnection
from hrsdk.protocol import (
    RESPONSE_SIZE,
    CommandError,
    CommandId,
    ControlMode,
    LogLevel,
    MotionStatus,
    Response,
    SpaceOperationType,
    decode_response,
    encode_command,
    int32_words,
    joint_string_params,
    millidegree_words,
)

ROBOT_AXES = 6
EXTERNAL_AXES = 3
ALL_AXES = ROBOT_AXES + EXTERNAL_AXES

_REMOTE_MODE = 3
_DEG_TO_RAD = math.pi / 180


def _fit(values: Sequence[float], count: int, what: str) -> list[float]:
    """Pad ``values`` with zeros to ``count`` entries; reject longer input."""
    items = [float(value) for value in values]
    if len(items) > count:
        raise ValueError(f"at most {count} {what} are accepted, got {len(items)}")
    items.extend([0.0] * (count - len(items)))
    return items


class Commander(RobotConnection):
    """Sends commands to the controller and decodes its replies.

    Every command is answered by one reply frame. Commands whose reply
    carries a non-zero result code raise :class:`CommandError`.
    """

    def __init__(self, robot_ip: str, port: int) -> None:
        super().__init__(robot_ip, port)

    def _exchange(self, cmd_id: CommandId, params: Iterable[int] = ()) -> Response:
        self.write(encode_command(cmd_id, params))
        raw = bytearray()
        while len(raw) < RESPONSE_SIZE:
            chunk = self.read(RESPONSE_SIZE - len(raw))
            if not chunk:
                break
            raw += chunk
        if len(raw) < 4:
            raise ConnectionError(
                f"connection closed before a reply to {cmd_id.name} arrived"
            )
        return decode_response(bytes(raw))

    def _call(self, cmd_id: CommandId, params: Iterable[int] = ()) -> Response:
        response = self._exchange(cmd_id, params)
        if response.result != 0:
            raise CommandError(int(cmd_id), response.result)
        return response

    def is_remote_mode(self) -> bool:
        """Whether the controller is in remote mode."""
        response = self._exchange(CommandId.GET_HRSS_MODE)
        return response.result == 0 and response.data[1] == _REMOTE_MODE

    def get_permissions(self) -> None:
        """Request control permissions from the controller."""
        self._call(CommandId.GET_PERMISSIONS, [0])

    def set_log_level(self, level: LogLevel) -> None:
        """Set the controller's logging level."""
        self._call(CommandId.SET_LOG_LEVEL, [LogLevel(level)])

    def set_servo_amp_state(self, enable: bool) -> None:
        """Switch the servo amplifiers on or off."""
        self._call(CommandId.SET_SERVO_AMP, [int(bool(enable))])

    def get_servo_amp_state(self) -> bool:
        """Whether the servo amplifiers are on."""
        return self._call(CommandId.GET_SERVO_AMP).data[1] > 0

    def _scaled_values(self, cmd_id: CommandId, count: int, scale: float) -> list[float]:
        response = self._call(cmd_id)
        return [value / 1000.0 * scale for value in response.int32_values(count)]

    def get_actual_rpm(self) -> list[float]:
        """Actual speed of the six robot axes."""
        return self._scaled_values(CommandId.GET_ACTUAL_RPM, ROBOT_AXES, 1.0)

    def get_actual_position(self) -> list[float]:
        """Actual joint positions of the six robot axes, in radians."""
        response = self._call(CommandId.GET_ACTUAL_POSITION, [SpaceOperationType.JOINT])
        return [
            value / 1000.0 * _DEG_TO_RAD for value in response.int32_values(ROBOT_AXES)
        ]

    def get_actual_current(self) -> list[float]:
        """Actual current of the six robot axes."""
        return self._scaled_values(CommandId.GET_ACTUAL_CURRENT, ROBOT_AXES, 1.0)

    def get_ext_actual_rpm(self) -> list[float]:
        """Actual speed of the three external axes."""
        return self._scaled_values(CommandId.GET_EXT_ACTUAL_RPM, EXTERNAL_AXES, 1.0)

    def get_ext_actual_position(self) -> list[float]:
        """Actual positions of the three external axes, in radians."""
        return self._scaled_values(
            CommandId.GET_EXT_ACTUAL_POSITION, EXTERNAL_AXES, _DEG_TO_RAD
        )

    def get_motion_state(self) -> MotionStatus:
        """The controller's current motion state."""
        return MotionStatus(self._call(CommandId.GET_MOTION_STATE).data[1])

    def get_error_codes(self) -> list[str]:
        """Active errors, each formatted as ``ErrXX-XX-XX``."""
        return self._call(CommandId.GET_ERROR_CODE).error_codes()

    def ptp_joint(self, positions: Sequence[float]) -> None:
        """Point-to-point move of the six robot axes to ``positions`` (radians)."""
        values = _fit(positions, ROBOT_AXES, "joint positions")
        self._call(CommandId.PTP_JOINT, joint_string_params(values))

    def ptp_joint_with_velocity(
        self, positions: Sequence[float], acc_time: float, ratio: float
    ) -> None:
        """Point-to-point move with an acceleration time and a speed ratio."""
        values = _fit(positions, ROBOT_AXES, "joint positions")
        params = [
            *int32_words(acc_time * 1000),
            *int32_words(ratio * 1000),
            1,
            *millidegree_words(values),
        ]
        self._call(CommandId.PTP_JOINT_WITH_VELOCITY, params)

    def ext_ptp_joint(self, positions: Sequence[float]) -> None:
        """Point-to-point move of robot and external axes (radians)."""
        values = _fit(positions, ALL_AXES, "joint positions")
        self._call(CommandId.EXT_PTP_JOINT, joint_string_params(values))

    def linear_spline_point(self, positions: Sequence[float], goal_time_sec: float) -> None:
        """Send one point of a linearly interpolated trajectory."""
        params = [
            *millidegree_words(_fit(positions, ALL_AXES, "positions")),
            *int32_words(goal_time_sec * 1000.0),
        ]
        self._call(CommandId.LINEAR_SPLINE_POINT, params)

    def cubic_spline_point(
        self,
        positions: Sequence[float],
        velocities: Sequence[float],
        goal_time_sec: float,
    ) -> None:
        """Send one point of a cubic spline trajectory."""
        params = [
            *millidegree_words(_fit(positions, ALL_AXES, "positions")),
            *millidegree_words(_fit(velocities, ALL_AXES, "velocities")),
            *int32_words(goal_time_sec * 1000.0),
        ]
        self._call(CommandId.CUBIC_SPLINE_POINT, params)

    def quintic_spline_point(
        self,
        positions: Sequence[float],
        velocities: Sequence[float],
        accelerations: Sequence[float],
        goal_time_sec: float,
    ) -> None:
        """Send one point of a quintic spline trajectory."""
        params = [
            *millidegree_words(_fit(positions, ALL_AXES, "positions")),
            *millidegree_words(_fit(velocities, ALL_AXES, "velocities")),
            *millidegree_words(_fit(accelerations, ALL_AXES, "accelerations")),
            *int32_words(goal_time_sec * 1000.0),
        ]
        self._call(CommandId.QUINTIC_SPLINE_POINT, params)

    def motion_abort(self) -> None:
        """Abort the current motion."""
        self._call(CommandId.MOTION_ABORT)

    def clear_error(self) -> None:
        """Reset the controller's error state."""
        self._call(CommandId.CONTROLLER_RESET)

    def set_ptp_speed(self, ratio: int) -> None:
        """Set the point-to-point speed ratio in percent."""
        self._call(CommandId.SET_PTP_SPEED, [int(ratio)])

    def get_ptp_speed(self) -> int:
        """The point-to-point speed ratio in percent."""
        return self._call(CommandId.GET_PTP_SPEED).data[1]

    def set_override_ratio(self, ratio: int) -> None:
        """Set the global override ratio in percent."""
        self._call(CommandId.SET_OVERRIDE_RATIO, [int(ratio)])

    def get_override_ratio(self) -> int:
        """The global override ratio in percent."""
        return self._call(CommandId.GET_OVERRIDE_RATIO).data[1]

    def set_robot_mode(self, mode: ControlMode) -> None:
        """Switch the controller between manual and automatic mode."""
        self._call(CommandId.SET_ROBOT_MODE, [ControlMode(mode)])

    def get_robot_mode(self) -> ControlMode:
        """The controller's operating mode."""
        return ControlMode(self._call(CommandId.GET_ROBOT_MODE).data[1])

    def get_robot_version(self) -> str:
        """The version text reported by the controller."""
        return self._call(CommandId.GET_ROBOT_VERSION).version_string()

    def get_hrss_version(self) -> str:
        """The controller software version as ``major.minor.letter_build``."""
        return self._call(CommandId.GET_HRSS_VERSION).hrss_version()