"""Binary command and response frames of the robot controller's command port.

Every request is a fixed frame of one 16-bit command id followed by 249
16-bit parameter words; every reply is a command id, a result code and 248
data words. All words are little-endian.
"""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass
from typing import Iterable, Sequence

PARAM_COUNT = 249
DATA_COUNT = 248
FRAME_SIZE = 2 * (1 + PARAM_COUNT)
RESPONSE_SIZE = 2 * (2 + DATA_COUNT)

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_RAD_TO_DEG = 180 / math.pi
_MAX_STRING_CHARS = PARAM_COUNT - 2


class ControlMode(enum.IntEnum):
    """Operating mode of the controller."""

    MANUAL = 0
    AUTO = 1


class MotionStatus(enum.IntEnum):
    """Motion state reported by the controller."""

    SERVER_OFF = 0
    WAITING = 1
    RUNNING = 2
    HOLD = 3
    DELAY = 4
    MOVING = 5


class LogLevel(enum.IntEnum):
    """Logging level of the controller."""

    NONE = 0
    INFO = 1
    SET_COMMAND = 2
    CONSOLE = 3
    SAVE = 4


class SpaceOperationType(enum.IntEnum):
    """Coordinate space a position query refers to."""

    CARTESIAN = 0
    JOINT = 1
    TOOL = 2


class CommandId(enum.IntEnum):
    """Identifiers of the commands understood by the controller."""

    GET_PERMISSIONS = 0x000A
    SET_PTP_SPEED = 0x0096
    GET_PTP_SPEED = 0x0098
    SET_OVERRIDE_RATIO = 0x012C
    GET_OVERRIDE_RATIO = 0x012D
    SET_SERVO_AMP = 0x0578
    GET_SERVO_AMP = 0x0579
    GET_ROBOT_VERSION = 0x057A
    SET_ROBOT_MODE = 0x058C
    GET_ROBOT_MODE = 0x058D
    CONTROLLER_RESET = 0x05AA
    PTP_JOINT = 0x07D2
    PTP_JOINT_WITH_VELOCITY = 0x07D6
    LINEAR_SPLINE_POINT = 0x07E8
    CUBIC_SPLINE_POINT = 0x07E9
    QUINTIC_SPLINE_POINT = 0x07EA
    EXT_PTP_JOINT = 0x07EF
    MOTION_ABORT = 0x07FA
    GET_EXT_ACTUAL_RPM = 0x0863
    GET_EXT_ACTUAL_POSITION = 0x0864
    GET_ACTUAL_POSITION = 0x0866
    GET_ACTUAL_RPM = 0x0867
    GET_ERROR_CODE = 0x086C
    GET_MOTION_STATE = 0x086D
    SET_LOG_LEVEL = 0x1003
    GET_ACTUAL_CURRENT = 0x100A
    GET_HRSS_VERSION = 0x100B
    GET_HRSS_MODE = 0x1036


class CommandError(Exception):
    """The controller answered a command with a non-zero result code."""

    def __init__(self, cmd_id: int, result: int) -> None:
        self.cmd_id = cmd_id
        self.result = result
        try:
            name = CommandId(cmd_id).name
        except ValueError:
            name = f"0x{cmd_id:04X}"
        super().__init__(f"command {name} failed with result {result}")


@dataclass(frozen=True)
class Response:
    """A decoded reply frame."""

    cmd_id: int
    result: int
    data: tuple[int, ...]

    @property
    def data_length(self) -> int:
        """The length field that leads the data words."""
        return self.data[0]

    def int32_values(self, count: int) -> list[int]:
        """Read ``count`` signed 32-bit integers following the length word."""
        if count < 0 or 2 * count > DATA_COUNT - 1:
            raise ValueError(f"cannot read {count} int32 values from a response")
        raw = struct.pack(f"<{DATA_COUNT}H", *self.data)
        return list(struct.unpack_from(f"<{count}i", raw, 2))

    def error_codes(self) -> list[str]:
        """Error codes listed in the reply, formatted as ``ErrXX-XX-XX``."""
        count = self.data_length >> 2
        if count and (count - 1) * 4 + 4 >= DATA_COUNT:
            raise ValueError(f"error list of {count} entries does not fit a response")
        codes = []
        for base in range(3, 3 + 4 * count, 4):
            first = self.data[base + 1] & 0x00FF
            second = (self.data[base] & 0xFF00) >> 8
            third = self.data[base] & 0x00FF
            codes.append(f"Err{first:02x}-{second:02x}-{third:02x}")
        return codes

    def version_string(self) -> str:
        """The length-prefixed string carried after the length word."""
        length = self.data[1]
        if length > DATA_COUNT - 2:
            raise ValueError(f"string of {length} characters does not fit a response")
        return "".join(chr(word & 0xFF) for word in self.data[2 : 2 + length])

    def hrss_version(self) -> str:
        """The controller software version as ``major.minor.letter_build``."""
        major, minor, letter, build = self.data[2:6]
        return f"{major}.{minor}.{chr(letter & 0xFF)}_{build}"


def encode_command(cmd_id: int, params: Iterable[int] = ()) -> bytes:
    """Build a request frame; unused parameter words are zero."""
    words = [word & 0xFFFF for word in params]
    if len(words) > PARAM_COUNT:
        raise ValueError(f"a command takes at most {PARAM_COUNT} parameter words")
    words.extend([0] * (PARAM_COUNT - len(words)))
    return struct.pack(f"<{1 + PARAM_COUNT}H", int(cmd_id) & 0xFFFF, *words)


def decode_response(raw: bytes) -> Response:
    """Decode a reply frame; missing trailing bytes read as zero."""
    if len(raw) < 4:
        raise ValueError("response is too short to hold a header")
    frame = bytes(raw[:RESPONSE_SIZE]).ljust(RESPONSE_SIZE, b"\x00")
    cmd_id, result, *data = struct.unpack(f"<{2 + DATA_COUNT}H", frame)
    return Response(cmd_id=cmd_id, result=result, data=tuple(data))


def _round_half_away(value: float) -> int:
    whole = math.trunc(value)
    if abs(value - whole) >= 0.5:
        whole += 1 if value > 0 else -1
    return whole


def int32_words(value: float) -> list[int]:
    """Split a signed 32-bit integer into two little-endian words.

    Floats are first rounded half away from zero.
    """
    number = value if isinstance(value, int) else _round_half_away(value)
    if not _INT32_MIN <= number <= _INT32_MAX:
        raise ValueError(f"{value} does not fit a signed 32-bit integer")
    return list(struct.unpack("<2H", struct.pack("<i", number)))


def millidegree_words(values: Sequence[float]) -> list[int]:
    """Convert radians to millidegree int32 values, two words each."""
    words: list[int] = []
    for value in values:
        words.extend(int32_words(value * _RAD_TO_DEG * 1000.0))
    return words


def joint_string_params(positions: Sequence[float]) -> list[int]:
    """Parameters of a textual joint move: smoothing flag, length, characters.

    Each position in radians is written in degrees with seven decimals,
    separated by commas.
    """
    text = ",".join(f"{position * _RAD_TO_DEG:.7f}" for position in positions)
    if len(text) > _MAX_STRING_CHARS:
        raise ValueError("joint positions do not fit in one command frame")
    return [1, len(text), *(ord(char) for char in text)]