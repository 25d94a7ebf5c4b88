# hrsdk

A Python client for HIWIN robot controllers. It speaks the controller's
binary command protocol over TCP and offers joint motion, spline
trajectory streaming, state queries and error reporting. It has no
dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Connecting

`hrsdk.driver.HiwinDriver` opens the command, event and file connections
(ports 1503, 1504 and 1505 by default; `connect()` takes
`command_port`, `event_port` and `file_port` to change them). Each
connection is tried a few times, five seconds apart, before
`ConnectionError` is raised; on failure the connections already opened
are closed again.

Once connected, the driver reads the controller's version text, requests
permissions, sets the controller's log level, and prepares the robot:
automatic mode, PTP speed and override ratio at 100 %, servo power on. A
controller that rejects one of these steps only causes a logged warning.

```python
from hrsdk.driver import HiwinDriver

with HiwinDriver("192.168.0.1") as robot:
    robot.connect()
    print(robot.version_info)          # full version text
    print(robot.robot_version())       # "x.y.z", or "0.0.0" if none found
    if robot.is_version_greater_or_equal("3.2.0"):
        ...
```

`is_version_greater_or_equal` compares against the number last returned
by `robot_version()`, so call that first. Leaving the `with` block calls
`disconnect()`, which closes every connection.

## Reading the robot's state

```python
positions = robot.get_joint_position(6)     # radians
velocities = robot.get_joint_velocity(6)    # speeds
efforts = robot.get_joint_effort(6)         # currents

robot.get_robot_mode()       # ControlMode.MANUAL or ControlMode.AUTO
robot.is_drives_powered()
robot.is_in_motion()
robot.is_in_error()
robot.get_error_code()       # last error as one integer, 0 when none
robot.is_estopped()          # always False: the controller does not report it
```

The joint count must be between 6 and 9. Counts above six add the
external axes to positions and velocities; for efforts the external axes
read as zero.

## Moving the robot

```python
robot.write_joint_command([0.0, 0.0, 0.0, 0.0, -1.57, 0.0])

# One spline point per call: linear, cubic (with velocities) or
# quintic (with velocities and accelerations).
robot.write_trajectory_spline_point(points, 0.1)
robot.write_trajectory_spline_point(points, 0.1, velocities)
robot.write_trajectory_spline_point(points, 0.1, velocities, accelerations)

robot.motion_abort()
robot.clear_error()          # also switches the servo power back on
```

Angles are given in radians; they are converted to the controller's
degree-based units. A joint command with more than six values moves the
external axes as well. Lists longer than nine values raise `ValueError`;
shorter ones are padded with zeros.

## Lower-level access

- `hrsdk.commander.Commander` sends single commands and returns decoded
  results, raising `hrsdk.protocol.CommandError` when the controller
  answers with a non-zero result code.
- `hrsdk.protocol` holds `CommandId`, the enumerations `ControlMode`,
  `MotionStatus`, `LogLevel` and `SpaceOperationType`, the frame
  functions `encode_command` and `decode_response`, and the `Response`
  class.
- `hrsdk.tcp_client.TCPClient` is the underlying blocking TCP client;
  reading or writing while unconnected raises `NotConnectedError`.
- `hrsdk.clients` has `RobotConnection` and its subclasses `EventClient`
  and `FileClient`.

A digital output on a Modbus TCP device can be switched with
`hrsdk.driver.set_do_modbus(ip, port, do_index, value)`, which sends a
"write single coil" request and returns whether a full reply arrived.

## What it does not do

The event and file connections are opened and closed, but nothing is
read from or sent over them: there is no event handling and no file
transfer. There is no command-line tool; the package is used as a
library.