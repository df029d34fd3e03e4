"""
Door State and Actuator Line Definitions

Purpose:
Defines the authoritative set of door states used by the DoorController state
machine, and the two physical actuator lines that drive the latching relay.
OPEN and CLOSED are the resting positions; OPENING and CLOSING are the
transient phases reported while the actuator motor is expected to be running.

Scope and Limitations:
- Logical states only; no position or sensor validity is encoded.
- There is no fault state. A stalled or unmonitorable actuator still ends in
  the commanded resting position once the actuation timeout expires.

Dependencies:
- Python 3.10+
- enum (standard library)
"""

from enum import Enum, auto


class DoorState(Enum):
    # Normal cycle: CLOSED -> OPENING -> OPEN -> CLOSING -> CLOSED
    CLOSED = auto()
    OPEN = auto()
    OPENING = auto()
    CLOSING = auto()

    @property
    def is_transient(self) -> bool:
        return self in (DoorState.OPENING, DoorState.CLOSING)


class ActuatorLine(Enum):
    OPEN = auto()
    CLOSE = auto()

    @property
    def other(self) -> "ActuatorLine":
        return ActuatorLine.CLOSE if self is ActuatorLine.OPEN else ActuatorLine.OPEN
