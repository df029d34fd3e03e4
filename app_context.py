"""
Application Context Container for the Door Controller

Purpose:
Aggregates the door controller, its hardware collaborators, shared
configuration and lifecycle control primitives into a single explicit
container to simplify wiring and controlled shutdown.

Scope and Limitations:
- Acts purely as a dependency container; contains no control logic.

Dependencies:
- Python 3.10+
- dataclasses, threading, typing (standard library)
- actuator_driver.py, current_sensor.py, door_configuration.py,
  door_controller.py, transition_recorder.py
"""

import logging
from dataclasses import dataclass, field
from threading import Event
from typing import Callable

from actuator_driver import ActuatorDriver
from current_sensor import CurrentSensor
from door_configuration import DoorConfiguration
from door_controller import DoorController
from transition_recorder import TransitionRecorder


@dataclass
class AppContext:
    controller: DoorController
    actuator: ActuatorDriver
    sensor: CurrentSensor
    config: DoorConfiguration
    clock: Callable[[], float]
    shutdown_event: Event
    recorder: TransitionRecorder | None = None
    _closed: bool = field(default=False, init=False, repr=False)

    def shutdown(self) -> None:
        self.shutdown_event.set()
        if self._closed:
            return
        self._closed = True
        try:
            self.controller.close()
        finally:
            self.actuator.close()
        logging.info("Door controller shut down")
