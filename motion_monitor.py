"""
Actuator Motion Monitor (MotionMonitor)

Purpose:
Background task started after every door command. It polls the actuator
motor current and decides when the door has finished moving: a reading above
the current threshold latches "motion detected", and the first reading at or
below the threshold after that (the falling edge) completes the motion. If no
falling edge is seen within the maximum actuation time the target state is
committed anyway, so the door never reports a transient state forever.

Scope and Limitations:
- Cancellation is cooperative and only observed at the poll wait. A read in
  progress finishes before cancellation takes effect.
- A cancelled monitor never commits: the commit callback is expected to
  check ``cancelled`` under the owner's state lock.
- Sensor read failures (OSError) are logged and polling continues at the same
  interval, with no backoff and no error counting.

Dependencies:
- Python 3.10+
- threading, time, logging (standard library)
- current_sensor.py, door_configuration.py, door_states.py
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from current_sensor import CurrentSensor
from door_configuration import DoorConfiguration
from door_states import DoorState

logger = logging.getLogger(__name__)


class MotionMonitor:
    def __init__(
        self,
        target: DoorState,
        sensor: CurrentSensor,
        commit: Callable[["MotionMonitor"], bool],
        config: DoorConfiguration,
        clock: Callable[[], float] = time.monotonic,
    ):
        if target.is_transient:
            raise ValueError(f"monitor target must be a resting state, not {target.name}")

        self._target = target
        self._sensor = sensor
        self._commit = commit
        self._config = config
        self._clock = clock

        self._cancel_evt = threading.Event()
        self._thread: threading.Thread | None = None

        self.started_at: float | None = None
        self.motion_detected = False
        self.polls = 0
        self.committed = False

    @property
    def target(self) -> DoorState:
        return self._target

    @property
    def cancelled(self) -> bool:
        return self._cancel_evt.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("MotionMonitor can only be started once")
        self.started_at = self._clock()
        self._thread = threading.Thread(
            target=self._run,
            name=f"motion-monitor-{self._target.name.lower()}",
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        self._cancel_evt.set()

    def join(self, timeout: float | None = None) -> bool:
        # True once the monitor thread has exited (or was never started).
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def is_current_thread(self) -> bool:
        return self._thread is threading.current_thread()

    def _run(self) -> None:
        threshold = self._config.current_threshold_a
        max_actuation_s = self._config.max_actuation_s()
        poll_s = self._config.poll_interval_s()

        while True:
            if self._cancel_evt.wait(poll_s):
                logger.debug("Monitor for %s cancelled after %d polls", self._target.name, self.polls)
                return

            self.polls += 1
            try:
                current = self._sensor.read_current()
            except OSError:
                logger.error("Error reading actuator current", exc_info=True)
            else:
                if current > threshold:
                    self.motion_detected = True
                elif self.motion_detected:
                    # Falling edge: motor stopped after having run.
                    logger.info(
                        "Motion complete (%.3f A <= %.3f A), door %s",
                        current, threshold, self._target.name,
                    )
                    self._finish()
                    return

            elapsed_s = self._clock() - self.started_at
            if elapsed_s > max_actuation_s:
                logger.warning(
                    "No end of motion detected within %.1f s, assuming door %s",
                    max_actuation_s, self._target.name,
                )
                self._finish()
                return

    def _finish(self) -> None:
        self.committed = self._commit(self)
