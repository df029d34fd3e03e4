"""
Latching Door Control State Machine (DoorController)

Purpose:
Implements the door state machine. Commands pulse one of the two latching
relay lines through the ActuatorDriver, move the door into a transient state
and start a MotionMonitor that later commits the resting state once the
actuator current shows the motor has stopped (or the actuation timeout
expires). Observers are notified synchronously of every state transition.

Scope and Limitations:
- One instance per physical door; no state persists across restarts.
- At most one MotionMonitor is alive per controller. Each command cancels and
  joins the previous monitor before pulsing.
- The last command wins: re-issuing a command re-pulses and restarts
  monitoring, and the opposite command reverses direction immediately.
- Transitions are queued and delivered to observers one at a time, in the
  order they happened. Observers may call back into the controller, including
  issuing commands; transitions caused by such a call are delivered after the
  one currently being delivered.
- Observers run on whichever thread is delivering (normally the command
  thread for OPENING/CLOSING and the monitor thread for OPEN/CLOSED) and must
  not block. A command issued by an observer on the monitor thread waits for
  any command already running on another thread.

Dependencies:
- Python 3.10+
- collections, threading, time, logging (standard library)
- actuator_driver.py, current_sensor.py, door_configuration.py,
  door_states.py, motion_monitor.py
"""

# Change Log:
#
# 1.3 (2026-10-19)
#   - The new monitor is installed together with the transient state, before
#     observers are notified, so a command issued by an observer cancels it
#     instead of being overwritten by it.
#   - Observer notification moved to a FIFO queue drained by a single
#     delivering frame; nested transitions no longer overtake the one being
#     delivered.
#
# 1.2 (2026-10-19)
#   - Commands now wait at most cancel_timeout_ms for the previous monitor and
#     raise MonitorCancellationError instead of silently dropping the command.
#   - Commits from a cancelled monitor are rejected under the state lock.
#
# 1.1 (2026-10-19)
#   - Observer notification moved outside the state lock.
#
# 1.0 (2026-10-19)
#   - Initial open/close state machine with current-sensing completion.

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable

from actuator_driver import Actuator
from current_sensor import CurrentSensor
from door_configuration import DoorConfiguration
from door_states import ActuatorLine, DoorState
from motion_monitor import MotionMonitor

logger = logging.getLogger(__name__)

StateListener = Callable[[DoorState, DoorState], None]


class MonitorCancellationError(RuntimeError):
    """The previous motion monitor did not exit in time; the command was not issued."""


class DoorController:
    def __init__(
        self,
        actuator: Actuator,
        sensor: CurrentSensor,
        config: DoorConfiguration | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._actuator = actuator
        self._sensor = sensor
        self._config = config if config is not None else DoorConfiguration()
        self._clock = clock

        self._state = DoorState.CLOSED
        self._monitor: MotionMonitor | None = None
        self._listeners: list[StateListener] = []

        # Transitions not yet delivered, oldest first.
        self._pending: deque[tuple[DoorState, DoorState]] = deque()
        # True while some frame is draining _pending.
        self._delivering = False

        # Guards the cancel -> pulse -> set -> spawn sequence of a command.
        self._command_lock = threading.RLock()
        # Guards _state, _monitor, _listeners, _pending and _delivering.
        # Never held while calling out.
        self._state_lock = threading.Lock()

    # -------------------------
    # Properties / queries
    # -------------------------

    @property
    def state(self) -> DoorState:
        return self._state

    def get_state(self) -> DoorState:
        return self._state

    @property
    def config(self) -> DoorConfiguration:
        return self._config

    @property
    def monitor(self) -> MotionMonitor | None:
        with self._state_lock:
            return self._monitor

    def snapshot(self) -> dict[str, str]:
        return {"name": self._config.name, "state": self._state.name}

    # -------------------------
    # Observers
    # -------------------------

    def subscribe(self, listener: StateListener) -> None:
        with self._state_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        with self._state_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # -------------------------
    # Commands
    # -------------------------

    def open_door(self) -> None:
        self._command(ActuatorLine.OPEN, DoorState.OPENING, DoorState.OPEN)

    def close_door(self) -> None:
        self._command(ActuatorLine.CLOSE, DoorState.CLOSING, DoorState.CLOSED)

    def _command(self, line: ActuatorLine, transient: DoorState, target: DoorState) -> None:
        with self._command_lock:
            logger.info("%s command received (state=%s)", line.name, self._state.name)

            # Raises before any actuation if the old monitor will not stop.
            self._stop_monitor()

            self._actuator.pulse(line, self._config.pulse_ms)

            monitor = MotionMonitor(
                target=target,
                sensor=self._sensor,
                commit=self._commit_from_monitor,
                config=self._config,
                clock=self._clock,
            )
            # State and monitor change together, before any observer runs, so
            # a command issued from an observer always cancels this monitor.
            with self._state_lock:
                self._monitor = monitor
                deliver = self._enter_state_locked(transient)
            try:
                monitor.start()
            finally:
                if deliver:
                    self._deliver_pending()

    def wait_until_settled(self, timeout_s: float | None = None) -> bool:
        # Blocks until the active monitor (if any) has exited.
        monitor = self.monitor
        if monitor is None:
            return True
        return monitor.join(timeout_s)

    def close(self) -> None:
        # Stops monitoring; the door is left wherever it is.
        with self._command_lock:
            self._stop_monitor()

    # -------------------------
    # Monitor handling
    # -------------------------

    def _stop_monitor(self) -> None:
        with self._state_lock:
            monitor = self._monitor
        if monitor is None:
            return

        monitor.cancel()
        if monitor.is_current_thread():
            # Called from an observer on the monitor thread; it exits on return.
            return

        if not monitor.join(self._config.cancel_timeout_s()):
            logger.error(
                "Motion monitor for %s did not stop within %d ms; command aborted",
                monitor.target.name, self._config.cancel_timeout_ms,
            )
            raise MonitorCancellationError(
                f"motion monitor for {monitor.target.name} still running after "
                f"{self._config.cancel_timeout_ms} ms"
            )

        with self._state_lock:
            if self._monitor is monitor:
                self._monitor = None

    def _commit_from_monitor(self, monitor: MotionMonitor) -> bool:
        # Same mutation path as commands, without the command lock.
        with self._state_lock:
            if monitor.cancelled:
                logger.debug("Discarding %s from cancelled monitor", monitor.target.name)
                return False
            deliver = self._enter_state_locked(monitor.target)

        if deliver:
            self._deliver_pending()
        return True

    # -------------------------
    # State mutation / notification
    # -------------------------

    def _enter_state_locked(self, new_state: DoorState) -> bool:
        # Caller holds _state_lock. Returns True when the caller must drain
        # the queue; False when another frame is already delivering.
        old_state = self._state
        self._state = new_state
        if old_state is not new_state:
            logger.info("Door state %s -> %s", old_state.name, new_state.name)
            self._pending.append((old_state, new_state))

        if self._delivering:
            return False
        self._delivering = True
        return True

    def _deliver_pending(self) -> None:
        try:
            while True:
                with self._state_lock:
                    if not self._pending:
                        self._delivering = False
                        return
                    old_state, new_state = self._pending.popleft()
                    listeners = list(self._listeners)

                for listener in listeners:
                    try:
                        listener(old_state, new_state)
                    except Exception:
                        logger.exception("Door state listener %r failed", listener)
        except BaseException:
            # Undelivered transitions stay queued for the next drain.
            with self._state_lock:
                self._delivering = False
            raise
