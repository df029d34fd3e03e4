"""
Latching Relay Actuator Driver (ActuatorDriver)

Purpose:
Owns the two digital output lines wired to the DPDT latching relay that moves
the door. A momentary pulse on the OPEN line latches the relay towards
opening; a pulse on the CLOSE line latches it towards closing. The driver
guarantees that both lines are never asserted together.

Scope and Limitations:
- Pulses are synchronous: the calling thread blocks for the pulse duration.
- All line access is serialized on a single re-entrant lock. Other code that
  drives outputs on the same GPIO controller must take ``ActuatorDriver.lock``
  as well so that nothing interleaves with a pulse.
- Hardware errors raised by gpiozero are not caught here.

Dependencies:
- Python 3.10+
- gpiozero (DigitalOutputDevice)
- threading, time, logging (standard library)
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Mapping, Protocol

from gpiozero import DigitalOutputDevice

from door_states import ActuatorLine

logger = logging.getLogger(__name__)


class OutputLine(Protocol):
    # Subset of gpiozero.DigitalOutputDevice used by the driver.
    def on(self) -> None: ...

    def off(self) -> None: ...

    def close(self) -> None: ...


class Actuator(Protocol):
    def pulse(self, line: ActuatorLine, duration_ms: int) -> None: ...

    def set_level(self, line: ActuatorLine, level: bool) -> None: ...


class ActuatorDriver:
    def __init__(
        self,
        lines: Mapping[ActuatorLine, OutputLine],
        lock: threading.RLock | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        missing = [line.name for line in ActuatorLine if line not in lines]
        if missing:
            raise ValueError(f"missing output device for line(s): {', '.join(missing)}")

        self._lines = dict(lines)
        self._lock = lock if lock is not None else threading.RLock()
        self._sleep = sleep

    @classmethod
    def from_pins(
        cls,
        open_pin: int,
        close_pin: int,
        pin_factory=None,
        lock: threading.RLock | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "ActuatorDriver":
        # Both relays OFF at start-up.
        lines = {
            ActuatorLine.OPEN: DigitalOutputDevice(
                open_pin, active_high=True, initial_value=False, pin_factory=pin_factory
            ),
            ActuatorLine.CLOSE: DigitalOutputDevice(
                close_pin, active_high=True, initial_value=False, pin_factory=pin_factory
            ),
        }
        logger.info("Actuator lines configured: OPEN=GPIO%d CLOSE=GPIO%d", open_pin, close_pin)
        return cls(lines, lock=lock, sleep=sleep)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def pulse(self, line: ActuatorLine, duration_ms: int) -> None:
        if duration_ms <= 0:
            raise ValueError(f"pulse duration must be positive (got {duration_ms} ms)")

        with self._lock:
            self._all_off()
            logger.debug("Pulsing %s line for %d ms", line.name, duration_ms)
            device = self._lines[line]
            device.on()
            try:
                self._sleep(duration_ms / 1000.0)
            finally:
                device.off()

    def set_level(self, line: ActuatorLine, level: bool) -> None:
        with self._lock:
            if level:
                # Never leave both lines asserted.
                self._lines[line.other].off()
                self._lines[line].on()
            else:
                self._lines[line].off()

    def all_off(self) -> None:
        with self._lock:
            self._all_off()

    def close(self) -> None:
        with self._lock:
            self._all_off()
            for device in self._lines.values():
                device.close()

    def _all_off(self) -> None:
        for device in self._lines.values():
            device.off()
