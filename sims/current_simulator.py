"""
Actuator Motor Current Simulator

Purpose:
Provides a lightweight stand-in for the INA219 current sensor so the door
controller can run without hardware. Each actuation starts a travel window
during which the simulated motor draws its running current; outside that
window the reading falls back to the idle current. Transient I2C faults can
be injected to exercise the monitor's read-failure handling.

Scope and Limitations:
- Current is a square profile; no inrush, ripple or stall current is modeled.
- Driven by an injected clock; thread-safe for one writer and one reader.
- Intended for simulation and testing only.

Dependencies:
- Python 3.10+
- threading (standard library)
- door_states.py
"""

import threading

from door_states import DoorState


class MotorCurrentSimulator:
    def __init__(
        self,
        clock,
        travel_time_s=8.0,       # seconds for a full stroke
        running_current_a=1.2,   # amperes while the motor runs
        idle_current_a=0.002,    # quiescent reading
        bus_voltage_v=12.0,
        shunt_ohms=0.1,
    ):
        self.clock = clock
        self.travel_time_s = float(travel_time_s)
        self.running_current_a = float(running_current_a)
        self.idle_current_a = float(idle_current_a)
        self.bus_voltage_v = float(bus_voltage_v)
        self.shunt_ohms = float(shunt_ohms)

        self._lock = threading.Lock()
        self._motion_ends_at: float | None = None
        self._pending_faults = 0

    def start_motion(self) -> None:
        # A new pulse restarts the stroke from now.
        with self._lock:
            self._motion_ends_at = self.clock() + self.travel_time_s

    def inject_faults(self, count: int) -> None:
        with self._lock:
            self._pending_faults = max(0, int(count))

    def is_moving(self) -> bool:
        with self._lock:
            return self._motion_ends_at is not None and self.clock() < self._motion_ends_at

    def on_transition(self, old_state: DoorState, new_state: DoorState) -> None:
        # Door state observer: the relay was just pulsed.
        if new_state.is_transient:
            self.start_motion()

    def read_current(self) -> float:
        with self._lock:
            if self._pending_faults:
                self._pending_faults -= 1
                raise OSError("simulated I2C transfer failure")
        return self.running_current_a if self.is_moving() else self.idle_current_a

    def read_bus_voltage(self) -> float:
        return self.bus_voltage_v

    def read_shunt_voltage(self) -> float:
        return self.read_current() * self.shunt_ohms
