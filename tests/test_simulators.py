"""
Simulation Support Unit Tests

Purpose:
Verifies the motor current simulator used to run the door controller without
hardware, including fault injection and its use as a door state observer.

Dependencies:
- Python 3.10+
- pytest
- sims/current_simulator.py, door_controller.py
"""

import pytest

from door_configuration import DoorConfiguration
from door_controller import DoorController
from door_states import ActuatorLine, DoorState
from sims.current_simulator import MotorCurrentSimulator


class FakeClock:
    def __init__(self, start: float = 0.0):
        self._t = float(start)

    def __call__(self) -> float:
        return self._t

    def advance(self, dt: float) -> None:
        self._t += float(dt)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sim(clock) -> MotorCurrentSimulator:
    return MotorCurrentSimulator(clock=clock, travel_time_s=5.0, running_current_a=1.0, idle_current_a=0.0)


def test_idle_before_any_motion(sim):
    assert sim.is_moving() is False
    assert sim.read_current() == 0.0


def test_running_current_during_travel_window(sim, clock):
    sim.start_motion()

    clock.advance(4.9)
    assert sim.is_moving() is True
    assert sim.read_current() == 1.0

    clock.advance(0.1)
    assert sim.is_moving() is False
    assert sim.read_current() == 0.0


def test_restart_extends_window(sim, clock):
    sim.start_motion()
    clock.advance(4.0)
    sim.start_motion()
    clock.advance(4.0)

    assert sim.read_current() == 1.0


def test_injected_faults_raise_oserror_then_recover(sim):
    sim.inject_faults(2)

    with pytest.raises(OSError):
        sim.read_current()
    with pytest.raises(OSError):
        sim.read_current()

    assert sim.read_current() == 0.0


def test_voltages(sim):
    sim.start_motion()

    assert sim.read_bus_voltage() == pytest.approx(12.0)
    assert sim.read_shunt_voltage() == pytest.approx(0.1)


@pytest.mark.parametrize(
    "new_state, moving",
    [
        (DoorState.OPENING, True),
        (DoorState.CLOSING, True),
        (DoorState.OPEN, False),
        (DoorState.CLOSED, False),
    ],
)
def test_on_transition_starts_motion_only_for_transient_states(sim, new_state, moving):
    sim.on_transition(DoorState.CLOSED, new_state)
    assert sim.is_moving() is moving


class NullActuator:
    def __init__(self):
        self.pulses = []

    def pulse(self, line: ActuatorLine, duration_ms: int) -> None:
        self.pulses.append(line)

    def set_level(self, line: ActuatorLine, level: bool) -> None:
        pass


def test_simulated_door_completes_a_full_cycle(clock):
    # Each read moves simulated time on by one second.
    class SteppingSimulator(MotorCurrentSimulator):
        def read_current(self):
            value = super().read_current()
            self.clock.advance(1.0)
            return value

    sim = SteppingSimulator(clock=clock, travel_time_s=3.0, running_current_a=1.2)
    config = DoorConfiguration(poll_interval_ms=1)
    c = DoorController(NullActuator(), sim, config, clock)
    c.subscribe(sim.on_transition)

    c.open_door()
    assert c.wait_until_settled(2.0)
    assert c.state == DoorState.OPEN

    c.close_door()
    assert c.wait_until_settled(2.0)
    assert c.state == DoorState.CLOSED
