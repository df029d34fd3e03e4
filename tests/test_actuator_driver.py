"""
Actuator Driver Unit Tests

Purpose:
Verifies that the ActuatorDriver never leaves both relay lines asserted,
drops both lines before every pulse, holds the shared controller lock for the
whole pulse, and drives real gpiozero output devices correctly.

Scope and Limitations:
- Line ordering is checked with recording fakes sharing one event log.
- GPIO behavior is checked against gpiozero's MockFactory; no hardware used.

Dependencies:
- Python 3.10+
- pytest
- gpiozero (MockFactory)
- actuator_driver.py, door_states.py
"""

import threading

import pytest
from gpiozero.pins.mock import MockFactory

from actuator_driver import ActuatorDriver
from door_states import ActuatorLine


class RecordingLine:
    def __init__(self, name: str, log: list):
        self.name = name
        self.log = log
        self.value = False
        self.closed = False

    def on(self) -> None:
        self.value = True
        self.log.append((self.name, "on"))

    def off(self) -> None:
        self.value = False
        self.log.append((self.name, "off"))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def log() -> list:
    return []


@pytest.fixture
def lines(log):
    return {
        ActuatorLine.OPEN: RecordingLine("open", log),
        ActuatorLine.CLOSE: RecordingLine("close", log),
    }


@pytest.fixture
def driver(lines, log):
    return ActuatorDriver(lines, sleep=lambda s: log.append(("sleep", s)))


def test_pulse_drops_both_lines_then_asserts_for_duration(driver, log):
    driver.pulse(ActuatorLine.OPEN, 100)

    assert log == [
        ("open", "off"),
        ("close", "off"),
        ("open", "on"),
        ("sleep", 0.1),
        ("open", "off"),
    ]


def test_pulse_close_line(driver, lines, log):
    driver.pulse(ActuatorLine.CLOSE, 250)

    assert log[-3:] == [("close", "on"), ("sleep", 0.25), ("close", "off")]
    assert lines[ActuatorLine.OPEN].value is False
    assert lines[ActuatorLine.CLOSE].value is False


def test_pulse_forces_other_line_low_first(driver, lines, log):
    driver.set_level(ActuatorLine.CLOSE, True)
    assert lines[ActuatorLine.CLOSE].value is True
    log.clear()

    driver.pulse(ActuatorLine.OPEN, 100)

    assert log.index(("close", "off")) < log.index(("open", "on"))


def test_set_level_high_drops_the_other_line(driver, lines):
    driver.set_level(ActuatorLine.OPEN, True)
    driver.set_level(ActuatorLine.CLOSE, True)

    assert lines[ActuatorLine.OPEN].value is False
    assert lines[ActuatorLine.CLOSE].value is True

    driver.set_level(ActuatorLine.CLOSE, False)
    assert lines[ActuatorLine.CLOSE].value is False


@pytest.mark.parametrize("duration_ms", [0, -100])
def test_pulse_rejects_non_positive_duration(driver, log, duration_ms):
    with pytest.raises(ValueError):
        driver.pulse(ActuatorLine.OPEN, duration_ms)
    assert log == []


def test_missing_line_rejected(log):
    with pytest.raises(ValueError):
        ActuatorDriver({ActuatorLine.OPEN: RecordingLine("open", log)})


def test_line_deasserted_even_if_sleep_is_interrupted(lines):
    def interrupted(_s):
        raise KeyboardInterrupt

    driver = ActuatorDriver(lines, sleep=interrupted)

    with pytest.raises(KeyboardInterrupt):
        driver.pulse(ActuatorLine.OPEN, 100)

    assert lines[ActuatorLine.OPEN].value is False


def test_pulse_holds_shared_lock(lines):
    shared = threading.RLock()
    acquired_elsewhere: list[bool] = []

    def sleep(_s):
        def probe():
            got = shared.acquire(blocking=False)
            if got:
                shared.release()
            acquired_elsewhere.append(got)

        t = threading.Thread(target=probe)
        t.start()
        t.join()

    driver = ActuatorDriver(lines, lock=shared, sleep=sleep)
    assert driver.lock is shared

    driver.pulse(ActuatorLine.CLOSE, 100)

    assert acquired_elsewhere == [False]


def test_close_drives_lines_low_and_releases_devices(driver, lines):
    driver.set_level(ActuatorLine.OPEN, True)
    driver.close()

    assert all(not line.value for line in lines.values())
    assert all(line.closed for line in lines.values())


# -----------------------------
# gpiozero integration
# -----------------------------

def _states(pin) -> list[bool]:
    return [bool(s.state) for s in pin.states]


def test_from_pins_drives_gpio_through_mock_factory():
    factory = MockFactory()
    driver = ActuatorDriver.from_pins(4, 17, pin_factory=factory, sleep=lambda s: None)
    try:
        open_pin = factory.pin(4)
        close_pin = factory.pin(17)
        assert not open_pin.state
        assert not close_pin.state

        driver.pulse(ActuatorLine.OPEN, 100)

        assert True in _states(open_pin)
        assert not open_pin.state
        assert True not in _states(close_pin)
    finally:
        driver.close()


def test_from_pins_never_asserts_both_lines():
    factory = MockFactory()
    driver = ActuatorDriver.from_pins(4, 17, pin_factory=factory, sleep=lambda s: None)
    try:
        open_pin = factory.pin(4)
        close_pin = factory.pin(17)

        driver.set_level(ActuatorLine.CLOSE, True)
        driver.pulse(ActuatorLine.OPEN, 100)

        assert not close_pin.state
        assert not open_pin.state
        assert True in _states(open_pin)
        assert True in _states(close_pin)
    finally:
        driver.close()
