"""
Door Hardware and Timing Configuration Model (DoorConfiguration)

Purpose:
Defines an immutable data model holding the wiring, timing and current
sensing parameters of one latching door. The DoorController, ActuatorDriver
and MotionMonitor read their constants from here so that hardware
calibration values (current threshold, maximum actuation time) are not
hard-coded into control logic.

Scope and Limitations:
- Values are static once instantiated; there is no automatic calibration.
- Pin numbers use Broadcom (BCM) numbering as understood by gpiozero.
- INA219 parameters describe the default board: 0.1 ohm shunt, 3.2 A max.

Dependencies:
- Python 3.10+
- dataclasses (standard library)
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class DoorConfiguration:
    # Immutable door hardware configuration.
    name: str = "door"

    open_pin: int = 4
    close_pin: int = 17
    pulse_ms: int = 100

    poll_interval_ms: int = 100
    current_threshold_a: float = 0.1
    max_actuation_ms: int = 50_000
    cancel_timeout_ms: int = 5_000

    ina219_address: int = 0x40
    shunt_ohms: float = 0.1

    def __post_init__(self) -> None:
        if self.open_pin == self.close_pin:
            raise ValueError(
                f"open_pin and close_pin must differ (both {self.open_pin})"
            )
        for field_name in ("pulse_ms", "poll_interval_ms", "max_actuation_ms", "cancel_timeout_ms"):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be positive")
        if not math.isfinite(self.current_threshold_a) or self.current_threshold_a < 0:
            raise ValueError(
                f"current_threshold_a must be a finite, non-negative value (got {self.current_threshold_a})"
            )
        if not 0x40 <= self.ina219_address <= 0x4F:
            raise ValueError(f"ina219_address out of range: {self.ina219_address:#x}")

    def pulse_s(self) -> float:
        return self.pulse_ms / 1000.0

    def poll_interval_s(self) -> float:
        return self.poll_interval_ms / 1000.0

    def max_actuation_s(self) -> float:
        return self.max_actuation_ms / 1000.0

    def cancel_timeout_s(self) -> float:
        return self.cancel_timeout_ms / 1000.0

    def max_polls(self) -> int:
        # Worst-case number of polls before the timeout fallback commits.
        # Pure calculation; elapsed must strictly exceed max_actuation_ms.
        return self.max_actuation_ms // self.poll_interval_ms + 1
