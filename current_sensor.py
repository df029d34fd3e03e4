"""
INA219 Actuator Current Sensor Adapter

Purpose:
Adapts the Adafruit CircuitPython INA219 driver to the current-sensor
capability used by the MotionMonitor: ``read_current()`` returning amperes
and raising ``OSError`` when the I2C transfer fails. Bus and shunt voltage
reads are exposed for the current logging utility.

Scope and Limitations:
- The board/busio/adafruit_ina219 modules are imported only when a sensor is
  built from the I2C bus, so this module imports cleanly on machines without
  I2C hardware (tests, simulation).
- Calibration targets a 0.1 ohm shunt with up to 3.2 A through the
  actuator: 16 V bus range, PGA /8 (320 mV), 12-bit bus ADC and 12-bit
  128-sample averaging on the shunt ADC.

Dependencies:
- Python 3.10+
- adafruit-circuitpython-ina219, adafruit-blinka (board, busio)
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class CurrentSensor(Protocol):
    def read_current(self) -> float: ...


class INA219CurrentSensor:
    def __init__(self, device):
        # device: an adafruit_ina219.INA219 (or anything exposing the same
        # current / bus_voltage / shunt_voltage properties).
        self._device = device

    @classmethod
    def from_i2c(cls, address: int = 0x40, i2c=None) -> "INA219CurrentSensor":
        import board
        import busio
        from adafruit_ina219 import ADCResolution, BusVoltageRange, Gain, INA219

        if i2c is None:
            i2c = busio.I2C(board.SCL, board.SDA)

        device = INA219(i2c, addr=address)
        # 0.1 ohm shunt, 320 mV full scale => +/-3.2 A at 0.1 mA/bit.
        device.set_calibration_32V_2A()
        device.bus_voltage_range = BusVoltageRange.RANGE_16V
        device.gain = Gain.DIV_8_320MV
        device.bus_adc_resolution = ADCResolution.ADCRES_12BIT_1S
        device.shunt_adc_resolution = ADCResolution.ADCRES_12BIT_128S

        logger.info("INA219 initialized at address %#04x", address)
        return cls(device)

    def read_current(self) -> float:
        # Driver reports milliamps.
        return float(self._device.current) / 1000.0

    def read_bus_voltage(self) -> float:
        return float(self._device.bus_voltage)

    def read_shunt_voltage(self) -> float:
        return float(self._device.shunt_voltage)
