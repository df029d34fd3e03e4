#!/usr/bin/env python3
"""
INA219 Current Logging Utility

Purpose:
Samples the actuator current (and optionally bus and shunt voltage) from the
INA219 every 100 ms for a given duration and prints a tab-separated table.
Used on the bench to choose the current threshold and maximum actuation time
recorded in DoorConfiguration.

Scope and Limitations:
- Read errors are logged and sampling continues.
- Timing is approximate; rows carry the elapsed time actually observed.

Dependencies:
- Python 3.10+
- argparse, logging, time (standard library)
- current_sensor.py (adafruit-circuitpython-ina219)
"""

import argparse
import logging
import sys
import time
from typing import Callable, Sequence, TextIO

from current_sensor import INA219CurrentSensor

logger = logging.getLogger(__name__)

SAMPLE_INTERVAL_S = 0.1


def _i2c_address(text: str) -> int:
    try:
        addr = int(text, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex address: {text!r}")
    if not 0x40 <= addr <= 0x4F:
        raise argparse.ArgumentTypeError(f"INA219 address must be 40-4F (got {text})")
    return addr


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="current_logger",
        description="Log INA219 actuator current at 10 Hz.",
    )
    parser.add_argument("--addr", type=_i2c_address, default=0x40, help="I2C address in hex (default 40)")
    parser.add_argument("-d", "--duration", type=int, required=True, help="Acquisition duration, in seconds")
    parser.add_argument("--bus-voltage", action="store_true", help="Also read bus voltage")
    parser.add_argument("--shunt-voltage", action="store_true", help="Also read shunt voltage")
    return parser


def sample(
    sensor,
    duration_s: float,
    read_bus: bool = False,
    read_shunt: bool = False,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    out: TextIO | None = None,
) -> int:
    if out is None:
        out = sys.stdout

    header = "Time\tCurrent"
    if read_bus:
        header += "\tBus"
    if read_shunt:
        header += "\tShunt"
    out.write(header + "\n")

    rows = 0
    start = clock()
    while True:
        elapsed_ms = int(round((clock() - start) * 1000))
        try:
            fields = [str(elapsed_ms), f"{sensor.read_current():f}"]
            if read_bus:
                fields.append(f"{sensor.read_bus_voltage():f}")
            if read_shunt:
                fields.append(f"{sensor.read_shunt_voltage():f}")
        except OSError:
            logger.error("Exception while reading I2C bus", exc_info=True)
        else:
            out.write("\t".join(fields) + "\n")
            rows += 1

        sleep(SAMPLE_INTERVAL_S)
        if clock() - start >= duration_s:
            break

    return rows


def main(argv: Sequence[str] | None = None, sensor_factory=INA219CurrentSensor.from_i2c) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    args = build_parser().parse_args(argv)

    sensor = sensor_factory(address=args.addr)
    try:
        sample(
            sensor,
            duration_s=args.duration,
            read_bus=args.bus_voltage,
            read_shunt=args.shunt_voltage,
        )
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
