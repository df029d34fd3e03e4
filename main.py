#!/usr/bin/env python3
import argparse
import logging
import signal
import time
from pathlib import Path
from threading import Event

from actuator_driver import ActuatorDriver
from app_context import AppContext
from current_sensor import INA219CurrentSensor
from door_configuration import DoorConfiguration
from door_controller import DoorController, MonitorCancellationError
from sims.current_simulator import MotorCurrentSimulator
from transition_recorder import TransitionRecorder


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def setup_signal_handlers(ctx: AppContext):
    def _handle_shutdown(signum, frame):
        logging.info("Shutdown signal received (%s)", signum)
        ctx.shutdown_event.set()
        # Unblocks input() in the command loop.
        raise KeyboardInterrupt

    signal.signal(signal.SIGINT, _handle_shutdown)
    signal.signal(signal.SIGTERM, _handle_shutdown)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Latching door controller")
    parser.add_argument("--simulate", action="store_true", help="Use mock GPIO and a simulated current sensor")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default INFO)")
    parser.add_argument("--transition-log", type=Path, default=None, help="Append door transitions to this CSV file")
    return parser.parse_args(argv)


def initialize(args: argparse.Namespace) -> AppContext:
    logging.info("Initializing application")

    config = DoorConfiguration(name="door")
    clock = time.monotonic

    if args.simulate:
        from gpiozero.pins.mock import MockFactory

        actuator = ActuatorDriver.from_pins(config.open_pin, config.close_pin, pin_factory=MockFactory())
        sensor = MotorCurrentSimulator(clock=clock, shunt_ohms=config.shunt_ohms)
    else:
        actuator = ActuatorDriver.from_pins(config.open_pin, config.close_pin)
        sensor = INA219CurrentSensor.from_i2c(address=config.ina219_address)

    controller = DoorController(actuator=actuator, sensor=sensor, config=config, clock=clock)
    if args.simulate:
        # The simulated motor starts running when the relay is pulsed.
        controller.subscribe(sensor.on_transition)

    recorder = None
    if args.transition_log is not None:
        recorder = TransitionRecorder(filepath=args.transition_log, clock=time.time)
        controller.subscribe(recorder)

    return AppContext(
        controller=controller,
        actuator=actuator,
        sensor=sensor,
        config=config,
        clock=clock,
        shutdown_event=Event(),
        recorder=recorder,
    )


def _print_help():
    print(
        """
Commands
  o | open          Pulse the OPEN line and monitor motion
  c | close         Pulse the CLOSE line and monitor motion
  state             Print door state
  status            Print door state, monitor and sensor details
  current           Read actuator current once
  wait [seconds]    Wait for the door to settle (default: no limit)
  help              Print help
  q                 Quit
"""
    )


def _print_status(ctx: AppContext):
    monitor = ctx.controller.monitor
    print("\n=== STATUS ===")
    print(f"Door: {ctx.controller.snapshot()}")
    if monitor is not None:
        print(f"MonitorTarget: {monitor.target.name}")
        print(f"MonitorAlive: {monitor.is_alive()}")
        print(f"MotionDetected: {monitor.motion_detected}")
        print(f"Polls: {monitor.polls}")
    print(f"CurrentThresholdA: {ctx.config.current_threshold_a}")
    print(f"MaxActuationMs: {ctx.config.max_actuation_ms}")
    print("=============\n")


def command_loop(ctx: AppContext):
    _print_help()

    while not ctx.shutdown_event.is_set():
        try:
            cmd = input("> ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        parts = cmd.split()
        if not parts:
            continue
        op = parts[0]

        try:
            if op in ("o", "open"):
                ctx.controller.open_door()
                print(ctx.controller.state.name)

            elif op in ("c", "close"):
                ctx.controller.close_door()
                print(ctx.controller.state.name)

            elif op == "state":
                print(ctx.controller.state.name)

            elif op == "status":
                _print_status(ctx)

            elif op == "current":
                try:
                    print(f"{ctx.sensor.read_current():.4f} A")
                except OSError as e:
                    print(f"Current read failed: {e}")

            elif op == "wait":
                timeout_s = float(parts[1]) if len(parts) >= 2 else None
                settled = ctx.controller.wait_until_settled(timeout_s)
                print(f"{ctx.controller.state.name} (settled={settled})")

            elif op in ("help", "?"):
                _print_help()

            elif op in ("q", "quit", "exit"):
                break

            else:
                print("Unknown command. Type 'help'.")

        except MonitorCancellationError as e:
            print(f"Command aborted: {e}")
        except ValueError:
            print("Invalid argument.")
        except KeyboardInterrupt:
            print()
            break

    logging.info("Command loop terminated")


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)
    ctx = initialize(args)
    setup_signal_handlers(ctx)

    try:
        command_loop(ctx)
    finally:
        ctx.shutdown()

    logging.info("Main loop terminated")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
