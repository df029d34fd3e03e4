"""Simulation helpers: stand-in hardware for running the door controller without a Pi."""

from .current_simulator import MotorCurrentSimulator
