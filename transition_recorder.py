"""
Door Transition CSV Recorder

Purpose:
Provides a DoorController observer that appends every door state transition
to a CSV file (timestamp, old state, new state) for post-run review of
open/close cycles, reversals and timeout commits.

Scope and Limitations:
- Append-only; an existing file is extended and its header is not rewritten.
- Timestamps come from the injected clock (wall time from main.py).
- Called synchronously from controller notification delivery, so writes are
  short and serialized on an internal lock.

Dependencies:
- Python 3.10+
- dataclasses, pathlib, threading (standard library)
- door_states.py
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable
import threading

from door_states import DoorState


@dataclass
class TransitionRecorder:
    # Door state observer appending one CSV line per transition.
    filepath: Path
    clock: Callable[[], float]

    def __post_init__(self) -> None:
        self.filepath = Path(self.filepath)
        self._lock = threading.Lock()
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

        if not self.filepath.exists():
            with self.filepath.open("w", encoding="utf-8") as f:
                f.write("timestamp,old_state,new_state\n")

    def __call__(self, old_state: DoorState, new_state: DoorState) -> None:
        self.record(old_state, new_state)

    def record(self, old_state: DoorState, new_state: DoorState) -> None:
        ts = self.clock()
        line = f"{ts:.6f},{old_state.name},{new_state.name}\n"

        with self._lock:
            with self.filepath.open("a", encoding="utf-8") as f:
                f.write(line)
                f.flush()
