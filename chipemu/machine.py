"""Driver-facing machine: wires the bus and CPU together and captures faults."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np

from .config import MachineConfig
from .constants import MEM_SIZE
from .cpu import CPU
from .errors import Chip8Error, ResourceError
from .interconnect import Interconnect

log = logging.getLogger(__name__)


class Chip8:
    """A complete machine instance.

    The driver loop calls run_frame() (or run_cycles() plus tick_timers()) at
    the timer rate, feeds key state in with press_key()/release_key() and
    polls frame_if_dirty() for something to render.

    A fault raised by the CPU halts the machine: it is logged, stored on
    `fault`, and step() reports False instead of raising, so a driver (or a
    test) can inspect it. Stepping a halted machine re-raises the fault.
    """

    def __init__(self, config: Optional[MachineConfig] = None):
        self.config = config or MachineConfig()
        self.bus = Interconnect(self.config)
        self.cpu = CPU(self.bus)
        self.fault: Optional[Chip8Error] = None

    # =============== ROM loading ===============
    @property
    def rom_capacity(self) -> int:
        return MEM_SIZE - self.config.program_address

    def load_rom(self, data: bytes):
        if len(data) > self.rom_capacity:
            raise ResourceError(
                f"ROM is too large for memory ({len(data)} bytes, max {self.rom_capacity})")
        self.bus.memory.load_at(self.config.program_address, bytes(data))
        log.info("ROM loaded (%d bytes)", len(data))

    def load_rom_file(self, path: Union[str, Path]):
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise ResourceError(f"Cannot read ROM {path}: {e}") from e
        self.load_rom(data)

    # =============== Execution ===============
    @property
    def halted(self) -> bool:
        return self.fault is not None

    def step(self) -> bool:
        if self.fault is not None:
            raise self.fault
        try:
            self.cpu.cycle()
        except Chip8Error as e:
            log.error("Machine halted: %s", e)
            self.fault = e
            return False
        return True

    def run_cycles(self, count: int) -> int:
        """Run up to `count` cycles, stopping at the first fault."""
        done = 0
        while done < count and self.step():
            done += 1
        return done

    def run_frame(self) -> int:
        done = self.run_cycles(self.config.cycles_per_frame)
        self.tick_timers()
        return done

    def tick_timers(self):
        self.bus.tick()

    # =============== Collaborator interfaces ===============
    def press_key(self, key: int):
        self.bus.keys.set_key(key, True)

    def release_key(self, key: int):
        self.bus.keys.set_key(key, False)

    def set_keys(self, states: Iterable[bool]):
        self.bus.keys.set_all(states)

    def frame_if_dirty(self) -> Optional[np.ndarray]:
        if not self.bus.display.dirty:
            return None
        return self.bus.display.get_frame()

    @property
    def sound_active(self) -> bool:
        return self.bus.timers.sound_timer > 0
