"""Bus between the CPU and the shared machine state."""
from __future__ import annotations

from typing import Optional

from .config import MachineConfig
from .display import Display
from .memory import Memory
from .timers import Input, Timers


class Interconnect:
    """Owns RAM, display, timers and keypad; the CPU reaches all of them through here."""

    def __init__(self, config: Optional[MachineConfig] = None):
        self.config = config or MachineConfig()
        self.memory = Memory()
        self.display = Display()
        self.timers = Timers()
        self.keys = Input()
        self.memory.load_at(self.config.font_address, self.config.font)

    @property
    def font_address(self) -> int:
        return self.config.font_address

    def tick(self):
        self.timers.tick()

    def fetch_instruction(self, pc: int) -> int:
        """Fetch the 2-byte instruction at address `pc`."""
        return self.memory.fetch_instruction(pc)

    def draw_sprite(self, addr: int, x: int, y: int, height: int) -> bool:
        """Draw the sprite stored at `addr` at (x, y). Returns the collision flag."""
        return self.display.draw_sprite(x, y, height, self.memory.get_sprite(addr, height))
