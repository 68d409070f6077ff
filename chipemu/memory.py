"""4 KiB flat, byte-addressable RAM."""
from __future__ import annotations

import logging

from .constants import MEM_SIZE
from .errors import BoundsError

log = logging.getLogger(__name__)


class Memory:
    """Bounds-checked byte store. Every access outside [0, MEM_SIZE) is a fault."""

    def __init__(self, size: int = MEM_SIZE):
        self._data = bytearray(size)

    def __len__(self) -> int:
        return len(self._data)

    def _check(self, addr: int, length: int = 1):
        if addr < 0 or length < 0 or addr + length > len(self._data):
            raise BoundsError(
                f"Memory access 0x{addr:03X}+{length} outside 0x000-0x{len(self._data) - 1:03X}",
                address=addr)

    def load_at(self, addr: int, data: bytes):
        """Copy `data` into memory starting at `addr`."""
        self._check(addr, len(data))
        log.debug("Writing %d bytes into memory at 0x%03X", len(data), addr)
        self._data[addr:addr + len(data)] = data

    def read(self, addr: int) -> int:
        self._check(addr)
        return self._data[addr]

    def write(self, addr: int, value: int):
        self._check(addr)
        self._data[addr] = value & 0xFF

    def get_sprite(self, addr: int, height: int) -> memoryview:
        """Read-only view of `height` sprite rows starting at `addr`."""
        self._check(addr, height)
        return memoryview(self._data)[addr:addr + height].toreadonly()

    def fetch_instruction(self, pc: int) -> int:
        # opcodes are stored big-endian
        self._check(pc, 2)
        return (self._data[pc] << 8) | self._data[pc + 1]
