"""Machine faults.

Every error here is fatal for the running machine: CHIP-8 has no fault
handling instructions, so they propagate to whoever drives the CPU.
"""
from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for all machine faults."""


class DecodeError(Chip8Error):
    """Unknown or unimplemented opcode."""

    def __init__(self, opcode: int, pc: int):
        super().__init__(f"Unknown opcode: 0x{opcode:04X} at PC 0x{pc:03X}")
        self.opcode = opcode
        self.pc = pc


class BoundsError(Chip8Error, IndexError):
    """Memory, key or stack index outside its valid range."""

    def __init__(self, message: str, address: Optional[int] = None):
        super().__init__(message)
        self.address = address


class StackOverflowError(BoundsError):
    pass


class StackUnderflowError(BoundsError):
    pass


class ResourceError(Chip8Error, ValueError):
    """ROM does not fit into program memory, or could not be read."""
