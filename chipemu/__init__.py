"""
CHIP-8 emulator core.

Memory, registers, stack, framebuffer, timers and keypad, driven by a
fetch/decode/execute CPU. The pygame window and command line driver live in
chipemu.frontend and chipemu.cli; the core never imports them.

License: MIT
"""
from .config import MachineConfig
from .cpu import CPU, Opcode
from .display import Display
from .errors import (BoundsError, Chip8Error, DecodeError, ResourceError,
                     StackOverflowError, StackUnderflowError)
from .interconnect import Interconnect
from .machine import Chip8
from .memory import Memory
from .registers import RegisterFile, Stack
from .timers import Input, Timers

__version__ = "1.0.0"

__all__ = [
    "BoundsError", "CPU", "Chip8", "Chip8Error", "DecodeError", "Display",
    "Input", "Interconnect", "MachineConfig", "Memory", "Opcode",
    "RegisterFile", "ResourceError", "Stack", "StackOverflowError",
    "StackUnderflowError", "Timers",
]
