"""CPU-private state: general purpose registers, I, PC and the call stack."""
from __future__ import annotations

from typing import List

from .constants import NUM_REGISTERS, STACK_DEPTH, START_ADDRESS
from .errors import StackOverflowError, StackUnderflowError

VF = 0xF


class RegisterFile:
    """V0..VF as a flat array of bytes plus the 16-bit I and PC registers."""

    __slots__ = ('_v', '_i', '_pc')

    def __init__(self, pc: int = START_ADDRESS):
        self._v = bytearray(NUM_REGISTERS)
        self._i = 0
        self._pc = pc

    def __getitem__(self, reg: int) -> int:
        self._check(reg)
        return self._v[reg]

    def __setitem__(self, reg: int, value: int):
        self._check(reg)
        self._v[reg] = value & 0xFF

    @staticmethod
    def _check(reg: int):
        # opcode register fields are 4 bits wide, anything else is a bug in the caller
        if not 0 <= reg < NUM_REGISTERS:
            raise IndexError(f"Invalid register V{reg:X}")

    @property
    def I(self) -> int:
        return self._i

    @I.setter
    def I(self, value: int):
        self._i = value & 0xFFFF

    @property
    def pc(self) -> int:
        return self._pc

    @pc.setter
    def pc(self, value: int):
        self._pc = value & 0xFFFF

    def advance(self, n: int = 2):
        self.pc = self._pc + n

    def set_carry(self, flag: bool):
        """Write the carry/borrow/collision flag into VF."""
        self._v[VF] = 1 if flag else 0

    def snapshot(self) -> List[int]:
        return list(self._v)

    def __repr__(self):
        regs = " ".join(f"V{n:X}={v:02X}" for n, v in enumerate(self._v))
        return f"<RegisterFile {regs} I={self._i:03X} PC={self._pc:03X}>"


class Stack:
    """Fixed-depth LIFO of return addresses."""

    def __init__(self, depth: int = STACK_DEPTH):
        self._entries: List[int] = []
        self.depth = depth

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, addr: int):
        if len(self._entries) >= self.depth:
            raise StackOverflowError(f"Stack overflow pushing 0x{addr:03X}", address=addr)
        self._entries.append(addr & 0xFFFF)

    def pop(self) -> int:
        if not self._entries:
            raise StackUnderflowError("Stack underflow on return")
        return self._entries.pop()
