"""CHIP-8 CPU: fetch, decode and execute.

Decoding is two-level. The high nibble selects a handler; the compound
groups 0x0, 0x8, 0xE and 0xF then look up the low nibble or low byte in a
second table. Every handler returns the address of the next instruction,
so program counter movement is explicit per opcode:

  - PC + 2 for ordinary instructions
  - PC + 4 when a conditional skip is taken
  - an absolute target for jump, call and return
  - PC itself while FX0A waits for a key
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Mapping, NamedTuple, Optional

from .constants import GLYPH_HEIGHT
from .errors import DecodeError
from .interconnect import Interconnect
from .registers import RegisterFile, Stack

log = logging.getLogger(__name__)


class Opcode(NamedTuple):
    """A 16-bit instruction word split into its operand fields."""
    word: int

    @property
    def x(self) -> int:
        return (self.word & 0x0F00) >> 8

    @property
    def y(self) -> int:
        return (self.word & 0x00F0) >> 4

    @property
    def n(self) -> int:
        return self.word & 0x000F

    @property
    def kk(self) -> int:
        return self.word & 0x00FF

    @property
    def nnn(self) -> int:
        return self.word & 0x0FFF

    def __str__(self):
        return f"{self.word:04X}"


Handler = Callable[[Opcode], int]


class CPU:
    def __init__(self, bus: Interconnect, pc: Optional[int] = None):
        self.bus = bus
        self.regs = RegisterFile(bus.config.program_address if pc is None else pc)
        self.stack = Stack()

        self._groups: Mapping[int, Handler] = MappingProxyType({
            0x0: self._group_0,
            0x1: self._jump,
            0x2: self._call,
            0x3: self._skip_eq_kk,
            0x4: self._skip_ne_kk,
            0x5: self._skip_eq_reg,
            0x6: self._load_kk,
            0x7: self._add_kk,
            0x8: self._group_8,
            0x9: self._skip_ne_reg,
            0xA: self._load_i,
            0xD: self._draw,
            0xE: self._group_e,
            0xF: self._group_f,
        })
        self._alu: Mapping[int, Handler] = MappingProxyType({
            0x0: self._alu_ld,
            0x1: self._alu_or,
            0x2: self._alu_and,
            0x3: self._alu_xor,
            0x4: self._alu_add,
            0x5: self._alu_sub,
            0x6: self._alu_shr,
            0x7: self._alu_subn,
            0xE: self._alu_shl,
        })
        self._keyops: Mapping[int, Handler] = MappingProxyType({
            0x9E: self._skip_key_down,
            0xA1: self._skip_key_up,
        })
        self._misc: Mapping[int, Handler] = MappingProxyType({
            0x07: self._get_delay,
            0x0A: self._wait_key,
            0x15: self._set_delay,
            0x18: self._set_sound,
            0x1E: self._add_i,
            0x29: self._font_char,
            0x33: self._store_bcd,
            0x55: self._store_regs,
            0x65: self._load_regs,
        })

    @property
    def pc(self) -> int:
        return self.regs.pc

    @pc.setter
    def pc(self, value: int):
        self.regs.pc = value

    # =============== Core fetch/decode/execute cycle ===============
    def cycle(self):
        """Execute exactly one instruction.

        Raises DecodeError, BoundsError or one of its stack subclasses; the
        machine state is undefined afterwards.
        """
        pc = self.regs.pc
        op = Opcode(self.bus.fetch_instruction(pc))
        log.debug("Decoding opcode 0x%s at pc=0x%03X", op, pc)
        handler = self._groups.get(op.word >> 12)
        if handler is None:
            raise DecodeError(op.word, pc)
        self.regs.pc = handler(op)

    def _sub_dispatch(self, table: Mapping[int, Handler], key: int, op: Opcode) -> int:
        handler = table.get(key)
        if handler is None:
            raise DecodeError(op.word, self.regs.pc)
        return handler(op)

    def _next(self) -> int:
        return self.regs.pc + 2

    def _skip_if(self, condition: bool) -> int:
        return self.regs.pc + (4 if condition else 2)

    # =============== 0x0 group ===============
    def _group_0(self, op: Opcode) -> int:
        if op.word == 0x00E0:  # CLS
            self.bus.display.clear()
            return self._next()
        if op.word == 0x00EE:  # RET
            addr = self.stack.pop()
            log.debug("Returning from subroutine to 0x%03X", addr)
            return addr + 2
        # 0NNN machine code routines are not supported
        raise DecodeError(op.word, self.regs.pc)

    # =============== Flow control ===============
    def _jump(self, op: Opcode) -> int:
        return op.nnn

    def _call(self, op: Opcode) -> int:
        log.debug("Calling subroutine at 0x%03X", op.nnn)
        self.stack.push(self.regs.pc)
        return op.nnn

    def _skip_eq_kk(self, op: Opcode) -> int:
        return self._skip_if(self.regs[op.x] == op.kk)

    def _skip_ne_kk(self, op: Opcode) -> int:
        return self._skip_if(self.regs[op.x] != op.kk)

    def _skip_eq_reg(self, op: Opcode) -> int:
        if op.n != 0:
            raise DecodeError(op.word, self.regs.pc)
        return self._skip_if(self.regs[op.x] == self.regs[op.y])

    def _skip_ne_reg(self, op: Opcode) -> int:
        if op.n != 0:
            raise DecodeError(op.word, self.regs.pc)
        return self._skip_if(self.regs[op.x] != self.regs[op.y])

    # =============== Immediate loads ===============
    def _load_kk(self, op: Opcode) -> int:
        self.regs[op.x] = op.kk
        return self._next()

    def _add_kk(self, op: Opcode) -> int:
        # wraps, VF untouched
        self.regs[op.x] = (self.regs[op.x] + op.kk) & 0xFF
        return self._next()

    def _load_i(self, op: Opcode) -> int:
        self.regs.I = op.nnn
        return self._next()

    # =============== 0x8 group: register ALU ===============
    # Results go to VX before the flag goes to VF, so with X=F the flag wins.
    def _group_8(self, op: Opcode) -> int:
        return self._sub_dispatch(self._alu, op.n, op)

    def _alu_ld(self, op: Opcode) -> int:
        self.regs[op.x] = self.regs[op.y]
        return self._next()

    def _alu_or(self, op: Opcode) -> int:
        self.regs[op.x] = self.regs[op.x] | self.regs[op.y]
        return self._next()

    def _alu_and(self, op: Opcode) -> int:
        self.regs[op.x] = self.regs[op.x] & self.regs[op.y]
        return self._next()

    def _alu_xor(self, op: Opcode) -> int:
        self.regs[op.x] = self.regs[op.x] ^ self.regs[op.y]
        return self._next()

    def _alu_add(self, op: Opcode) -> int:
        total = self.regs[op.x] + self.regs[op.y]
        self.regs[op.x] = total & 0xFF
        self.regs.set_carry(total > 0xFF)
        return self._next()

    def _alu_sub(self, op: Opcode) -> int:
        # VF = 1 means a borrow occurred
        vx, vy = self.regs[op.x], self.regs[op.y]
        self.regs[op.x] = (vx - vy) & 0xFF
        self.regs.set_carry(vy > vx)
        return self._next()

    def _alu_subn(self, op: Opcode) -> int:
        vx, vy = self.regs[op.x], self.regs[op.y]
        self.regs[op.x] = (vy - vx) & 0xFF
        self.regs.set_carry(vx > vy)
        return self._next()

    def _alu_shr(self, op: Opcode) -> int:
        lsb = self.regs[op.x] & 0x01
        self.regs[op.x] = self.regs[op.y] >> 1
        self.regs.set_carry(lsb == 1)
        return self._next()

    def _alu_shl(self, op: Opcode) -> int:
        msb = self.regs[op.x] & 0x80
        self.regs[op.x] = (self.regs[op.y] << 1) & 0xFF
        self.regs.set_carry(msb != 0)
        return self._next()

    # =============== Display ===============
    def _draw(self, op: Opcode) -> int:
        collision = self.bus.draw_sprite(self.regs.I, self.regs[op.x], self.regs[op.y], op.n)
        self.regs.set_carry(collision)
        return self._next()

    # =============== 0xE group: keypad ===============
    def _group_e(self, op: Opcode) -> int:
        return self._sub_dispatch(self._keyops, op.kk, op)

    def _skip_key_down(self, op: Opcode) -> int:
        return self._skip_if(self.bus.keys.is_down(self.regs[op.x]))

    def _skip_key_up(self, op: Opcode) -> int:
        return self._skip_if(not self.bus.keys.is_down(self.regs[op.x]))

    # =============== 0xF group: timers, I and memory ===============
    def _group_f(self, op: Opcode) -> int:
        return self._sub_dispatch(self._misc, op.kk, op)

    def _get_delay(self, op: Opcode) -> int:
        self.regs[op.x] = self.bus.timers.delay_timer
        return self._next()

    def _wait_key(self, op: Opcode) -> int:
        key = self.bus.keys.first_down()
        if key is None:
            # re-execute this instruction until a key is held
            return self.regs.pc
        log.debug("Key 0x%X pressed, storing in V%X", key, op.x)
        self.regs[op.x] = key
        return self._next()

    def _set_delay(self, op: Opcode) -> int:
        self.bus.timers.delay_timer = self.regs[op.x]
        return self._next()

    def _set_sound(self, op: Opcode) -> int:
        self.bus.timers.sound_timer = self.regs[op.x]
        return self._next()

    def _add_i(self, op: Opcode) -> int:
        self.regs.I = self.regs.I + self.regs[op.x]
        return self._next()

    def _font_char(self, op: Opcode) -> int:
        self.regs.I = self.bus.font_address + self.regs[op.x] * GLYPH_HEIGHT
        return self._next()

    def _store_bcd(self, op: Opcode) -> int:
        val = self.regs[op.x]
        mem = self.bus.memory
        mem.write(self.regs.I, val // 100)
        mem.write(self.regs.I + 1, (val // 10) % 10)
        mem.write(self.regs.I + 2, val % 10)
        return self._next()

    def _store_regs(self, op: Opcode) -> int:
        for reg in range(op.x + 1):
            self.bus.memory.write(self.regs.I, self.regs[reg])
            self.regs.I += 1
        return self._next()

    def _load_regs(self, op: Opcode) -> int:
        for reg in range(op.x + 1):
            self.regs[reg] = self.bus.memory.read(self.regs.I)
            self.regs.I += 1
        return self._next()
