"""Instruction decoding: 16-bit words to opcode variants."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from . import opcodes as op
from .opcodes import OpCode

# 8xyN lookup on the bottom nibble
_ALU = {
    0x0: op.LdReg,
    0x1: op.Or,
    0x2: op.And,
    0x3: op.Xor,
    0x4: op.AddReg,
    0x5: op.Sub,
    0x6: op.Shr,
    0x7: op.Subn,
    0xE: op.Shl,
}

# Ex../Fx.. lookup on the bottom byte
_KEY_OPS = {
    0x9E: op.Skp,
    0xA1: op.Sknp,
}
_MISC_OPS = {
    0x07: op.LdVxDt,
    0x0A: op.LdVxK,
    0x15: op.LdDtVx,
    0x18: op.LdStVx,
    0x1E: op.AddI,
    0x29: op.LdF,
    0x33: op.LdB,
    0x55: op.LdMemVx,
    0x65: op.LdVxMem,
}


@dataclass(frozen=True)
class Instruction:
    """Bit-field view of a raw 16-bit instruction word."""
    word: int

    @property
    def addr(self) -> int:
        return self.word & 0x0FFF

    @property
    def nibble(self) -> int:
        return self.word & 0x000F

    @property
    def x(self) -> int:
        return (self.word & 0x0F00) >> 8

    @property
    def y(self) -> int:
        return (self.word & 0x00F0) >> 4

    @property
    def byte(self) -> int:
        return self.word & 0x00FF

    @property
    def nibbles(self) -> Tuple[int, int, int, int]:
        return (
            (self.word & 0xF000) >> 12,
            (self.word & 0x0F00) >> 8,
            (self.word & 0x00F0) >> 4,
            self.word & 0x000F,
        )


@lru_cache(maxsize=None)
def decode(word: int) -> OpCode:
    """
    Decode a 16-bit instruction word.

    Total over 0x0000-0xFFFF: anything that is not a recognised instruction
    (including the legacy 0nnn system call) decodes to ``Noop``.
    """
    ins = Instruction(word & 0xFFFF)
    family, _, _, low = ins.nibbles

    if family == 0x0:
        if ins.word == 0x00E0:
            return op.Cls()
        if ins.word == 0x00EE:
            return op.Ret()
        return op.Noop()
    if family == 0x1:
        return op.Jp(ins.addr)
    if family == 0x2:
        return op.Call(ins.addr)
    if family == 0x3:
        return op.SeByte(ins.x, ins.byte)
    if family == 0x4:
        return op.SneByte(ins.x, ins.byte)
    if family == 0x5 and low == 0x0:
        return op.SeReg(ins.x, ins.y)
    if family == 0x6:
        return op.LdByte(ins.x, ins.byte)
    if family == 0x7:
        return op.AddByte(ins.x, ins.byte)
    if family == 0x8 and low in _ALU:
        return _ALU[low](ins.x, ins.y)
    if family == 0x9 and low == 0x0:
        return op.SneReg(ins.x, ins.y)
    if family == 0xA:
        return op.LdI(ins.addr)
    if family == 0xB:
        return op.JpV0(ins.addr)
    if family == 0xC:
        return op.Rnd(ins.x, ins.byte)
    if family == 0xD:
        return op.Drw(ins.x, ins.y, ins.nibble)
    if family == 0xE and ins.byte in _KEY_OPS:
        return _KEY_OPS[ins.byte](ins.x)
    if family == 0xF and ins.byte in _MISC_OPS:
        return _MISC_OPS[ins.byte](ins.x)
    return op.Noop()
