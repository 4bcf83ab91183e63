"""
CHIP-8 opcode variants.

Every instruction word decodes to exactly one of the frozen dataclasses below.
Operand naming follows the usual CHIP-8 notation:

  addr   12-bit address (nnn)
  x, y   register indices (0-F)
  byte   8-bit immediate (kk)
  nibble 4-bit immediate (n)

str() of a variant gives its assembler mnemonic, e.g. ``LD V0, 0x0A``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class _Op:
    template = ""

    def __str__(self) -> str:
        return self.template.format(**vars(self))


@dataclass(frozen=True)
class _AddrOp(_Op):
    addr: int


@dataclass(frozen=True)
class _RegOp(_Op):
    x: int


@dataclass(frozen=True)
class _RegByteOp(_Op):
    x: int
    byte: int


@dataclass(frozen=True)
class _RegRegOp(_Op):
    x: int
    y: int


# 0nnn family
@dataclass(frozen=True)
class Noop(_Op):
    template = "NOOP"


@dataclass(frozen=True)
class Cls(_Op):
    template = "CLS"


@dataclass(frozen=True)
class Ret(_Op):
    template = "RET"


# Flow control
@dataclass(frozen=True)
class Jp(_AddrOp):
    template = "JP 0x{addr:03X}"


@dataclass(frozen=True)
class Call(_AddrOp):
    template = "CALL 0x{addr:03X}"


@dataclass(frozen=True)
class JpV0(_AddrOp):
    template = "JP V0, 0x{addr:03X}"


# Conditional skips
@dataclass(frozen=True)
class SeByte(_RegByteOp):
    template = "SE V{x:X}, 0x{byte:02X}"


@dataclass(frozen=True)
class SneByte(_RegByteOp):
    template = "SNE V{x:X}, 0x{byte:02X}"


@dataclass(frozen=True)
class SeReg(_RegRegOp):
    template = "SE V{x:X}, V{y:X}"


@dataclass(frozen=True)
class SneReg(_RegRegOp):
    template = "SNE V{x:X}, V{y:X}"


@dataclass(frozen=True)
class Skp(_RegOp):
    template = "SKP V{x:X}"


@dataclass(frozen=True)
class Sknp(_RegOp):
    template = "SKNP V{x:X}"


# Immediate loads
@dataclass(frozen=True)
class LdByte(_RegByteOp):
    template = "LD V{x:X}, 0x{byte:02X}"


@dataclass(frozen=True)
class AddByte(_RegByteOp):
    template = "ADD V{x:X}, 0x{byte:02X}"


@dataclass(frozen=True)
class Rnd(_RegByteOp):
    template = "RND V{x:X}, 0x{byte:02X}"


# 8xyN ALU
@dataclass(frozen=True)
class LdReg(_RegRegOp):
    template = "LD V{x:X}, V{y:X}"


@dataclass(frozen=True)
class Or(_RegRegOp):
    template = "OR V{x:X}, V{y:X}"


@dataclass(frozen=True)
class And(_RegRegOp):
    template = "AND V{x:X}, V{y:X}"


@dataclass(frozen=True)
class Xor(_RegRegOp):
    template = "XOR V{x:X}, V{y:X}"


@dataclass(frozen=True)
class AddReg(_RegRegOp):
    template = "ADD V{x:X}, V{y:X}"


@dataclass(frozen=True)
class Sub(_RegRegOp):
    template = "SUB V{x:X}, V{y:X}"


@dataclass(frozen=True)
class Shr(_RegRegOp):
    template = "SHR V{x:X}, V{y:X}"


@dataclass(frozen=True)
class Subn(_RegRegOp):
    template = "SUBN V{x:X}, V{y:X}"


@dataclass(frozen=True)
class Shl(_RegRegOp):
    template = "SHL V{x:X}, V{y:X}"


# Index register and drawing
@dataclass(frozen=True)
class LdI(_AddrOp):
    template = "LD I, 0x{addr:03X}"


@dataclass(frozen=True)
class Drw(_Op):
    x: int
    y: int
    nibble: int
    template = "DRW V{x:X}, V{y:X}, {nibble}"


# Fx.. family
@dataclass(frozen=True)
class LdVxDt(_RegOp):
    template = "LD V{x:X}, DT"


@dataclass(frozen=True)
class LdVxK(_RegOp):
    template = "LD V{x:X}, K"


@dataclass(frozen=True)
class LdDtVx(_RegOp):
    template = "LD DT, V{x:X}"


@dataclass(frozen=True)
class LdStVx(_RegOp):
    template = "LD ST, V{x:X}"


@dataclass(frozen=True)
class AddI(_RegOp):
    template = "ADD I, V{x:X}"


@dataclass(frozen=True)
class LdF(_RegOp):
    template = "LD F, V{x:X}"


@dataclass(frozen=True)
class LdB(_RegOp):
    template = "LD B, V{x:X}"


@dataclass(frozen=True)
class LdMemVx(_RegOp):
    template = "LD [I], V{x:X}"


@dataclass(frozen=True)
class LdVxMem(_RegOp):
    template = "LD V{x:X}, [I]"


OpCode = Union[
    Noop, Cls, Ret, Jp, Call, JpV0,
    SeByte, SneByte, SeReg, SneReg, Skp, Sknp,
    LdByte, AddByte, Rnd,
    LdReg, Or, And, Xor, AddReg, Sub, Shr, Subn, Shl,
    LdI, Drw,
    LdVxDt, LdVxK, LdDtVx, LdStVx, AddI, LdF, LdB, LdMemVx, LdVxMem,
]
