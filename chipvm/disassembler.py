"""Listing of a raw ROM, one decoded instruction per word."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .constants import START_ADDRESS
from .decoder import decode
from .opcodes import OpCode


@dataclass(frozen=True)
class ListingLine:
    address: int
    word: int
    opcode: OpCode

    def __str__(self) -> str:
        return f"0x{self.address:03X}: {self.word:04X}  {self.opcode}"


def disassemble(program: bytes, origin: int = START_ADDRESS) -> Iterator[ListingLine]:
    """Decode ``program`` as if loaded at ``origin``; an odd tail byte is padded with 0x00."""
    for offset in range(0, len(program), 2):
        hi = program[offset]
        lo = program[offset + 1] if offset + 1 < len(program) else 0
        word = (hi << 8) | lo
        yield ListingLine(origin + offset, word, decode(word))


def format_listing(program: bytes, origin: int = START_ADDRESS) -> str:
    return "\n".join(str(line) for line in disassemble(program, origin))
