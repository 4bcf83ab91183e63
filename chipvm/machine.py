"""
CHIP-8 interpreter core.

``Machine`` owns all CPU state and advances it one instruction per ``step``.
It never touches a window, a speaker or a file: each step returns a
``Snapshot`` for whichever frontend is driving it.

Notes:
- Timers tick at 60Hz of wall time, gated inside ``step`` with the injected
  clock, independent of how often ``step`` is called.
- FX0A does not spin: it parks the destination register in
  ``waiting_for_input`` and every following step returns early until a
  just-pressed key is supplied.
- FX55 / FX65 do NOT modify I.
- BNNN uses V0 as the offset.
- Drawing wraps around screen edges.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from . import opcodes as op
from .constants import (FONT_ADDRESS, FONT_GLYPH_SIZE, FONTSET, MAX_PROGRAM_SIZE,
                        MEM_SIZE, REGISTER_COUNT, SCREEN_H, SCREEN_W,
                        START_ADDRESS, TIMER_PERIOD)
from .decoder import decode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Externally observable state after one step."""
    display: bytes
    display_changed: bool
    sound_on: bool
    waiting_for_input: bool

    def render(self, on: str = "#", off: str = " ") -> str:
        rows = []
        for y in range(SCREEN_H):
            row = self.display[y * SCREEN_W:(y + 1) * SCREEN_W]
            rows.append("".join(on if cell else off for cell in row) + "|")
        return "\n".join(rows)


class Machine:
    def __init__(self, program: bytes,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], float] = time.perf_counter):
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock

        self.memory = bytearray(MEM_SIZE)
        self.memory[FONT_ADDRESS:FONT_ADDRESS + len(FONTSET)] = FONTSET
        program = bytes(program[:MAX_PROGRAM_SIZE])
        self.memory[START_ADDRESS:START_ADDRESS + len(program)] = program

        self.registers = bytearray(REGISTER_COUNT)  # V0..VF
        self.index_register = 0
        self.program_counter = START_ADDRESS
        self.stack: List[int] = []
        self.delay_timer = 0
        self.sound_timer = 0
        self.display = bytearray(SCREEN_W * SCREEN_H)
        self.waiting_for_input: Optional[int] = None
        self.last_timer_tick = self.clock()

        self.keys: Mapping[int, bool] = {}
        self.draw_flag = False

        self._handlers: Dict[type, Callable] = {
            op.Noop: self._noop,
            op.Cls: self._cls,
            op.Ret: self._ret,
            op.Jp: self._jp,
            op.Call: self._call,
            op.JpV0: self._jp_v0,
            op.SeByte: self._se_byte,
            op.SneByte: self._sne_byte,
            op.SeReg: self._se_reg,
            op.SneReg: self._sne_reg,
            op.Skp: self._skp,
            op.Sknp: self._sknp,
            op.LdByte: self._ld_byte,
            op.AddByte: self._add_byte,
            op.Rnd: self._rnd,
            op.LdReg: self._ld_reg,
            op.Or: self._or,
            op.And: self._and,
            op.Xor: self._xor,
            op.AddReg: self._add_reg,
            op.Sub: self._sub,
            op.Shr: self._shr,
            op.Subn: self._subn,
            op.Shl: self._shl,
            op.LdI: self._ld_i,
            op.Drw: self._drw,
            op.LdVxDt: self._ld_vx_dt,
            op.LdVxK: self._ld_vx_k,
            op.LdDtVx: self._ld_dt_vx,
            op.LdStVx: self._ld_st_vx,
            op.AddI: self._add_i,
            op.LdF: self._ld_f,
            op.LdB: self._ld_b,
            op.LdMemVx: self._ld_mem_vx,
            op.LdVxMem: self._ld_vx_mem,
        }

    def __repr__(self) -> str:
        return (
            f"Machine(v=[{', '.join(f'{v:02X}' for v in self.registers)}], "
            f"i={self.index_register:03X}, delay_timer={self.delay_timer}, "
            f"sound_timer={self.sound_timer}, pc={self.program_counter:03X}, "
            f"sp={len(self.stack)}, stack=[{', '.join(f'{a:03X}' for a in self.stack)}])"
        )

    # =============== Core fetch/decode/execute cycle ===============
    def fetch_opcode(self) -> int:
        hi = self.memory[self.program_counter & 0xFFF]
        lo = self.memory[(self.program_counter + 1) & 0xFFF]
        return (hi << 8) | lo

    def step(self, keyboard: Mapping[int, bool],
             just_pressed: Optional[int] = None) -> Snapshot:
        """
        Run one instruction and report what the frontend should show.

        ``keyboard`` maps key codes 0x0-0xF to pressed state; missing keys are
        released.  ``just_pressed`` is only consumed to satisfy a pending FX0A.
        """
        if just_pressed is not None and self.waiting_for_input is not None:
            self.registers[self.waiting_for_input] = just_pressed & 0xF
            self.waiting_for_input = None

        if self.waiting_for_input is not None:
            return Snapshot(bytes(self.display), False, self.sound_timer > 0, True)

        self._tick_timers()

        self.keys = keyboard
        self.draw_flag = False
        word = self.fetch_opcode()
        opcode = decode(word)
        logger.debug("%03X: %04X %s", self.program_counter, word, opcode)
        self._handlers[type(opcode)](opcode)
        self.program_counter = (self.program_counter + 2) & 0xFFFF

        return Snapshot(bytes(self.display), self.draw_flag, self.sound_timer > 0, False)

    def _tick_timers(self):
        now = self.clock()
        if now - self.last_timer_tick >= TIMER_PERIOD:
            if self.delay_timer > 0:
                self.delay_timer -= 1
            if self.sound_timer > 0:
                self.sound_timer -= 1
            self.last_timer_tick = now

    # =============== Opcode handlers ===============
    # Jumps store target - 2 so the uniform post-increment in step() lands on it.
    def _noop(self, opcode):
        pass

    def _cls(self, opcode):
        self.display[:] = bytes(len(self.display))
        self.draw_flag = True

    def _ret(self, opcode):
        if not self.stack:
            logger.warning("RET with empty stack at PC %03X, ignored", self.program_counter)
            return
        self.program_counter = self.stack.pop()

    def _jp(self, opcode: op.Jp):
        self.program_counter = opcode.addr - 2

    def _call(self, opcode: op.Call):
        self.stack.append(self.program_counter)
        self.program_counter = opcode.addr - 2

    def _jp_v0(self, opcode: op.JpV0):
        self.program_counter = self.registers[0] + opcode.addr - 2

    def _se_byte(self, opcode: op.SeByte):
        if self.registers[opcode.x] == opcode.byte:
            self.program_counter += 2

    def _sne_byte(self, opcode: op.SneByte):
        if self.registers[opcode.x] != opcode.byte:
            self.program_counter += 2

    def _se_reg(self, opcode: op.SeReg):
        if self.registers[opcode.x] == self.registers[opcode.y]:
            self.program_counter += 2

    def _sne_reg(self, opcode: op.SneReg):
        if self.registers[opcode.x] != self.registers[opcode.y]:
            self.program_counter += 2

    def _skp(self, opcode: op.Skp):
        if self._is_key_down(self.registers[opcode.x]):
            self.program_counter += 2

    def _sknp(self, opcode: op.Sknp):
        if not self._is_key_down(self.registers[opcode.x]):
            self.program_counter += 2

    def _ld_byte(self, opcode: op.LdByte):
        self.registers[opcode.x] = opcode.byte

    def _add_byte(self, opcode: op.AddByte):
        self.registers[opcode.x] = (self.registers[opcode.x] + opcode.byte) & 0xFF

    def _rnd(self, opcode: op.Rnd):
        self.registers[opcode.x] = self.rng.randrange(256) & opcode.byte

    def _ld_reg(self, opcode: op.LdReg):
        self.registers[opcode.x] = self.registers[opcode.y]

    def _or(self, opcode: op.Or):
        self.registers[opcode.x] |= self.registers[opcode.y]

    def _and(self, opcode: op.And):
        self.registers[opcode.x] &= self.registers[opcode.y]

    def _xor(self, opcode: op.Xor):
        self.registers[opcode.x] ^= self.registers[opcode.y]

    # VF is written before Vx, so with x == F the result wins over the flag.
    def _add_reg(self, opcode: op.AddReg):
        V = self.registers
        total = V[opcode.x] + V[opcode.y]
        V[0xF] = 1 if total > 0xFF else 0
        V[opcode.x] = total & 0xFF

    def _sub(self, opcode: op.Sub):
        V = self.registers
        vx, vy = V[opcode.x], V[opcode.y]
        V[0xF] = 1 if vx > vy else 0
        V[opcode.x] = (vx - vy) & 0xFF

    def _shr(self, opcode: op.Shr):
        V = self.registers
        vx = V[opcode.x]
        V[0xF] = vx & 0x1
        V[opcode.x] = vx >> 1

    def _subn(self, opcode: op.Subn):
        V = self.registers
        vx, vy = V[opcode.x], V[opcode.y]
        V[0xF] = 1 if vy > vx else 0
        V[opcode.x] = (vy - vx) & 0xFF

    def _shl(self, opcode: op.Shl):
        V = self.registers
        vx = V[opcode.x]
        V[0xF] = (vx >> 7) & 0x1
        V[opcode.x] = (vx << 1) & 0xFF

    def _ld_i(self, opcode: op.LdI):
        self.index_register = opcode.addr

    def _drw(self, opcode: op.Drw):
        self._draw_sprite(self.registers[opcode.x], self.registers[opcode.y], opcode.nibble)

    def _ld_vx_dt(self, opcode: op.LdVxDt):
        self.registers[opcode.x] = self.delay_timer

    def _ld_vx_k(self, opcode: op.LdVxK):
        self.waiting_for_input = opcode.x

    def _ld_dt_vx(self, opcode: op.LdDtVx):
        self.delay_timer = self.registers[opcode.x]

    def _ld_st_vx(self, opcode: op.LdStVx):
        self.sound_timer = self.registers[opcode.x]

    def _add_i(self, opcode: op.AddI):
        self.index_register = (self.index_register + self.registers[opcode.x]) & 0xFFFF

    def _ld_f(self, opcode: op.LdF):
        digit = self.registers[opcode.x] & 0xF
        self.index_register = FONT_ADDRESS + digit * FONT_GLYPH_SIZE

    def _ld_b(self, opcode: op.LdB):
        val = self.registers[opcode.x]
        i = self.index_register
        self.memory[i & 0xFFF] = val // 100
        self.memory[(i + 1) & 0xFFF] = (val // 10) % 10
        self.memory[(i + 2) & 0xFFF] = val % 10

    def _ld_mem_vx(self, opcode: op.LdMemVx):
        for n in range(opcode.x + 1):
            self.memory[(self.index_register + n) & 0xFFF] = self.registers[n]

    def _ld_vx_mem(self, opcode: op.LdVxMem):
        for n in range(opcode.x + 1):
            self.registers[n] = self.memory[(self.index_register + n) & 0xFFF]

    # =============== Helpers ===============
    def _is_key_down(self, chip8_key: int) -> bool:
        return bool(self.keys.get(chip8_key & 0xF, False))

    def _draw_sprite(self, x_pos: int, y_pos: int, height: int):
        collision = 0
        for row in range(height):
            sprite = self.memory[(self.index_register + row) & 0xFFF]
            py = (y_pos + row) % SCREEN_H
            for col in range(8):
                bit = (sprite >> (7 - col)) & 1
                idx = py * SCREEN_W + (x_pos + col) % SCREEN_W
                collision |= bit & self.display[idx]
                self.display[idx] ^= bit
        self.registers[0xF] = collision
        self.draw_flag = True
