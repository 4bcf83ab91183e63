"""
Command-line driver.

Run:
  chipvm path/to/rom [--scale 15] [--clock 1200] [--tone 440]
  chipvm path/to/rom --disassemble
"""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .constants import DEFAULT_CLOCK_HZ, TIMER_HZ
from .disassembler import format_listing
from .machine import Machine, Snapshot
from .rom import RomTooLargeError, read_rom

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chipvm", description="CHIP-8 virtual machine")
    parser.add_argument("rom", help="Path to CHIP-8 ROM")
    parser.add_argument("--scale", type=int, default=15,
                        help="Pixel scale factor (default 15)")
    parser.add_argument("--clock", type=int, default=DEFAULT_CLOCK_HZ,
                        help=f"CPU clock in Hz (default {DEFAULT_CLOCK_HZ})")
    parser.add_argument("--tone", type=int, default=440,
                        help="Beep tone frequency in Hz")
    parser.add_argument("--disassemble", action="store_true",
                        help="Print a listing of the ROM and exit")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log every executed instruction")
    return parser


def run_frame(machine: Machine, keyboard, just_pressed, cycles: int) -> Snapshot:
    """Step ``cycles`` times; the display counts as changed if any step drew."""
    changed = False
    snapshot = None
    for _ in range(cycles):
        snapshot = machine.step(keyboard, just_pressed)
        just_pressed = None
        changed = changed or snapshot.display_changed
    return Snapshot(snapshot.display, changed, snapshot.sound_on, snapshot.waiting_for_input)


def run(machine: Machine, frontend, clock_hz: int = DEFAULT_CLOCK_HZ):
    """Main emulation loop; returns when the frontend reports it has stopped."""
    cycles_per_frame = max(1, clock_hz // TIMER_HZ)
    while True:
        keyboard, just_pressed, running = frontend.handle_events()
        if not running:
            break

        snapshot = run_frame(machine, keyboard, just_pressed, cycles_per_frame)
        frontend.handle_snapshot(snapshot)

        # Cap UI thread to ~60 FPS for smoothness
        frontend.tick(TIMER_HZ)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s")

    try:
        rom_data = read_rom(args.rom)
    except (FileNotFoundError, RomTooLargeError) as e:
        logger.error("Cannot load ROM: %s", e)
        return 1

    if args.disassemble:
        print(format_listing(rom_data))
        return 0

    # pygame is only needed once a window is opened
    import pygame
    from .frontend import Frontend

    pygame.init()
    pygame.display.set_allow_screensaver(True)
    frontend = Frontend(scale=args.scale, tone_hz=args.tone)
    machine = Machine(rom_data)
    try:
        run(machine, frontend, args.clock)
    except KeyboardInterrupt:
        print("\nExiting.")
    finally:
        frontend.close()
    return 0
