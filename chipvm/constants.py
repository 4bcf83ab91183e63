"""Fixed parameters of the CHIP-8 machine."""

MEM_SIZE = 4096
START_ADDRESS = 0x200
MAX_PROGRAM_SIZE = MEM_SIZE - START_ADDRESS
FONT_ADDRESS = 0x000  # font glyphs live in the reserved interpreter area
SCREEN_W, SCREEN_H = 64, 32
REGISTER_COUNT = 16
KEY_COUNT = 16

# Timers count down at 60Hz regardless of how fast the CPU is stepped
TIMER_HZ = 60
TIMER_PERIOD = 1.0 / TIMER_HZ

# Reference CPU rate for the driver loop
DEFAULT_CLOCK_HZ = 1200

# Classic CHIP-8 4x5 font (each char 5 bytes)
FONT_GLYPH_SIZE = 5
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
