"""Machine geometry, memory layout and the built-in font."""

MEM_SIZE = 4096
START_ADDRESS = 0x200
FONT_ADDRESS = 0x50  # canonical address for font sprites
MAX_ROM_SIZE = MEM_SIZE - START_ADDRESS  # 0xE00

SCREEN_W, SCREEN_H = 64, 32
SPRITE_WIDTH = 8

NUM_REGISTERS = 16
NUM_KEYS = 16
STACK_DEPTH = 16

TIMER_HZ = 60
CLOCK_HZ = 700

# Classic CHIP-8 4x5 font (each char 5 bytes)
GLYPH_HEIGHT = 5
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
