"""64x32 monochrome framebuffer with XOR sprite compositing."""
from __future__ import annotations

import numpy as np

from .constants import SCREEN_H, SCREEN_W, SPRITE_WIDTH


class Display:
    """Framebuffer of SCREEN_W * SCREEN_H bytes, 0 = off and 1 = on.

    The buffer is kept flat (row-major) because that is the shape handed to
    renderers; drawing works on a 2-D view of the same memory.
    """

    def __init__(self):
        self._buf = np.zeros(SCREEN_W * SCREEN_H, dtype=np.uint8)
        self._grid = self._buf.reshape(SCREEN_H, SCREEN_W)
        self.dirty = True

    def clear(self):
        self._buf.fill(0)
        self.dirty = True

    def draw_sprite(self, x: int, y: int, height: int, sprite: bytes) -> bool:
        """XOR an 8-pixel wide sprite onto the screen at (x, y).

        Each sprite byte is one row, most significant bit leftmost. Pixels that
        fall off the right or bottom edge wrap around to the opposite side.

        Returns True if any pixel that was lit before the draw had its sprite
        bit set, i.e. the draw switched it off.
        """
        self.dirty = True
        if height == 0:
            return False
        rows = (y % SCREEN_H + np.arange(height)) % SCREEN_H
        cols = (x % SCREEN_W + np.arange(SPRITE_WIDTH)) % SCREEN_W
        bits = np.unpackbits(
            np.frombuffer(sprite, dtype=np.uint8, count=height)).reshape(height, SPRITE_WIDTH)

        area = np.ix_(rows, cols)
        before = self._grid[area]
        collision = bool(np.any(before & bits))
        self._grid[area] = before ^ bits
        return collision

    def pixel(self, x: int, y: int) -> int:
        return int(self._grid[y, x])

    def get_frame(self) -> np.ndarray:
        """Read-only view of the pixel buffer. Clears the dirty flag."""
        self.dirty = False
        frame = self._buf.view()
        frame.flags.writeable = False
        return frame
