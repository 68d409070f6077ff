from __future__ import annotations

from dataclasses import dataclass

from .constants import (CLOCK_HZ, FONT_ADDRESS, FONTSET, GLYPH_HEIGHT,
                        START_ADDRESS, TIMER_HZ)


@dataclass(frozen=True)
class MachineConfig:
    """Immutable construction-time settings for a machine instance."""
    program_address: int = START_ADDRESS
    font_address: int = FONT_ADDRESS
    font: bytes = FONTSET
    # CPU cycles per second the driver should aim for
    clock_hz: int = CLOCK_HZ
    timer_hz: int = TIMER_HZ

    def __post_init__(self):
        if len(self.font) != 16 * GLYPH_HEIGHT:
            raise ValueError(
                f"Font must hold 16 glyphs of {GLYPH_HEIGHT} bytes, got {len(self.font)} bytes")
        if not 0 <= self.font_address <= self.program_address - len(self.font):
            raise ValueError("Font must fit below the program address")
        if self.clock_hz <= 0 or self.timer_hz <= 0:
            raise ValueError("clock_hz and timer_hz must be positive")
        # frozen dataclass: normalise whatever sequence we were given
        object.__setattr__(self, "font", bytes(self.font))

    @property
    def cycles_per_frame(self) -> int:
        return max(1, self.clock_hz // self.timer_hz)
