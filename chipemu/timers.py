"""Delay/sound countdown timers and the hex keypad state."""
from __future__ import annotations

from typing import Iterable, List, Optional

from .constants import NUM_KEYS
from .errors import BoundsError


class Timers:
    """Two 8-bit down-counters, decremented by tick() at a fixed external rate."""

    def __init__(self):
        self._delay = 0
        self._sound = 0

    @property
    def delay_timer(self) -> int:
        return self._delay

    @delay_timer.setter
    def delay_timer(self, value: int):
        self._delay = value & 0xFF

    @property
    def sound_timer(self) -> int:
        return self._sound

    @sound_timer.setter
    def sound_timer(self, value: int):
        self._sound = value & 0xFF

    def tick(self):
        # floored at zero, never wraps
        if self._delay > 0:
            self._delay -= 1
        if self._sound > 0:
            self._sound -= 1


class Input:
    """Sixteen key flags written by the host, read by the CPU."""

    def __init__(self):
        self._keys: List[bool] = [False] * NUM_KEYS

    def _check(self, key: int):
        if not 0 <= key < NUM_KEYS:
            raise BoundsError(f"Key index {key} outside 0x0-0xF", address=key)

    def is_down(self, key: int) -> bool:
        self._check(key)
        return self._keys[key]

    def set_key(self, key: int, is_down: bool):
        self._check(key)
        self._keys[key] = bool(is_down)

    def set_all(self, states: Iterable[bool]):
        states = [bool(s) for s in states]
        if len(states) != NUM_KEYS:
            raise ValueError(f"Expected {NUM_KEYS} key states, got {len(states)}")
        self._keys = states

    def first_down(self) -> Optional[int]:
        """Lowest-indexed key currently held, or None."""
        for i, down in enumerate(self._keys):
            if down:
                return i
        return None

    def __iter__(self):
        return iter(self._keys)
