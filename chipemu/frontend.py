"""pygame window: renders frames and feeds the host keyboard into the keypad.

Keyboard mapping (common layout):

  CHIP-8  =>  Keyboard
  1 2 3 C =>  1 2 3 4
  4 5 6 D =>  Q W E R
  7 8 9 E =>  A S D F
  A 0 B F =>  Z X C V
"""
from __future__ import annotations

import numpy as np
import pygame

from .constants import SCREEN_H, SCREEN_W
from .machine import Chip8

# Keyboard mapping: CHIP-8 key index -> pygame key
KEYMAP = {
    0x0: pygame.K_x,
    0x1: pygame.K_1,
    0x2: pygame.K_2,
    0x3: pygame.K_3,
    0x4: pygame.K_q,
    0x5: pygame.K_w,
    0x6: pygame.K_e,
    0x7: pygame.K_a,
    0x8: pygame.K_s,
    0x9: pygame.K_d,
    0xA: pygame.K_z,
    0xB: pygame.K_c,
    0xC: pygame.K_4,
    0xD: pygame.K_r,
    0xE: pygame.K_f,
    0xF: pygame.K_v,
}
# reverse lookup used on every key event
HOST_TO_CHIP8 = {pgk: k_idx for k_idx, pgk in KEYMAP.items()}

# off, on
PALETTE = np.array([(0, 0, 0), (255, 255, 255)], dtype=np.uint8)


def frame_to_rgb(frame: np.ndarray, scale: int = 1) -> np.ndarray:
    """Turn a flat 0/nonzero frame into a (width, height, 3) array for surfarray."""
    lit = (np.asarray(frame).reshape(SCREEN_H, SCREEN_W) != 0).astype(np.intp)
    rgb = PALETTE[lit]
    if scale > 1:
        rgb = rgb.repeat(scale, axis=0).repeat(scale, axis=1)
    # surfarray indexes [x, y]
    return rgb.transpose(1, 0, 2)


class Frontend:
    def __init__(self, machine: Chip8, scale: int = 15):
        self.machine = machine
        self.scale = max(1, int(scale))
        self.surface = pygame.display.set_mode(
            (SCREEN_W * self.scale, SCREEN_H * self.scale))
        pygame.display.set_caption("CHIPemu")
        self.clock = pygame.time.Clock()

    def apply_key(self, host_key: int, is_down: bool) -> bool:
        """Forward a host key to the keypad. Returns False if it is not mapped."""
        k_idx = HOST_TO_CHIP8.get(host_key)
        if k_idx is None:
            return False
        if is_down:
            self.machine.press_key(k_idx)
        else:
            self.machine.release_key(k_idx)
        return True

    def handle_events(self) -> bool:
        """Drain the pygame event queue. Returns False when the user wants out."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type in (pygame.KEYDOWN, pygame.KEYUP):
                # Escape to quit
                if event.key == pygame.K_ESCAPE:
                    return False
                self.apply_key(event.key, event.type == pygame.KEYDOWN)
        return True

    def render(self, frame: np.ndarray):
        pygame.surfarray.blit_array(self.surface, frame_to_rgb(frame, self.scale))
        pygame.display.flip()

    def tick(self, fps: int):
        self.clock.tick(fps)
