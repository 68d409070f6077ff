"""Command line driver.

Run:
  python -m chipemu path/to/rom [--scale 15] [--clock 700] [--log-level INFO]
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional

import pygame

from .config import MachineConfig
from .constants import CLOCK_HZ
from .errors import ResourceError
from .frontend import Frontend
from .machine import Chip8

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAULT = 1
EXIT_BAD_ROM = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chipemu", description="CHIP-8 emulator")
    parser.add_argument("rom", help="Path to CHIP-8 ROM")
    parser.add_argument("--scale", type=int, default=15,
                        help="Pixel scale factor (default 15)")
    parser.add_argument("--clock", type=int, default=CLOCK_HZ,
                        help=f"CPU clock in Hz (default {CLOCK_HZ})")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity (default WARNING)")
    return parser


def configure_logging(level: str):
    logging.basicConfig(level=getattr(logging, level),
                        format="[%(levelname)s] %(name)s: %(message)s")


def run(machine: Chip8, frontend) -> int:
    """Outer loop: input, CPU cycles, 60 Hz timers, render when dirty.

    Input and timers keep running while the CPU is stalled on a key wait.
    """
    cycles_per_frame = machine.config.cycles_per_frame
    timer_period = 1.0 / machine.config.timer_hz
    last_timer_tick = time.perf_counter()

    while frontend.handle_events():
        machine.run_cycles(cycles_per_frame)
        if machine.halted:
            return EXIT_FAULT

        now = time.perf_counter()
        if now - last_timer_tick >= timer_period:
            machine.tick_timers()
            last_timer_tick = now

        frame = machine.frame_if_dirty()
        if frame is not None:
            frontend.render(frame)

        # Cap UI thread to ~60 FPS
        frontend.tick(machine.config.timer_hz)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.clock <= 0:
        parser.error("--clock must be positive")
    configure_logging(args.log_level)

    machine = Chip8(MachineConfig(clock_hz=args.clock))
    try:
        machine.load_rom_file(args.rom)
    except ResourceError as e:
        log.error("%s", e)
        return EXIT_BAD_ROM

    pygame.init()
    try:
        frontend = Frontend(machine, scale=args.scale)
        status = run(machine, frontend)
    except KeyboardInterrupt:
        print("\nExiting.")
        status = EXIT_OK
    finally:
        pygame.quit()
    if status == EXIT_FAULT:
        print(f"Machine halted: {machine.fault}", file=sys.stderr)
    return status


if __name__ == "__main__":
    sys.exit(main())
