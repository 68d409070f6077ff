import os

import pytest

# pygame must not open a real window or audio device under test
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from chipemu import Chip8  # noqa: E402


@pytest.fixture
def machine():
    return Chip8()


@pytest.fixture
def run_program(machine):
    """Load opcodes at 0x200 and execute `steps` cycles, returning the machine."""
    def _run(*opcodes, steps=None):
        rom = b"".join(op.to_bytes(2, "big") for op in opcodes)
        machine.load_rom(rom)
        for _ in range(len(opcodes) if steps is None else steps):
            machine.cpu.cycle()
        return machine
    return _run
