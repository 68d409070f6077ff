import pytest

from chipemu import Chip8
from chipemu.cli import EXIT_BAD_ROM, EXIT_FAULT, EXIT_OK, build_parser, main, run


class FakeFrontend:
    """Stands in for the pygame window: runs a fixed number of outer loops."""

    def __init__(self, loops):
        self.loops = loops
        self.frames = []

    def handle_events(self):
        self.loops -= 1
        return self.loops >= 0

    def render(self, frame):
        self.frames.append(frame.copy())

    def tick(self, fps):
        pass


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["game.ch8"])
        assert args.rom == "game.ch8"
        assert args.scale == 15
        assert args.clock == 700
        assert args.log_level == "WARNING"

    def test_options(self):
        args = build_parser().parse_args(
            ["game.ch8", "--scale", "4", "--clock", "1200", "--log-level", "DEBUG"])
        assert (args.scale, args.clock, args.log_level) == (4, 1200, "DEBUG")

    def test_rom_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_bad_clock(self, tmp_path):
        with pytest.raises(SystemExit):
            main([str(tmp_path / "x.ch8"), "--clock", "0"])


class TestMain:
    def test_missing_rom(self, tmp_path):
        assert main([str(tmp_path / "missing.ch8")]) == EXIT_BAD_ROM

    def test_oversized_rom(self, tmp_path):
        rom = tmp_path / "big.ch8"
        rom.write_bytes(b"\x00" * 0xE01)
        assert main([str(rom)]) == EXIT_BAD_ROM


class TestDriverLoop:
    def test_runs_until_window_closes(self):
        machine = Chip8()
        machine.load_rom(b"\x00\xE0\x12\x02")  # clear once, then spin
        frontend = FakeFrontend(loops=3)
        assert run(machine, frontend) == EXIT_OK
        # initial blank frame plus the clear
        assert len(frontend.frames) == 1
        assert not frontend.frames[0].any()

    def test_fault_stops_loop(self):
        machine = Chip8()
        machine.load_rom(b"\xFF\xFF")
        assert run(machine, FakeFrontend(loops=5)) == EXIT_FAULT
        assert machine.halted

    def test_input_reaches_stalled_cpu(self):
        machine = Chip8()
        machine.load_rom(b"\xF2\x0A\x12\x02")
        frontend = FakeFrontend(loops=2)
        run(machine, frontend)
        assert machine.cpu.pc == 0x200

        machine.press_key(0xE)
        run(machine, FakeFrontend(loops=1))
        assert machine.cpu.regs[2] == 0xE
        assert machine.cpu.pc == 0x202
