import logging

import pytest

from chipemu import Chip8, DecodeError, MachineConfig, ResourceError
from chipemu.constants import MAX_ROM_SIZE, MEM_SIZE, START_ADDRESS


class TestConfig:
    def test_defaults(self):
        config = MachineConfig()
        assert config.program_address == 0x200
        assert config.font_address == 0x50
        assert config.cycles_per_frame == 700 // 60

    def test_cycles_per_frame_at_least_one(self):
        assert MachineConfig(clock_hz=10).cycles_per_frame == 1

    def test_frozen(self):
        with pytest.raises(AttributeError):
            MachineConfig().clock_hz = 1

    def test_font_must_be_80_bytes(self):
        with pytest.raises(ValueError):
            MachineConfig(font=b"\x00" * 79)

    def test_font_must_fit_below_program(self):
        with pytest.raises(ValueError):
            MachineConfig(font_address=0x1E0)

    def test_custom_font_address(self):
        machine = Chip8(MachineConfig(font_address=0x000))
        machine.load_rom(bytes([0x60, 0x01, 0xF0, 0x29]))
        machine.run_cycles(2)
        assert machine.cpu.regs.I == 5


class TestRomLoading:
    def test_loaded_at_program_address(self, machine):
        machine.load_rom(b"\x12\x34")
        assert machine.bus.memory.fetch_instruction(START_ADDRESS) == 0x1234
        assert machine.cpu.pc == START_ADDRESS

    def test_largest_rom_fits(self, machine):
        machine.load_rom(b"\xAA" * MAX_ROM_SIZE)
        assert machine.bus.memory.read(MEM_SIZE - 1) == 0xAA

    def test_oversized_rom(self, machine):
        with pytest.raises(ResourceError):
            machine.load_rom(b"\x00" * (MAX_ROM_SIZE + 1))

    def test_load_from_file(self, machine, tmp_path):
        rom = tmp_path / "jump.ch8"
        rom.write_bytes(b"\x12\x00")
        machine.load_rom_file(rom)
        assert machine.bus.memory.fetch_instruction(START_ADDRESS) == 0x1200

    def test_missing_file(self, machine, tmp_path):
        with pytest.raises(ResourceError):
            machine.load_rom_file(tmp_path / "nope.ch8")


class TestExecution:
    def test_step(self, machine):
        machine.load_rom(b"\x60\x05")
        assert machine.step() is True
        assert machine.cpu.regs[0] == 5
        assert not machine.halted

    def test_fault_is_captured(self, machine, caplog):
        machine.load_rom(b"\x60\x05\xFF\xFF")
        with caplog.at_level(logging.ERROR, logger="chipemu.machine"):
            assert machine.run_cycles(10) == 1
        assert machine.halted
        assert isinstance(machine.fault, DecodeError)
        assert machine.fault.pc == 0x202
        assert "Machine halted" in caplog.text

    def test_halted_machine_reraises(self, machine):
        machine.load_rom(b"\xFF\xFF")
        assert machine.step() is False
        with pytest.raises(DecodeError):
            machine.step()

    def test_out_of_bounds_halts(self, machine):
        machine.load_rom(b"\x1F\xFF")
        machine.step()
        assert machine.step() is False
        assert isinstance(machine.fault, IndexError)

    def test_run_frame_ticks_timers_once(self, machine):
        # tight loop: 0x200 jump 0x200
        machine.load_rom(b"\x12\x00")
        machine.bus.timers.delay_timer = 10
        assert machine.run_frame() == machine.config.cycles_per_frame
        assert machine.bus.timers.delay_timer == 9

    def test_timers_independent_of_cycle_count(self, machine):
        machine.load_rom(b"\x12\x00")
        machine.bus.timers.delay_timer = 10
        machine.run_cycles(500)
        assert machine.bus.timers.delay_timer == 10
        machine.tick_timers()
        assert machine.bus.timers.delay_timer == 9


class TestCollaborators:
    def test_keys(self, machine):
        machine.press_key(3)
        assert machine.bus.keys.is_down(3)
        machine.release_key(3)
        assert not machine.bus.keys.is_down(3)
        machine.set_keys([k == 7 for k in range(16)])
        assert machine.bus.keys.first_down() == 7

    def test_frame_only_when_dirty(self, machine):
        assert machine.frame_if_dirty() is not None
        assert machine.frame_if_dirty() is None
        machine.load_rom(b"\x00\xE0")
        machine.step()
        frame = machine.frame_if_dirty()
        assert frame is not None
        assert len(frame) == 64 * 32

    def test_sound_active(self, machine):
        assert not machine.sound_active
        machine.bus.timers.sound_timer = 1
        assert machine.sound_active
        machine.tick_timers()
        assert not machine.sound_active
