"""
Tests de integración del host (Emulator) en modo headless.

Valida la carga de ROM, el bucle principal con un número fijo de frames y el
mapeo de eventos de teclado de Pygame a teclas CHIP-8.
"""

import logging
from pathlib import Path

import pytest

pygame = pytest.importorskip("pygame")

from chip8.emulator import Emulator, build_key_map  # noqa: E402
from tests.helpers_cpu import words_to_bytes  # noqa: E402


def _write_rom(tmp_path: Path, words, name: str = "test.ch8") -> Path:
    rom_file = tmp_path / name
    rom_file.write_bytes(words_to_bytes(words))
    return rom_file


class TestKeyMap:
    """Mapeo QWERTY -> teclado hexadecimal"""

    def test_sixteen_keys(self) -> None:
        key_map = build_key_map()
        assert sorted(key_map.values()) == list(range(16))

    def test_layout(self) -> None:
        key_map = build_key_map()
        assert key_map[pygame.K_1] == 0x1
        assert key_map[pygame.K_4] == 0xC
        assert key_map[pygame.K_q] == 0x4
        assert key_map[pygame.K_x] == 0x0
        assert key_map[pygame.K_v] == 0xF


class TestEmulatorLoading:
    """Carga de ROM"""

    def test_initialization_with_rom(self, tmp_path: Path) -> None:
        rom_file = _write_rom(tmp_path, [0x6005, 0x1202])

        emulator = Emulator(rom_file, headless=True, seed=0)

        assert emulator.get_rom() is not None
        assert emulator.get_rom().name == "test"
        assert emulator.get_machine().read_memory(0x200, 4) == bytes([0x60, 0x05, 0x12, 0x02])

    def test_missing_rom(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Emulator(tmp_path / "no_existe.ch8", headless=True)

    def test_failed_rom_does_not_open_window(self, tmp_path: Path) -> None:
        """Si la ROM no se puede cargar, no queda ninguna ventana de Pygame abierta."""
        pygame.quit()
        empty_rom = tmp_path / "empty.ch8"
        empty_rom.write_bytes(b"")

        with pytest.raises(FileNotFoundError):
            Emulator(tmp_path / "no_existe.ch8", headless=False)
        assert not pygame.display.get_init()

        with pytest.raises(ValueError):
            Emulator(empty_rom, headless=False)
        assert not pygame.display.get_init()

    def test_run_without_rom(self) -> None:
        emulator = Emulator(headless=True)
        with pytest.raises(RuntimeError):
            emulator.run(max_frames=1)


class TestEmulatorRun:
    """Bucle principal con frames fijos"""

    def test_one_second_of_frames(self, tmp_path: Path) -> None:
        rom_file = _write_rom(tmp_path, [0x7001, 0x1200])
        emulator = Emulator(rom_file, cpu_hz=500, headless=True, seed=0)

        emulator.run(max_frames=60)

        assert emulator.frame_count == 60
        assert emulator.get_clock().get_total_steps() == 500
        assert emulator.get_machine().registers.get_v(0) == 250
        assert emulator.running is False

    def test_tone_transitions_logged(self, tmp_path: Path, caplog) -> None:
        rom_file = _write_rom(tmp_path, [0x6002, 0xF018, 0x1204])
        emulator = Emulator(rom_file, headless=True, seed=0)

        with caplog.at_level(logging.INFO, logger="chip8.emulator"):
            emulator.run(max_frames=5)

        messages = [record.getMessage() for record in caplog.records]
        assert any("Tono ON" in message for message in messages)
        assert any("Tono OFF" in message for message in messages)

    def test_fault_reported_once(self, tmp_path: Path, caplog) -> None:
        rom_file = _write_rom(tmp_path, [0x00EE])
        emulator = Emulator(rom_file, headless=True, seed=0)

        with caplog.at_level(logging.ERROR, logger="chip8.emulator"):
            emulator.run(max_frames=10)

        stopped = [r for r in caplog.records if r.name == "chip8.emulator" and "detenida" in r.getMessage()]
        assert len(stopped) == 1
        assert emulator.get_machine().fault is not None


class TestEmulatorEvents:
    """Eventos de Pygame"""

    def test_keydown_keyup(self, tmp_path: Path) -> None:
        emulator = Emulator(_write_rom(tmp_path, [0x1200]), headless=True)
        machine = emulator.get_machine()

        assert emulator.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_w)) is True
        assert machine.is_key_pressed(0x5)

        emulator.handle_event(pygame.event.Event(pygame.KEYUP, key=pygame.K_w))
        assert not machine.is_key_pressed(0x5)

    def test_unmapped_key_ignored(self, tmp_path: Path) -> None:
        emulator = Emulator(_write_rom(tmp_path, [0x1200]), headless=True)

        assert emulator.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_p)) is True
        assert emulator.get_machine().get_cpu().keypad.get_state() == [False] * 16

    def test_keydown_resumes_key_wait(self, tmp_path: Path) -> None:
        emulator = Emulator(_write_rom(tmp_path, [0xF20A, 0x1202]), headless=True)
        machine = emulator.get_machine()
        machine.step()
        assert machine.waiting_for_key

        emulator.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_z))
        machine.step()

        assert machine.registers.get_v(2) == 0xA
        assert not machine.waiting_for_key

    def test_quit_and_escape(self, tmp_path: Path) -> None:
        emulator = Emulator(_write_rom(tmp_path, [0x1200]), headless=True)

        assert emulator.handle_event(pygame.event.Event(pygame.QUIT)) is False
        assert emulator.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE)) is False

    def test_f5_restarts_rom(self, tmp_path: Path) -> None:
        emulator = Emulator(_write_rom(tmp_path, [0x7001, 0x1200]), headless=True)
        machine = emulator.get_machine()
        machine.run(20)

        emulator.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_F5))

        assert machine.registers.get_v(0) == 0
        assert machine.registers.get_pc() == 0x200
        assert machine.read_memory(0x200, 2) == bytes([0x70, 0x01])
