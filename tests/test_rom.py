"""
Tests para la clase Rom

Valida la carga de imágenes ROM desde disco y sus errores.
"""

from pathlib import Path

import pytest

from chip8.errors import RomTooLargeError
from chip8.memory.mmu import MAX_PROGRAM_SIZE
from chip8.memory.rom import Rom


def test_rom_loads_bytes(tmp_path: Path) -> None:
    """Test básico: carga una ROM y verifica que los bytes son los del archivo."""
    rom_file = tmp_path / "pong.ch8"
    rom_file.write_bytes(bytes([0x00, 0xE0, 0x12, 0x00]))

    rom = Rom(rom_file)

    assert rom.data == bytes([0x00, 0xE0, 0x12, 0x00])
    assert rom.get_rom_size() == 4
    assert rom.name == "pong"


def test_rom_accepts_str_path(tmp_path: Path) -> None:
    rom_file = tmp_path / "test.ch8"
    rom_file.write_bytes(b"\x60\x05")

    rom = Rom(str(rom_file))

    assert rom.data == b"\x60\x05"


def test_rom_info(tmp_path: Path) -> None:
    rom_file = tmp_path / "maze.ch8"
    rom_file.write_bytes(bytes([0xA2, 0x1E, 0xC2, 0x01]))

    info = Rom(rom_file).get_info()

    assert info["title"] == "maze"
    assert info["size"] == 4
    assert info["free"] == MAX_PROGRAM_SIZE - 4
    assert info["entry_opcode"] == "0xA21E"


def test_rom_info_single_byte(tmp_path: Path) -> None:
    rom_file = tmp_path / "odd.ch8"
    rom_file.write_bytes(b"\x12")

    assert Rom(rom_file).get_info()["entry_opcode"] == "0x1200"


def test_rom_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Rom(tmp_path / "no_existe.ch8")


def test_rom_empty_file(tmp_path: Path) -> None:
    rom_file = tmp_path / "empty.ch8"
    rom_file.write_bytes(b"")

    with pytest.raises(ValueError):
        Rom(rom_file)


def test_rom_exact_capacity(tmp_path: Path) -> None:
    rom_file = tmp_path / "full.ch8"
    rom_file.write_bytes(bytes(MAX_PROGRAM_SIZE))

    assert Rom(rom_file).get_rom_size() == 3584


def test_rom_too_large(tmp_path: Path) -> None:
    """Una ROM de 3585 bytes no cabe entre 0x200 y 0xFFF."""
    rom_file = tmp_path / "big.ch8"
    rom_file.write_bytes(bytes(MAX_PROGRAM_SIZE + 1))

    with pytest.raises(RomTooLargeError):
        Rom(rom_file)

    # RomTooLargeError también es un ValueError (main.py lo trata como error de carga)
    with pytest.raises(ValueError):
        Rom(rom_file)
