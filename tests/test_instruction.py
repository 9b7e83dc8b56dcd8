"""
Tests para el decodificador y el desensamblador de instrucciones.

Valida la extracción de campos (nnn, x, y, kk, n) y los mnemónicos.
"""

import pytest

from chip8.cpu.instruction import Instruction, decode, disassemble


class TestDecode:
    """Extracción de campos"""

    def test_fields(self) -> None:
        instruction = decode(0xD123)

        assert instruction.opcode == 0xD123
        assert instruction.op_class == 0xD
        assert instruction.nnn == 0x123
        assert instruction.x == 0x1
        assert instruction.y == 0x2
        assert instruction.kk == 0x23
        assert instruction.n == 0x3

    def test_equality(self) -> None:
        assert decode(0x6005) == Instruction(0x6005)
        assert decode(0x6005) != decode(0x6006)
        assert hash(decode(0x6005)) == hash(Instruction(0x6005))


class TestMnemonic:
    """Texto de las instrucciones"""

    @pytest.mark.parametrize("opcode,expected", [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x0123, "SYS 0x123"),
        (0x1228, "JP 0x228"),
        (0x2300, "CALL 0x300"),
        (0x3A07, "SE VA, 0x07"),
        (0x4B10, "SNE VB, 0x10"),
        (0x5120, "SE V1, V2"),
        (0x6005, "LD V0, 0x05"),
        (0x7003, "ADD V0, 0x03"),
        (0x8124, "ADD V1, V2"),
        (0x8126, "SHR V1"),
        (0x812E, "SHL V1"),
        (0x9340, "SNE V3, V4"),
        (0xA050, "LD I, 0x050"),
        (0xB300, "JP V0, 0x300"),
        (0xC10F, "RND V1, 0x0F"),
        (0xD005, "DRW V0, V0, 5"),
        (0xE59E, "SKP V5"),
        (0xE5A1, "SKNP V5"),
        (0xF30A, "LD V3, K"),
        (0xF233, "LD B, V2"),
        (0xFF55, "LD [I], VF"),
        (0xF165, "LD V1, [I]"),
    ])
    def test_mnemonic(self, opcode: int, expected: str) -> None:
        assert decode(opcode).mnemonic() == expected

    @pytest.mark.parametrize("opcode", [0x5121, 0x9121, 0x8128, 0xE500, 0xF0FF])
    def test_unknown_encoding_as_data(self, opcode: int) -> None:
        assert decode(opcode).mnemonic() == f"DW 0x{opcode:04X}"


class TestDisassemble:
    """Desensamblado de imágenes completas"""

    def test_disassemble_program(self) -> None:
        lines = disassemble(bytes([0x60, 0x05, 0x70, 0x03, 0x12, 0x04]))

        assert lines == [
            "200: 6005  LD V0, 0x05",
            "202: 7003  ADD V0, 0x03",
            "204: 1204  JP 0x204",
        ]

    def test_disassemble_odd_length(self) -> None:
        lines = disassemble(bytes([0x00, 0xE0, 0xAB]))

        assert len(lines) == 2
        assert lines[1] == "202: AB    DB 0xAB"
