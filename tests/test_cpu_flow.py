"""
Tests de integración para el control de flujo de la CPU.

Este módulo prueba:
- JP nnn (1nnn), JP V0, nnn (Bnnn)
- CALL nnn (2nnn) / RET (00EE) y los fallos de pila
- Saltos condicionales SE / SNE (3xkk, 4xkk, 5xy0, 9xy0)
- Opcodes desconocidos (se ignoran y el PC avanza)
"""

from chip8.cpu.core import StepResult
from chip8.errors import StackOverflowFault, StackUnderflowFault
from tests.helpers_cpu import load_program, run_steps


class TestBootProgram:
    """Programa mínimo de arranque: LD, CLS y bucle infinito"""

    def test_ld_cls_jp_loop(self, machine) -> None:
        """
        Test: 6005 / 00E0 / 1200.

        - Tras 1 step: V0 == 5 y PC == 0x202
        - Tras 2 steps: pantalla apagada y PC == 0x204
        - Tras 3 steps: PC == 0x200 (bucle)
        """
        load_program(machine, [0x6005, 0x00E0, 0x1200])
        regs = machine.registers

        assert machine.step() is StepResult.OK
        assert regs.get_v(0) == 5
        assert regs.get_pc() == 0x202, f"PC debe ser 0x202, es 0x{regs.get_pc():03X}"

        assert machine.step() is StepResult.OK
        assert not any(any(row) for row in machine.framebuffer())
        assert regs.get_pc() == 0x204

        assert machine.step() is StepResult.OK
        assert regs.get_pc() == 0x200, "JP 0x200 debe volver al inicio"


class TestJumps:
    """Saltos incondicionales"""

    def test_jp_absolute(self, machine) -> None:
        load_program(machine, [0x1ABC])
        machine.step()
        assert machine.registers.get_pc() == 0xABC

    def test_jp_v0_offset(self, machine) -> None:
        load_program(machine, [0x6010, 0xB300])
        run_steps(machine, 2)
        assert machine.registers.get_pc() == 0x310

    def test_jp_v0_wraps_to_12_bits(self, machine) -> None:
        load_program(machine, [0x60FF, 0xBFFF])
        run_steps(machine, 2)
        assert machine.registers.get_pc() == (0xFFF + 0xFF) & 0xFFF


class TestCallRet:
    """Subrutinas"""

    def test_call_pushes_own_address(self, machine) -> None:
        """CALL guarda la dirección del propio CALL en stack[SP] tras SP += 1."""
        load_program(machine, [0x2300])
        regs = machine.registers

        machine.step()

        assert regs.get_pc() == 0x300
        assert regs.get_sp() == 1
        assert regs.stack[1] == 0x200

    def test_call_then_ret(self, machine) -> None:
        """RET devuelve el control a la instrucción siguiente al CALL."""
        load_program(machine, [0x2204, 0x1202, 0x00EE])
        regs = machine.registers

        machine.step()  # CALL 0x204
        assert regs.get_pc() == 0x204
        machine.step()  # RET
        assert regs.get_pc() == 0x202
        assert regs.get_sp() == 0

    def test_nested_calls(self, machine) -> None:
        # 0x200: CALL 0x206 | 0x202: JP 0x202 | 0x204: RET | 0x206: CALL 0x204 | 0x208: RET
        load_program(machine, [0x2206, 0x1202, 0x00EE, 0x2204, 0x00EE])
        regs = machine.registers

        run_steps(machine, 2)
        assert regs.get_sp() == 2
        assert regs.get_pc() == 0x204

        machine.step()  # RET interno
        assert regs.get_pc() == 0x208
        machine.step()  # RET externo
        assert regs.get_pc() == 0x202
        assert regs.get_sp() == 0

    def test_fifteen_nested_calls_succeed(self, machine) -> None:
        """CALL 0x200 en bucle: las primeras 15 llamadas caben en la pila."""
        load_program(machine, [0x2200])

        results = run_steps(machine, 15)

        assert results == [StepResult.OK] * 15
        assert machine.registers.get_sp() == 15
        assert machine.fault is None

    def test_sixteenth_call_faults(self, machine) -> None:
        load_program(machine, [0x2200])
        run_steps(machine, 15)
        before = list(machine.registers.stack)

        result = machine.step()

        assert result is StepResult.FAULT
        assert isinstance(machine.fault, StackOverflowFault)
        assert machine.fault.pc == 0x200
        assert machine.fault.opcode == 0x2200
        # El estado no se modifica al fallar
        assert machine.registers.get_sp() == 15
        assert machine.registers.stack == before

    def test_ret_with_empty_stack_faults(self, machine) -> None:
        load_program(machine, [0x00EE])

        result = machine.step()

        assert result is StepResult.FAULT
        assert isinstance(machine.fault, StackUnderflowFault)
        assert machine.registers.get_pc() == 0x200
        assert machine.registers.get_sp() == 0

    def test_fault_is_sticky_until_reset(self, machine) -> None:
        load_program(machine, [0x00EE, 0x6005])
        machine.step()

        assert machine.step() is StepResult.FAULT
        assert machine.registers.get_v(0) == 0, "No debe ejecutarse nada tras el fallo"

        machine.reset()
        assert machine.fault is None
        assert machine.step() is not StepResult.FAULT


class TestSkips:
    """Saltos condicionales"""

    def test_se_vx_byte_taken(self, machine) -> None:
        load_program(machine, [0x6A07, 0x3A07])
        run_steps(machine, 2)
        assert machine.registers.get_pc() == 0x206

    def test_se_vx_byte_not_taken(self, machine) -> None:
        load_program(machine, [0x6A07, 0x3A08])
        run_steps(machine, 2)
        assert machine.registers.get_pc() == 0x204

    def test_sne_vx_byte(self, machine) -> None:
        load_program(machine, [0x4A01])
        machine.step()
        assert machine.registers.get_pc() == 0x204, "VA (0) != 1: debe saltar"

    def test_se_vx_vy(self, machine) -> None:
        load_program(machine, [0x6105, 0x6205, 0x5120])
        run_steps(machine, 3)
        assert machine.registers.get_pc() == 0x208

    def test_sne_vx_vy(self, machine) -> None:
        load_program(machine, [0x6105, 0x6206, 0x9120])
        run_steps(machine, 3)
        assert machine.registers.get_pc() == 0x208

    def test_sne_vx_vy_equal_does_not_skip(self, machine) -> None:
        load_program(machine, [0x9120])
        machine.step()
        assert machine.registers.get_pc() == 0x202


class TestUnknownOpcodes:
    """Las codificaciones desconocidas se ignoran"""

    def test_unknown_encodings_advance_pc(self, machine) -> None:
        # 5xy1, 9xy1, 8xy8, Ex00, FxFF, SYS 0x123
        load_program(machine, [0x5121, 0x9121, 0x8128, 0xE500, 0xF0FF, 0x0123])

        results = run_steps(machine, 6)

        assert results == [StepResult.OK] * 6
        assert machine.registers.get_pc() == 0x20C
        assert machine.registers.v == [0] * 16
        assert machine.fault is None

    def test_5xy1_never_skips(self, machine) -> None:
        """5xyN con N != 0 no es SE Vx, Vy aunque Vx == Vy."""
        load_program(machine, [0x5001])
        machine.step()
        assert machine.registers.get_pc() == 0x202
