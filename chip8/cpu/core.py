"""
CPU (Central Processing Unit) - Intérprete CHIP-8

La CPU ejecuta instrucciones en un ciclo continuo:
1. Fetch: Lee la palabra de 16 bits en PC y PC+1 (Big-Endian)
2. Decode: Extrae los campos nnn, x, y, kk, n
3. Execute: Despacha por el nibble alto (16 clases) y, en las clases
   sobrecargadas (0x0, 0x8, 0xE, 0xF), por un segundo discriminante
4. Advance: Avanza PC en 2, salvo que la instrucción fije PC ella misma

Cada manejador devuelve cuánto debe avanzar el PC después de ejecutarse:
- 2: avance normal (una instrucción)
- 4: salto de la siguiente instrucción (SE/SNE/SKP/SKNP con condición cierta)
- 0: la instrucción ya fijó el PC (JP, CALL) o no debe avanzar (espera de tecla)

Los despachos son tablas cerradas: cada instrucción ejecuta exactamente UN
manejador. Las codificaciones desconocidas dentro de una clase no son un error:
se ignoran y el PC avanza normalmente (tolerancia a ROMs con opcodes de extensiones).

Fuente: Cowgod's Chip-8 Technical Reference - 3.1 Standard Chip-8 Instructions
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import TYPE_CHECKING, Callable

from ..errors import MachineFault, StackOverflowFault, StackUnderflowFault
from ..memory.mmu import font_address
from .instruction import Instruction, decode
from .registers import MAX_SP, Registers

if TYPE_CHECKING:
    from ..gpu.display import Display
    from ..io.keypad import Keypad
    from ..io.timer import Timers
    from ..memory.mmu import MMU

logger = logging.getLogger(__name__)

# Avances del PC devueltos por los manejadores
PC_NEXT = 2
PC_SKIP = 4
PC_HOLD = 0


class StepResult(Enum):
    """Resultado de ejecutar step()."""

    OK = "ok"            # Se ejecutó una instrucción
    WAITING = "waiting"  # La CPU espera una tecla (Fx0A); no se ejecutó nada
    FAULT = "fault"      # Fallo de pila; la CPU está detenida hasta reset()


class CPU:
    """
    CPU del CHIP-8.

    Gestiona el ciclo Fetch-Decode-Execute y el estado de espera de tecla.
    Mantiene una instancia de Registers y referencias a la memoria, la pantalla,
    el teclado y los temporizadores.
    """

    def __init__(
        self,
        mmu: MMU,
        display: Display,
        keypad: Keypad,
        timers: Timers,
        rng: random.Random | None = None,
    ) -> None:
        """
        Inicializa la CPU con sus periféricos.

        Args:
            mmu: Memoria de 4096 bytes
            display: Framebuffer de 64x32
            keypad: Teclado de 16 teclas
            timers: Temporizadores DT / ST
            rng: Generador aleatorio para RND (inyectable para tests deterministas)
        """
        self.registers = Registers()
        self.mmu = mmu
        self.display = display
        self.keypad = keypad
        self.timers = timers
        self.rng = rng if rng is not None else random.Random()

        # Espera de tecla (Fx0A): registro destino mientras waiting_for_key es True
        self.waiting_for_key: bool = False
        self._wait_register: int = 0

        # Fallo de pila pendiente (la CPU no ejecuta nada hasta reset())
        self.fault: MachineFault | None = None

        # Contador de instrucciones ejecutadas (para heartbeat y SystemClock)
        self.instructions_executed: int = 0

        # Tabla de despacho principal: nibble alto -> manejador
        self._class_table: dict[int, Callable[[Instruction], int]] = {
            0x0: self._exec_system,
            0x1: self._op_jp_addr,
            0x2: self._op_call_addr,
            0x3: self._op_se_vx_byte,
            0x4: self._op_sne_vx_byte,
            0x5: self._op_se_vx_vy,
            0x6: self._op_ld_vx_byte,
            0x7: self._op_add_vx_byte,
            0x8: self._exec_alu,
            0x9: self._op_sne_vx_vy,
            0xA: self._op_ld_i_addr,
            0xB: self._op_jp_v0_addr,
            0xC: self._op_rnd_vx_byte,
            0xD: self._op_drw,
            0xE: self._exec_keys,
            0xF: self._exec_misc,
        }

        # Clase 0x0: discriminante = instrucción completa
        self._system_table: dict[int, Callable[[Instruction], int]] = {
            0x00E0: self._op_cls,
            0x00EE: self._op_ret,
        }

        # Clase 0x8: discriminante = nibble bajo
        self._alu_table: dict[int, Callable[[Instruction], int]] = {
            0x0: self._op_ld_vx_vy,
            0x1: self._op_or,
            0x2: self._op_and,
            0x3: self._op_xor,
            0x4: self._op_add_vx_vy,
            0x5: self._op_sub,
            0x6: self._op_shr,
            0x7: self._op_subn,
            0xE: self._op_shl,
        }

        # Clase 0xE: discriminante = byte bajo
        self._key_table: dict[int, Callable[[Instruction], int]] = {
            0x9E: self._op_skp,
            0xA1: self._op_sknp,
        }

        # Clase 0xF: discriminante = byte bajo
        self._misc_table: dict[int, Callable[[Instruction], int]] = {
            0x07: self._op_ld_vx_dt,
            0x0A: self._op_ld_vx_k,
            0x15: self._op_ld_dt_vx,
            0x18: self._op_ld_st_vx,
            0x1E: self._op_add_i_vx,
            0x29: self._op_ld_f_vx,
            0x33: self._op_ld_b_vx,
            0x55: self._op_ld_mem_i_vx,
            0x65: self._op_ld_vx_mem_i,
        }

    def reset(self) -> None:
        """Devuelve la CPU al estado de arranque (cancela esperas y fallos)."""
        self.registers.reset()
        self.waiting_for_key = False
        self._wait_register = 0
        self.fault = None
        self.instructions_executed = 0

    # ========== Ciclo de instrucción ==========

    def fetch(self) -> int:
        """
        Lee la instrucción de 16 bits apuntada por PC (Big-Endian).

        No avanza el PC: el avance depende de la instrucción.
        """
        return self.mmu.read_word(self.registers.get_pc())

    def step(self) -> StepResult:
        """
        Ejecuta una sola instrucción.

        Pasos:
        1. Si hay un fallo pendiente, no hacer nada (StepResult.FAULT).
        2. Si se espera una tecla: consumir la tecla retenida o seguir esperando.
        3. Fetch + Decode + Execute.
        4. Avanzar el PC según lo que devuelva el manejador.

        Returns:
            StepResult.OK, StepResult.WAITING o StepResult.FAULT.
            Nunca lanza excepciones por fallos de pila.
        """
        if self.fault is not None:
            return StepResult.FAULT

        if self.waiting_for_key:
            return self._resume_key_wait()

        pc = self.registers.get_pc()
        instruction = decode(self.fetch())

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"PC=0x{pc:03X} Opcode=0x{instruction.opcode:04X} {instruction.mnemonic()}"
            )

        try:
            advance = self._class_table[instruction.op_class](instruction)
        except MachineFault as e:
            # El manejador valida antes de mutar: el estado queda intacto
            self.fault = e
            logger.error(f"Fallo de ejecución: {e}")
            return StepResult.FAULT

        self.registers.advance_pc(advance)
        self.instructions_executed += 1

        if self.waiting_for_key:
            return StepResult.WAITING
        return StepResult.OK

    def _resume_key_wait(self) -> StepResult:
        key = self.keypad.take_latched()
        if key is None:
            return StepResult.WAITING

        self.registers.set_v(self._wait_register, key)
        self.waiting_for_key = False
        self.registers.advance_pc(PC_NEXT)
        self.instructions_executed += 1
        logger.debug(f"LD V{self._wait_register:X}, K -> tecla 0x{key:X}")
        return StepResult.OK

    def _unknown(self, instruction: Instruction) -> int:
        logger.debug(
            f"Opcode desconocido 0x{instruction.opcode:04X} en "
            f"PC=0x{self.registers.get_pc():03X}, ignorado"
        )
        return PC_NEXT

    # ========== Despachos secundarios ==========

    def _exec_system(self, instruction: Instruction) -> int:
        """
        Clase 0x0: CLS (00E0), RET (00EE) y SYS nnn.

        SYS nnn saltaba a rutinas máquina del intérprete del COSMAC VIP; los intérpretes
        modernos lo ignoran, igual que cualquier otra codificación de la clase.
        """
        handler = self._system_table.get(instruction.opcode, self._unknown)
        return handler(instruction)

    def _exec_alu(self, instruction: Instruction) -> int:
        """Clase 0x8: operaciones registro a registro (8xy0-8xyE)."""
        handler = self._alu_table.get(instruction.n, self._unknown)
        return handler(instruction)

    def _exec_keys(self, instruction: Instruction) -> int:
        """Clase 0xE: SKP / SKNP."""
        handler = self._key_table.get(instruction.kk, self._unknown)
        return handler(instruction)

    def _exec_misc(self, instruction: Instruction) -> int:
        """Clase 0xF: temporizadores, teclado, índice y memoria."""
        handler = self._misc_table.get(instruction.kk, self._unknown)
        return handler(instruction)

    # ========== Control de flujo ==========

    def _op_cls(self, instruction: Instruction) -> int:
        """CLS (00E0) - Apaga todos los píxeles de la pantalla."""
        self.display.clear()
        return PC_NEXT

    def _op_ret(self, instruction: Instruction) -> int:
        """
        RET (00EE) - Retorno de subrutina.

        PC := stack[SP], SP -= 1. La pila guarda la dirección del propio CALL,
        así que el avance normal de +2 deja el PC en la instrucción siguiente.

        Raises:
            StackUnderflowFault: Si la pila está vacía (SP == 0)
        """
        regs = self.registers
        if regs.sp == 0:
            raise StackUnderflowFault("RET con la pila vacía", regs.pc, instruction.opcode)

        regs.set_pc(regs.stack[regs.sp])
        regs.stack[regs.sp] = 0
        regs.sp -= 1
        return PC_NEXT

    def _op_jp_addr(self, instruction: Instruction) -> int:
        """JP nnn (1nnn) - Salto absoluto."""
        self.registers.set_pc(instruction.nnn)
        return PC_HOLD

    def _op_call_addr(self, instruction: Instruction) -> int:
        """
        CALL nnn (2nnn) - Llamada a subrutina.

        SP += 1, stack[SP] := PC (dirección del CALL), PC := nnn.

        Raises:
            StackOverflowFault: Si ya hay 15 llamadas anidadas (SP == 15)
        """
        regs = self.registers
        if regs.sp >= MAX_SP:
            raise StackOverflowFault(
                f"CALL con la pila llena ({MAX_SP} llamadas anidadas)",
                regs.pc,
                instruction.opcode,
            )

        regs.sp += 1
        regs.stack[regs.sp] = regs.pc
        regs.set_pc(instruction.nnn)
        return PC_HOLD

    def _op_jp_v0_addr(self, instruction: Instruction) -> int:
        """JP V0, nnn (Bnnn) - Salto a nnn + V0 (12 bits)."""
        self.registers.set_pc((instruction.nnn + self.registers.get_v(0)) & 0xFFF)
        return PC_HOLD

    # ========== Saltos condicionales (skip) ==========

    def _op_se_vx_byte(self, instruction: Instruction) -> int:
        """SE Vx, kk (3xkk) - Salta la siguiente si Vx == kk."""
        if self.registers.get_v(instruction.x) == instruction.kk:
            return PC_SKIP
        return PC_NEXT

    def _op_sne_vx_byte(self, instruction: Instruction) -> int:
        """SNE Vx, kk (4xkk) - Salta la siguiente si Vx != kk."""
        if self.registers.get_v(instruction.x) != instruction.kk:
            return PC_SKIP
        return PC_NEXT

    def _op_se_vx_vy(self, instruction: Instruction) -> int:
        """SE Vx, Vy (5xy0) - Salta la siguiente si Vx == Vy."""
        if instruction.n != 0x0:
            return self._unknown(instruction)
        regs = self.registers
        if regs.get_v(instruction.x) == regs.get_v(instruction.y):
            return PC_SKIP
        return PC_NEXT

    def _op_sne_vx_vy(self, instruction: Instruction) -> int:
        """SNE Vx, Vy (9xy0) - Salta la siguiente si Vx != Vy."""
        if instruction.n != 0x0:
            return self._unknown(instruction)
        regs = self.registers
        if regs.get_v(instruction.x) != regs.get_v(instruction.y):
            return PC_SKIP
        return PC_NEXT

    # ========== Cargas inmediatas ==========

    def _op_ld_vx_byte(self, instruction: Instruction) -> int:
        """LD Vx, kk (6xkk)"""
        self.registers.set_v(instruction.x, instruction.kk)
        return PC_NEXT

    def _op_add_vx_byte(self, instruction: Instruction) -> int:
        """
        ADD Vx, kk (7xkk) - Suma sin acarreo.

        VF no se modifica aunque haya overflow.
        """
        regs = self.registers
        regs.set_v(instruction.x, regs.get_v(instruction.x) + instruction.kk)
        return PC_NEXT

    def _op_ld_i_addr(self, instruction: Instruction) -> int:
        """LD I, nnn (Annn)"""
        self.registers.set_i(instruction.nnn)
        return PC_NEXT

    def _op_rnd_vx_byte(self, instruction: Instruction) -> int:
        """
        RND Vx, kk (Cxkk) - Vx := byte aleatorio AND kk.

        El AND es intencionado: no es un número entre 0 y kk.
        """
        self.registers.set_v(instruction.x, self.rng.randint(0, 0xFF) & instruction.kk)
        return PC_NEXT

    # ========== ALU (8xyN) ==========
    # Orden de escritura: primero el resultado en Vx, después el flag en VF.
    # Si x == F, el flag pisa el resultado.

    def _op_ld_vx_vy(self, instruction: Instruction) -> int:
        """LD Vx, Vy (8xy0)"""
        self.registers.set_v(instruction.x, self.registers.get_v(instruction.y))
        return PC_NEXT

    def _op_or(self, instruction: Instruction) -> int:
        """OR Vx, Vy (8xy1)"""
        regs = self.registers
        regs.set_v(instruction.x, regs.get_v(instruction.x) | regs.get_v(instruction.y))
        return PC_NEXT

    def _op_and(self, instruction: Instruction) -> int:
        """AND Vx, Vy (8xy2)"""
        regs = self.registers
        regs.set_v(instruction.x, regs.get_v(instruction.x) & regs.get_v(instruction.y))
        return PC_NEXT

    def _op_xor(self, instruction: Instruction) -> int:
        """XOR Vx, Vy (8xy3)"""
        regs = self.registers
        regs.set_v(instruction.x, regs.get_v(instruction.x) ^ regs.get_v(instruction.y))
        return PC_NEXT

    def _op_add_vx_vy(self, instruction: Instruction) -> int:
        """
        ADD Vx, Vy (8xy4) - Suma con acarreo.

        La suma intermedia es de 9 bits. VF = 1 si y solo si la suma es > 255.
        Vx = suma mod 256.
        """
        regs = self.registers
        total = regs.get_v(instruction.x) + regs.get_v(instruction.y)
        regs.set_v(instruction.x, total & 0xFF)
        regs.set_vf(total > 0xFF)
        return PC_NEXT

    def _op_sub(self, instruction: Instruction) -> int:
        """
        SUB Vx, Vy (8xy5) - Vx := Vx - Vy.

        VF = NOT borrow, con comparación ESTRICTA: VF = 1 si Vx > Vy.
        Con Vx == Vy el resultado es 0 y VF = 0.
        """
        regs = self.registers
        vx = regs.get_v(instruction.x)
        vy = regs.get_v(instruction.y)
        regs.set_v(instruction.x, (vx - vy) & 0xFF)
        regs.set_vf(vx > vy)
        return PC_NEXT

    def _op_shr(self, instruction: Instruction) -> int:
        """
        SHR Vx (8xy6) - Desplazamiento a la derecha de Vx (Vy se ignora).

        VF = bit 0 de Vx antes del desplazamiento.
        """
        regs = self.registers
        vx = regs.get_v(instruction.x)
        regs.set_v(instruction.x, vx >> 1)
        regs.set_vf(vx & 0x01)
        return PC_NEXT

    def _op_subn(self, instruction: Instruction) -> int:
        """
        SUBN Vx, Vy (8xy7) - Vx := Vy - Vx.

        VF = 1 si Vy > Vx (misma comparación estricta que SUB).
        """
        regs = self.registers
        vx = regs.get_v(instruction.x)
        vy = regs.get_v(instruction.y)
        regs.set_v(instruction.x, (vy - vx) & 0xFF)
        regs.set_vf(vy > vx)
        return PC_NEXT

    def _op_shl(self, instruction: Instruction) -> int:
        """
        SHL Vx (8xyE) - Desplazamiento a la izquierda de Vx (Vy se ignora).

        VF = bit 7 de Vx antes del desplazamiento.
        """
        regs = self.registers
        vx = regs.get_v(instruction.x)
        regs.set_v(instruction.x, (vx << 1) & 0xFF)
        regs.set_vf((vx >> 7) & 0x01)
        return PC_NEXT

    # ========== Pantalla ==========

    def _op_drw(self, instruction: Instruction) -> int:
        """
        DRW Vx, Vy, n (Dxyn) - Dibuja un sprite de n filas.

        Lee n bytes desde memory[I] (con wrap-around de 12 bits) y los dibuja con
        XOR en (Vx, Vy). VF = 1 si algún píxel encendido se apagó.

        El framebuffer y VF se actualizan dentro de la misma llamada a step():
        nadie puede observar la pantalla a medio dibujar.
        """
        regs = self.registers
        sprite = self.mmu.read_block(regs.get_i(), instruction.n)
        collision = self.display.draw_sprite(
            regs.get_v(instruction.x), regs.get_v(instruction.y), sprite
        )
        regs.set_vf(collision)
        return PC_NEXT

    # ========== Teclado ==========

    def _op_skp(self, instruction: Instruction) -> int:
        """SKP Vx (Ex9E) - Salta la siguiente si la tecla Vx está pulsada."""
        if self.keypad.is_pressed(self.registers.get_v(instruction.x)):
            return PC_SKIP
        return PC_NEXT

    def _op_sknp(self, instruction: Instruction) -> int:
        """SKNP Vx (ExA1) - Salta la siguiente si la tecla Vx NO está pulsada."""
        if not self.keypad.is_pressed(self.registers.get_v(instruction.x)):
            return PC_SKIP
        return PC_NEXT

    def _op_ld_vx_k(self, instruction: Instruction) -> int:
        """
        LD Vx, K (Fx0A) - Espera una pulsación de tecla.

        Es el único punto de suspensión del núcleo, y NO bloquea: la CPU pasa al
        estado de espera sin avanzar el PC. Las siguientes llamadas a step() no
        hacen nada hasta que el host entregue un key-down; entonces la tecla se
        guarda en Vx, se sale de la espera y el PC avanza.
        """
        self.keypad.arm()
        self.waiting_for_key = True
        self._wait_register = instruction.x
        logger.debug(f"LD V{instruction.x:X}, K -> esperando tecla")
        return PC_HOLD

    # ========== Temporizadores ==========

    def _op_ld_vx_dt(self, instruction: Instruction) -> int:
        """LD Vx, DT (Fx07)"""
        self.registers.set_v(instruction.x, self.timers.read_delay())
        return PC_NEXT

    def _op_ld_dt_vx(self, instruction: Instruction) -> int:
        """LD DT, Vx (Fx15)"""
        self.timers.write_delay(self.registers.get_v(instruction.x))
        return PC_NEXT

    def _op_ld_st_vx(self, instruction: Instruction) -> int:
        """LD ST, Vx (Fx18)"""
        self.timers.write_sound(self.registers.get_v(instruction.x))
        return PC_NEXT

    # ========== Índice y memoria ==========

    def _op_add_i_vx(self, instruction: Instruction) -> int:
        """ADD I, Vx (Fx1E) - I := (I + Vx) & 0xFFF. VF no se modifica."""
        regs = self.registers
        regs.set_i((regs.get_i() + regs.get_v(instruction.x)) & 0xFFF)
        return PC_NEXT

    def _op_ld_f_vx(self, instruction: Instruction) -> int:
        """LD F, Vx (Fx29) - I := dirección del glifo del dígito Vx (nibble bajo)."""
        self.registers.set_i(font_address(self.registers.get_v(instruction.x)))
        return PC_NEXT

    def _op_ld_b_vx(self, instruction: Instruction) -> int:
        """
        LD B, Vx (Fx33) - Guarda Vx en BCD.

        memory[I] = centenas, memory[I+1] = decenas, memory[I+2] = unidades.
        """
        regs = self.registers
        value = regs.get_v(instruction.x)
        i = regs.get_i()
        self.mmu.write_byte(i, value // 100)
        self.mmu.write_byte(i + 1, (value // 10) % 10)
        self.mmu.write_byte(i + 2, value % 10)
        return PC_NEXT

    def _op_ld_mem_i_vx(self, instruction: Instruction) -> int:
        """
        LD [I], Vx (Fx55) - Copia V0..Vx (INCLUSIVE) a memoria desde I.

        Se copian x + 1 registros. I no se modifica.
        """
        regs = self.registers
        i = regs.get_i()
        for index in range(instruction.x + 1):
            self.mmu.write_byte(i + index, regs.get_v(index))
        return PC_NEXT

    def _op_ld_vx_mem_i(self, instruction: Instruction) -> int:
        """
        LD Vx, [I] (Fx65) - Carga V0..Vx (INCLUSIVE) desde memoria en I.

        Si x == F, VF se carga igual que el resto. I no se modifica.
        """
        regs = self.registers
        i = regs.get_i()
        for index in range(instruction.x + 1):
            regs.set_v(index, self.mmu.read_byte(i + index))
        return PC_NEXT
