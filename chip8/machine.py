"""
Machine - Núcleo de la máquina virtual CHIP-8

La clase Machine es el núcleo del intérprete: posee TODO el estado emulado
(memoria, registros, pila, temporizadores, pantalla y teclado) y expone la API
que usa el host:

- reset(): vuelve al estado de arranque
- load_program(data): reset + copia de la ROM en 0x200
- step(): ejecuta una instrucción (o nada, si espera una tecla)
- tick_timers(): decremento de DT/ST a 60 Hz
- set_key(key) / clear_key(key): eventos de teclado
- framebuffer(), waiting_for_key, sound_active: lectura de estado

El núcleo es puramente reactivo: nunca crea hilos ni duerme. El host decide
cuándo llamar a step() y a tick_timers().

Concurrencia: si el host ejecuta los ticks de los temporizadores en un hilo
distinto al de las instrucciones, todo el estado queda protegido por un único
cerrojo (RLock) que toman todos los métodos públicos.

Fuente: Cowgod's Chip-8 Technical Reference - 2.0 Chip-8 Specifications
"""

from __future__ import annotations

import logging
import random
import threading

from .cpu.core import CPU, StepResult
from .cpu.registers import Registers
from .errors import MachineFault, RomTooLargeError
from .gpu.display import Display
from .io.keypad import Keypad
from .io.timer import Timers
from .memory.mmu import MAX_PROGRAM_SIZE, MMU, PROGRAM_START

logger = logging.getLogger(__name__)


class Machine:
    """
    Máquina virtual CHIP-8 completa.

    Integra todos los componentes:
    - MMU (4096 bytes con la fuente en 0x000)
    - CPU (registros, pila, despacho de instrucciones)
    - Display (64x32)
    - Keypad (16 teclas)
    - Timers (DT / ST)
    """

    def __init__(self, seed: int | None = None) -> None:
        """
        Crea la máquina en estado de arranque.

        Args:
            seed: Semilla opcional para el generador de RND (Cxkk).
                  Con la misma semilla, la ejecución es determinista.
        """
        self._lock = threading.RLock()

        self._mmu = MMU()
        self._display = Display()
        self._keypad = Keypad()
        self._timers = Timers()
        self._cpu = CPU(
            self._mmu,
            self._display,
            self._keypad,
            self._timers,
            rng=random.Random(seed),
        )

        # Tamaño del último programa cargado (0 = ninguno)
        self._program_size: int = 0

        logger.info("Máquina CHIP-8 inicializada")

    # ========== Ciclo de vida ==========

    def reset(self) -> None:
        """
        Devuelve todos los campos a su estado inicial.

        - Memoria borrada y fuente re-sembrada
        - PC = 0x200, SP = 0, I = 0, V0-VF = 0
        - Temporizadores a 0, teclas soltadas, pantalla apagada
        - Cancela la espera de tecla y cualquier fallo pendiente

        Se puede llamar en cualquier momento, incluso a mitad de una espera
        o después de un fallo.
        """
        with self._lock:
            self._mmu.reset()
            self._cpu.reset()
            self._display.clear()
            self._keypad.reset()
            self._timers.reset()
            self._program_size = 0
            logger.debug("Máquina reseteada")

    def load_program(self, data: bytes | bytearray) -> None:
        """
        Resetea la máquina y carga una imagen ROM en 0x200.

        La validación de tamaño ocurre ANTES del reset: si la ROM no cabe,
        la máquina queda exactamente como estaba.

        Args:
            data: Bytes del programa (sin cabecera)

        Raises:
            RomTooLargeError: Si la ROM ocupa más de 3584 bytes
        """
        with self._lock:
            if len(data) > MAX_PROGRAM_SIZE:
                raise RomTooLargeError(len(data), MAX_PROGRAM_SIZE)

            self.reset()
            self._mmu.load_program(data)
            self._program_size = len(data)
            logger.info(f"Programa cargado: {len(data)} bytes en 0x{PROGRAM_START:03X}")

    # ========== Ejecución ==========

    def step(self) -> StepResult:
        """
        Ejecuta una instrucción.

        Returns:
            StepResult.OK si se ejecutó una instrucción,
            StepResult.WAITING si la máquina espera una tecla (Fx0A),
            StepResult.FAULT si hay un fallo de pila pendiente (ver fault)
        """
        with self._lock:
            return self._cpu.step()

    def run(self, max_steps: int) -> StepResult:
        """
        Ejecuta hasta max_steps instrucciones.

        Se detiene antes si la máquina entra en espera de tecla o en fallo.

        Returns:
            El resultado del último step()
        """
        result = StepResult.OK
        with self._lock:
            for _ in range(max_steps):
                result = self._cpu.step()
                if result is not StepResult.OK:
                    break
        return result

    def tick_timers(self) -> bool:
        """
        Avanza DT y ST un tick (el host lo llama a 60 Hz).

        Returns:
            True si el tono está activo después del tick (ST > 0)
        """
        with self._lock:
            return self._timers.tick()

    # ========== Teclado ==========

    def set_key(self, key: int) -> None:
        """Evento key-down para la tecla CHIP-8 key (0x0-0xF)."""
        with self._lock:
            self._keypad.press(key)

    def clear_key(self, key: int) -> None:
        """Evento key-up para la tecla CHIP-8 key (0x0-0xF)."""
        with self._lock:
            self._keypad.release(key)

    def is_key_pressed(self, key: int) -> bool:
        with self._lock:
            return self._keypad.is_pressed(key)

    # ========== Lectura de estado ==========

    def framebuffer(self) -> list[list[bool]]:
        """
        Copia del framebuffer: 32 filas de 64 booleanos (frame[y][x]).
        """
        with self._lock:
            return self._display.framebuffer()

    def frame_array(self):
        """Copia del framebuffer como array NumPy (32, 64) de uint8."""
        with self._lock:
            return self._display.to_array()

    def consume_frame_dirty(self) -> bool:
        """
        Devuelve True si la pantalla cambió desde la última consulta y baja el flag.

        Permite al host redibujar solo cuando hace falta.
        """
        with self._lock:
            dirty = self._display.dirty
            self._display.dirty = False
            return dirty

    @property
    def waiting_for_key(self) -> bool:
        """True mientras la máquina está suspendida en LD Vx, K."""
        with self._lock:
            return self._cpu.waiting_for_key

    @property
    def sound_active(self) -> bool:
        """True mientras ST sea distinto de cero (el host debe sonar)."""
        with self._lock:
            return self._timers.sound_active

    @property
    def fault(self) -> MachineFault | None:
        """Fallo de pila pendiente, o None."""
        with self._lock:
            return self._cpu.fault

    @property
    def registers(self) -> Registers:
        """
        Banco de registros VIVO (para tests y depuración, como get_cpu()).

        No toma el cerrojo: quien lo use desde otro hilo debe usar
        register_snapshot().
        """
        return self._cpu.registers

    def register_snapshot(self) -> dict[str, int | list[int]]:
        """
        Copia coherente de los registros, tomada bajo el cerrojo.

        Returns:
            Diccionario con 'v' (lista de 16), 'i', 'pc', 'sp' y 'stack' (lista de 16)
        """
        with self._lock:
            regs = self._cpu.registers
            return {
                "v": list(regs.v),
                "i": regs.i,
                "pc": regs.pc,
                "sp": regs.sp,
                "stack": list(regs.stack),
            }

    @property
    def delay_timer(self) -> int:
        with self._lock:
            return self._timers.read_delay()

    @property
    def sound_timer(self) -> int:
        with self._lock:
            return self._timers.read_sound()

    @property
    def program_size(self) -> int:
        with self._lock:
            return self._program_size

    @property
    def instructions_executed(self) -> int:
        with self._lock:
            return self._cpu.instructions_executed

    def read_memory(self, addr: int, length: int = 1) -> bytes:
        """Lee length bytes de memoria desde addr (con wrap-around de 12 bits)."""
        with self._lock:
            return self._mmu.read_block(addr, length)

    def get_cpu(self) -> CPU:
        """
        Devuelve la instancia de la CPU (para tests y debugging).
        """
        return self._cpu

    def get_mmu(self) -> MMU:
        """
        Devuelve la instancia de la MMU (para tests y debugging).
        """
        return self._mmu

    def get_display(self) -> Display:
        """
        Devuelve la instancia del Display (para tests y debugging).
        """
        return self._display
