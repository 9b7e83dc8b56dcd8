"""
Emulator - Sistema Principal (Placa Base del host)

La clase Emulator es el host que rodea al núcleo CHIP-8. Integra:
- Machine (núcleo: CPU, memoria, pantalla, teclado, temporizadores)
- Rom (imagen del programa cargada desde disco)
- SystemClock (reparto del tiempo entre instrucciones y ticks de 60 Hz)
- Renderer (ventana Pygame)

El bucle principal (Game Loop) hace, en cada frame de ~1/60 s:
1. Procesar eventos de Pygame (cierre de ventana, teclado -> set_key/clear_key)
2. Avanzar el reloj con el tiempo real transcurrido (step() + tick_timers())
3. Informar de cambios del tono (ST) y de fallos de ejecución
4. Redibujar la pantalla si cambió

El núcleo nunca duerme ni espera: la espera de tecla (Fx0A) se resuelve solo porque
este bucle sigue entregando eventos de teclado entre llamadas a step().

Mapeo de teclado (QWERTY -> teclado hexadecimal):

    1 2 3 4      1 2 3 C
    Q W E R  ->  4 5 6 D
    A S D F      7 8 9 E
    Z X C V      A 0 B F

Teclas del host: ESC cierra, F5 reinicia la ROM.
"""

from __future__ import annotations

import logging
from pathlib import Path

try:
    import pygame
except ImportError:
    pygame = None  # type: ignore

from .cpu.core import StepResult
from .gpu.renderer import DEFAULT_SCALE, WINDOW_TITLE, Renderer
from .machine import Machine
from .memory.rom import Rom
from .system_clock import DEFAULT_CPU_HZ, SystemClock

logger = logging.getLogger(__name__)

# Frames por segundo del bucle del host (= frecuencia de los temporizadores)
TARGET_FPS = 60


def build_key_map() -> dict[int, int]:
    """
    Devuelve el mapeo de códigos de tecla de Pygame a teclas CHIP-8.

    Returns:
        Diccionario {pygame.K_*: tecla CHIP-8}, vacío si pygame no está disponible
    """
    if pygame is None:
        return {}

    return {
        pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
        pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
        pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
        pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
    }


class Emulator:
    """
    Host del emulador CHIP-8.

    Actúa como la "placa base" que conecta el núcleo con el mundo exterior:
    disco (ROM), reloj de pared, ventana y teclado.
    """

    def __init__(
        self,
        rom_path: str | Path | None = None,
        scale: int = DEFAULT_SCALE,
        cpu_hz: int = DEFAULT_CPU_HZ,
        seed: int | None = None,
        headless: bool = False,
    ) -> None:
        """
        Inicializa el host.

        Args:
            rom_path: Ruta opcional a la ROM; si se da, se carga inmediatamente
            scale: Factor de escala de la ventana
            cpu_hz: Instrucciones por segundo
            seed: Semilla para RND (ejecución determinista)
            headless: Si es True no se crea ventana (tests, benchmarks)

        Raises:
            FileNotFoundError: Si el archivo ROM no existe
            ValueError: Si la ROM está vacía o no cabe en memoria
        """
        self._machine = Machine(seed=seed)
        self._clock = SystemClock(self._machine, cpu_hz=cpu_hz)
        self._rom: Rom | None = None
        self._key_map = build_key_map()

        self._renderer: Renderer | None = None
        self._pygame_clock = None

        # Estado observado en el frame anterior (para detectar transiciones)
        self._tone_on = False
        self._fault_reported = False

        self.running = False
        self.frame_count = 0
        self.verbose = False

        # La ROM se carga ANTES de abrir la ventana: si falla, no queda Pygame inicializado
        if rom_path is not None:
            self.load_rom(rom_path)

        if not headless:
            try:
                self._renderer = Renderer(scale=scale)
                self._pygame_clock = pygame.time.Clock()
            except ImportError:
                logger.warning("Pygame no disponible. El renderer no se inicializará.")
                self._renderer = None

        logger.info(f"Emulador inicializado ({'headless' if self._renderer is None else 'ventana'})")

    def load_rom(self, rom_path: str | Path) -> None:
        """
        Carga una ROM desde disco en la máquina (con reset previo).

        Raises:
            FileNotFoundError: Si el archivo ROM no existe
            IOError: Si hay un error al leer el archivo ROM
            ValueError: Si la ROM está vacía o no cabe en memoria
        """
        rom = Rom(rom_path)
        self._machine.load_program(rom.data)
        self._rom = rom
        self._clock.reset_totals()
        self._tone_on = False
        self._fault_reported = False

        info = rom.get_info()
        logger.info(
            f"ROM en memoria: {info['title']} | "
            f"Tamaño: {info['size']} bytes | "
            f"Libre: {info['free']} bytes | "
            f"Entrada: {info['entry_opcode']}"
        )

    def restart(self) -> None:
        """Vuelve a cargar la ROM actual desde el estado de arranque."""
        if self._rom is not None:
            self._machine.load_program(self._rom.data)
        else:
            self._machine.reset()
        self._clock.reset_totals()
        self._tone_on = False
        self._fault_reported = False
        logger.info("Máquina reiniciada")

    # ========== Bucle principal ==========

    def run(self, max_frames: int | None = None) -> None:
        """
        Ejecuta el bucle principal del emulador (Game Loop).

        Args:
            max_frames: Número máximo de frames a ejecutar (None = hasta cerrar la ventana)

        Raises:
            RuntimeError: Si no hay ninguna ROM cargada
        """
        if self._rom is None:
            raise RuntimeError("No hay ROM cargada. Llama a load_rom() primero.")

        self.running = True
        self.frame_count = 0

        try:
            while self.running:
                if not self._handle_pygame_events():
                    self.running = False
                    break

                # Sincronización con el reloj del host para mantener 60 FPS
                if self._pygame_clock is not None:
                    elapsed_ms = self._pygame_clock.tick(TARGET_FPS)
                    self._clock.advance(elapsed_ms / 1000.0)
                else:
                    self._clock.tick_frame()

                self._update_tone()
                self._report_fault()

                if self._renderer is not None and self._machine.consume_frame_dirty():
                    self._renderer.render_frame(self._machine.frame_array())

                # Heartbeat (opcional, para depuración)
                if self.verbose and self.frame_count % TARGET_FPS == 0:
                    regs = self._machine.register_snapshot()
                    logger.info(
                        f"💓 Heartbeat ... PC=0x{regs['pc']:03X} | I=0x{regs['i']:03X} | "
                        f"SP={regs['sp']} | Instrucciones={self._clock.get_total_steps()} | "
                        f"Esperando tecla={self._machine.waiting_for_key}"
                    )

                self.frame_count += 1
                if max_frames is not None and self.frame_count >= max_frames:
                    break

        except KeyboardInterrupt:
            # Salir limpiamente con Ctrl+C
            pass

        finally:
            self.running = False
            if self._renderer is not None:
                self._renderer.quit()

    def _update_tone(self) -> None:
        """Informa de las transiciones del tono (el host no sintetiza sonido)."""
        tone_on = self._machine.sound_active
        if tone_on == self._tone_on:
            return

        self._tone_on = tone_on
        logger.info(f"🔊 Tono {'ON' if tone_on else 'OFF'}")
        if self._renderer is not None:
            suffix = " - ♪" if tone_on else ""
            self._renderer.set_caption(f"{self._window_title()}{suffix}")

    def _report_fault(self) -> None:
        fault = self._machine.fault
        if fault is None or self._fault_reported:
            return

        self._fault_reported = True
        logger.error(f"Máquina detenida: {fault}. Pulsa F5 para reiniciar.")
        if self._renderer is not None:
            self._renderer.set_caption(f"{self._window_title()} - FALLO (F5 reinicia)")

    def _window_title(self) -> str:
        if self._rom is None:
            return WINDOW_TITLE
        return f"{WINDOW_TITLE} - {self._rom.name}"

    # ========== Eventos ==========

    def _handle_pygame_events(self) -> bool:
        """
        Procesa todos los eventos pendientes de Pygame.

        Returns:
            True si se debe continuar ejecutando, False si se debe cerrar
        """
        if self._renderer is None or pygame is None:
            return True

        for event in pygame.event.get():
            if not self.handle_event(event):
                return False
        return True

    def handle_event(self, event) -> bool:
        """
        Procesa un evento de Pygame.

        - QUIT o ESC: cerrar
        - F5: reiniciar la ROM
        - Teclas mapeadas: key-down / key-up en el teclado CHIP-8

        Returns:
            True si se debe continuar ejecutando, False si se debe cerrar
        """
        if pygame is None:
            return True

        if event.type == pygame.QUIT:
            return False

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_F5:
                self.restart()
                return True
            key = self._key_map.get(event.key)
            if key is not None:
                logger.debug(f"KEY PRESS: {event.key} -> tecla CHIP-8 0x{key:X}")
                self._machine.set_key(key)

        elif event.type == pygame.KEYUP:
            key = self._key_map.get(event.key)
            if key is not None:
                logger.debug(f"KEY RELEASE: {event.key} -> tecla CHIP-8 0x{key:X}")
                self._machine.clear_key(key)

        return True

    # ========== Acceso para tests y debugging ==========

    def get_machine(self) -> Machine:
        """
        Devuelve la máquina (para tests y debugging).
        """
        return self._machine

    def get_rom(self) -> Rom | None:
        return self._rom

    def get_clock(self) -> SystemClock:
        return self._clock

    @property
    def last_result(self) -> StepResult:
        """Resultado del último step() ejecutado por el reloj."""
        return self._clock.last_result
