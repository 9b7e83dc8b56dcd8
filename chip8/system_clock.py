"""
SystemClock: Reparto del tiempo del host entre instrucciones y temporizadores.

El núcleo CHIP-8 no tiene reloj propio. El host necesita dos cadencias:
1. Instrucciones: ~500 por segundo (valor habitual, configurable)
2. Temporizadores DT/ST: exactamente 60 ticks por segundo

Este módulo centraliza la conversión "tiempo transcurrido -> llamadas a step() y
tick_timers()" en UN SOLO LUGAR, para que el bucle del host no tenga que mezclar
las dos cadencias a mano.

Todas las llamadas al núcleo se hacen desde el hilo que invoca al reloj: el
reloj no crea hilos ni duerme.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .cpu.core import StepResult
from .io.timer import TIMER_HZ

if TYPE_CHECKING:
    from .machine import Machine

# Instrucciones por segundo por defecto
DEFAULT_CPU_HZ = 500

# Resolución del acumulador de tiempo real (microsegundos)
US_PER_SECOND = 1_000_000


class SystemClock:
    """
    Reloj maestro del host que coordina instrucciones y temporizadores.

    Responsabilidades:
    - Ejecutar N instrucciones por tick de 60 Hz (con acumulación fraccionaria)
    - Ejecutar un tick de temporizadores por cada 1/60 s
    - Acumular el total de instrucciones ejecutadas
    """

    def __init__(self, machine: Machine, cpu_hz: int = DEFAULT_CPU_HZ, timer_hz: int = TIMER_HZ) -> None:
        """
        Inicializa el reloj del sistema.

        Args:
            machine: Máquina CHIP-8 a la que se entregan las llamadas
            cpu_hz: Instrucciones por segundo
            timer_hz: Ticks de temporizador por segundo (60 en CHIP-8)

        Raises:
            ValueError: Si alguna frecuencia no es positiva
        """
        if cpu_hz <= 0 or timer_hz <= 0:
            raise ValueError(f"Frecuencias inválidas: cpu_hz={cpu_hz}, timer_hz={timer_hz}")

        self._machine = machine
        self._cpu_hz = cpu_hz
        self._timer_hz = timer_hz

        # Acumuladores enteros (sin error de redondeo):
        # - presupuesto de instrucciones en unidades de 1/(cpu_hz*timer_hz) s
        # - tiempo real en unidades de 1/(1_000_000*timer_hz) s; un frame cuesta 1_000_000
        self._step_budget: int = 0
        self._time_budget: int = 0

        self._total_steps = 0
        self._total_timer_ticks = 0
        self.last_result: StepResult = StepResult.OK

    @property
    def cpu_hz(self) -> int:
        return self._cpu_hz

    @property
    def steps_per_tick(self) -> float:
        """Instrucciones por tick de temporizador (500 / 60 = 8.33 por defecto)."""
        return self._cpu_hz / self._timer_hz

    def tick_frame(self) -> int:
        """
        Ejecuta un frame de 1/60 s: las instrucciones que le tocan y un tick de timers.

        La parte fraccionaria de steps_per_tick se acumula entre frames, de modo que
        a la larga se ejecutan exactamente cpu_hz instrucciones por segundo.

        Si la máquina entra en espera de tecla o en fallo, deja de ejecutar
        instrucciones en este frame (los temporizadores siguen avanzando).

        Returns:
            int: Número de llamadas a step() que ejecutaron una instrucción
        """
        self._step_budget += self._cpu_hz
        executed = 0

        while self._step_budget >= self._timer_hz:
            self._step_budget -= self._timer_hz
            result = self._machine.step()
            self.last_result = result
            if result is StepResult.OK:
                executed += 1
                continue
            # En espera o en fallo: no tiene sentido gastar el resto del presupuesto
            self._step_budget = 0
            break

        self._machine.tick_timers()
        self._total_timer_ticks += 1
        self._total_steps += executed
        return executed

    def advance(self, seconds: float) -> int:
        """
        Avanza el reloj según el tiempo real transcurrido.

        Ejecuta tantos frames completos de 1/60 s como quepan en el tiempo
        acumulado. El resto queda pendiente para la siguiente llamada.

        Args:
            seconds: Tiempo transcurrido desde la última llamada

        Returns:
            int: Número de instrucciones ejecutadas
        """
        self._time_budget += round(max(0.0, seconds) * US_PER_SECOND) * self._timer_hz
        executed = 0

        while self._time_budget >= US_PER_SECOND:
            self._time_budget -= US_PER_SECOND
            executed += self.tick_frame()

        return executed

    def get_total_steps(self) -> int:
        """
        Retorna el total de instrucciones ejecutadas desde el inicio.
        """
        return self._total_steps

    def get_total_timer_ticks(self) -> int:
        return self._total_timer_ticks

    def reset_totals(self) -> None:
        """
        Reinicia los contadores y los acumuladores.
        """
        self._total_steps = 0
        self._total_timer_ticks = 0
        self._step_budget = 0
        self._time_budget = 0
