"""
Timers - Temporizadores de retardo y sonido del CHIP-8

El CHIP-8 tiene dos temporizadores de 8 bits:
- DT (Delay Timer): Los programas lo usan para medir tiempo. Se lee con Fx07
  y se escribe con Fx15.
- ST (Sound Timer): Mientras es distinto de cero suena un tono. Se escribe con Fx18.

Ambos se decrementan a 60 Hz mientras son mayores que cero y nunca bajan de cero.
El decremento NO lo hace el núcleo por su cuenta: el host llama a tick() a 60 Hz.

Señal de audio hacia el host:
- ST pasa de 0 a distinto de cero: empieza el tono
- ST pasa de distinto de cero a 0: termina el tono

Fuente: Cowgod's Chip-8 Technical Reference - 2.5 Timers & Sound
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Frecuencia de decremento de los temporizadores
TIMER_HZ = 60


class Timers:
    """
    Temporizadores DT y ST del CHIP-8.
    
    Mantiene además el estado del tono para detectar transiciones
    (inicio / fin) que el host puede consultar.
    """

    def __init__(self) -> None:
        """Inicializa ambos temporizadores a 0 (tono apagado)."""
        self._delay: int = 0
        self._sound: int = 0
        self._tone_active: bool = False
        logger.debug("Timers inicializados (DT=0, ST=0)")

    def reset(self) -> None:
        self._delay = 0
        self._sound = 0
        self._tone_active = False

    def tick(self) -> bool:
        """
        Avanza un tick de 60 Hz.
        
        Decrementa DT y ST de forma independiente hacia cero.
        
        Returns:
            True si el tono sigue activo después del decremento (ST > 0)
        """
        if self._delay > 0:
            self._delay -= 1
        if self._sound > 0:
            self._sound -= 1
        
        self._update_tone()
        return self._tone_active

    def read_delay(self) -> int:
        """Lee DT (Fx07)"""
        return self._delay

    def write_delay(self, value: int) -> None:
        """Escribe DT (Fx15)"""
        self._delay = value & 0xFF

    def read_sound(self) -> int:
        """Lee ST"""
        return self._sound

    def write_sound(self, value: int) -> None:
        """
        Escribe ST (Fx18).
        
        Escribir un valor distinto de cero enciende el tono inmediatamente;
        escribir 0 lo apaga sin esperar al siguiente tick.
        """
        self._sound = value & 0xFF
        self._update_tone()

    @property
    def sound_active(self) -> bool:
        """True mientras ST sea distinto de cero."""
        return self._tone_active

    def _update_tone(self) -> None:
        active = self._sound > 0
        if active != self._tone_active:
            logger.debug(f"Timers: tono {'activado' if active else 'desactivado'} (ST={self._sound})")
        self._tone_active = active
