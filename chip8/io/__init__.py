"""
Módulo de Entrada/Salida (I/O)

Contiene los periféricos del CHIP-8 que no viven en memoria:
- Keypad: Teclado hexadecimal de 16 teclas
- Timers: Temporizadores de retardo (DT) y sonido (ST)
"""

from .keypad import Keypad
from .timer import Timers

__all__ = ["Keypad", "Timers"]
