"""
CHIP-8 - Máquina virtual e intérprete

Paquete principal del emulador. El núcleo (Machine) es un intérprete puramente
reactivo: el host decide cuándo ejecutar instrucciones (step) y cuándo avanzar
los temporizadores (tick_timers) a 60 Hz.
"""

from .cpu.core import StepResult
from .errors import (
    Chip8Error,
    MachineFault,
    RomTooLargeError,
    StackOverflowFault,
    StackUnderflowFault,
)
from .machine import Machine

__all__ = [
    "Chip8Error",
    "Machine",
    "MachineFault",
    "RomTooLargeError",
    "StackOverflowFault",
    "StackUnderflowFault",
    "StepResult",
]

__version__ = "0.1.0"
