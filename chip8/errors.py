"""
Errores del intérprete CHIP-8

Taxonomía de errores del núcleo:
- RomTooLargeError: la ROM no cabe en memoria (se rechaza al cargar, sin tocar la RAM)
- MachineFault: fallo recuperable durante la ejecución (pila desbordada o vacía).
  El núcleo NO lo lanza desde step(): lo guarda en Machine.fault y devuelve
  StepResult.FAULT. El host decide si hace reset().

Los opcodes desconocidos NO son errores: se ignoran y el PC avanza normalmente.
"""

from __future__ import annotations


class Chip8Error(Exception):
    """Clase base de todos los errores del intérprete."""


class RomTooLargeError(Chip8Error, ValueError):
    """La imagen ROM excede el espacio disponible a partir de 0x200."""

    def __init__(self, size: int, capacity: int) -> None:
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"ROM demasiado grande: {size} bytes (máximo permitido: {capacity} bytes)"
        )


class MachineFault(Chip8Error):
    """
    Fallo recuperable de ejecución.
    
    Attributes:
        pc: Dirección de la instrucción que provocó el fallo
        opcode: Instrucción de 16 bits que provocó el fallo
    """

    def __init__(self, message: str, pc: int, opcode: int) -> None:
        self.pc = pc
        self.opcode = opcode
        super().__init__(f"{message} (PC=0x{pc:03X}, opcode=0x{opcode:04X})")


class StackOverflowFault(MachineFault):
    """CALL con la pila llena (15 llamadas anidadas)."""


class StackUnderflowFault(MachineFault):
    """RET con la pila vacía."""
