"""
MMU (Memory Management Unit) - Memoria del CHIP-8

El CHIP-8 tiene un espacio de direcciones de 12 bits (0x000 a 0xFFF = 4096 bytes):

- 0x000 - 0x1FF: Reservado para el intérprete (COSMAC VIP). Aquí guardamos la fuente
  hexadecimal (16 glifos de 5 bytes en 0x000 - 0x04F).
- 0x200 - 0xFFF: Programa (ROM) y datos del programa.

A diferencia de otras máquinas, no hay regiones mapeadas a periféricos: la pantalla,
el teclado y los temporizadores viven fuera de la RAM.

Política de direcciones fuera de rango: toda dirección se enmascara a 12 bits
(addr & 0xFFF). Un acceso indirecto I+n que pase de 0xFFF continúa en 0x000.
Así ninguna instrucción puede escribir fuera de los 4096 bytes.

CRÍTICO: Las instrucciones son Big-Endian (byte alto en la dirección más baja).

Fuente: Cowgod's Chip-8 Technical Reference - 2.1 Memory, 2.4 Display
"""

from __future__ import annotations

import logging

from ..errors import RomTooLargeError

logger = logging.getLogger(__name__)

# Tamaño total del espacio de direcciones (12 bits = 4096 bytes)
MEMORY_SIZE = 0x1000
ADDRESS_MASK = 0xFFF

# Los programas se cargan a partir de 0x200
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START  # 3584 bytes

# Fuente hexadecimal (0-F): cada glifo es de 4x5 píxeles, 5 bytes por glifo.
# Solo se usan los 4 bits altos de cada byte.
FONT_START = 0x000
FONT_GLYPH_SIZE = 5
FONT_SPRITES = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def font_address(digit: int) -> int:
    """Devuelve la dirección del glifo para el dígito hexadecimal (0x0-0xF)."""
    return FONT_START + (digit & 0x0F) * FONT_GLYPH_SIZE


class MMU:
    """
    Memoria de 4096 bytes del CHIP-8.
    
    Proporciona lectura/escritura de bytes y lectura de palabras de 16 bits
    (Big-Endian) con las direcciones siempre enmascaradas a 12 bits.
    """

    MEMORY_SIZE = MEMORY_SIZE

    def __init__(self) -> None:
        """
        Inicializa la memoria a cero y siembra la fuente en 0x000 - 0x04F.
        """
        self._memory: bytearray = bytearray(MEMORY_SIZE)
        self._load_font()

    def reset(self) -> None:
        """Borra toda la memoria y vuelve a sembrar la fuente."""
        self._memory[:] = bytes(MEMORY_SIZE)
        self._load_font()
        logger.debug("MMU reseteada (fuente en 0x000-0x04F)")

    def _load_font(self) -> None:
        end = FONT_START + len(FONT_SPRITES)
        self._memory[FONT_START:end] = FONT_SPRITES

    def read_byte(self, addr: int) -> int:
        """
        Lee un byte de la dirección especificada.
        
        Args:
            addr: Dirección de memoria (se enmascara a 12 bits)
            
        Returns:
            Valor del byte leído (0x00 a 0xFF)
        """
        return self._memory[addr & ADDRESS_MASK]

    def write_byte(self, addr: int, value: int) -> None:
        """
        Escribe un byte en la dirección especificada.
        
        Args:
            addr: Dirección de memoria (se enmascara a 12 bits)
            value: Valor a escribir (se enmascara a 8 bits)
        """
        self._memory[addr & ADDRESS_MASK] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """
        Lee una palabra de 16 bits en formato Big-Endian.
        
        El byte en addr es el MSB y el byte en addr+1 es el LSB.
        Si addr es 0xFFF, el LSB se lee de 0x000 (wrap-around).
        
        Returns:
            Palabra de 16 bits (0x0000 a 0xFFFF)
        """
        msb = self.read_byte(addr)
        lsb = self.read_byte(addr + 1)
        return (msb << 8) | lsb

    def read_block(self, addr: int, length: int) -> bytes:
        """Lee length bytes consecutivos a partir de addr (con wrap-around)."""
        return bytes(self.read_byte(addr + offset) for offset in range(length))

    def load_program(self, data: bytes | bytearray, start: int = PROGRAM_START) -> None:
        """
        Copia una imagen de programa en memoria a partir de start (0x200 por defecto).
        
        La validación se hace ANTES de tocar la memoria: si la imagen no cabe,
        la memoria queda intacta.
        
        Args:
            data: Bytes del programa, cargados tal cual (sin cabecera)
            start: Dirección de carga
            
        Raises:
            RomTooLargeError: Si la imagen no cabe entre start y 0xFFF
        """
        capacity = MEMORY_SIZE - start
        if len(data) > capacity:
            raise RomTooLargeError(len(data), capacity)
        
        self._memory[start:start + len(data)] = data
        logger.debug(f"Programa cargado en 0x{start:03X} ({len(data)} bytes)")

    def dump(self) -> bytes:
        """Copia inmutable de toda la memoria (para tests y depuración)."""
        return bytes(self._memory)
