"""
Display - Framebuffer monocromo del CHIP-8

La pantalla del CHIP-8 es una rejilla de 64x32 píxeles de 1 bit (encendido/apagado).
Solo dos instrucciones la modifican:
- CLS (00E0): apaga todos los píxeles
- DRW (Dxyn): dibuja un sprite con XOR

Concepto de Sprite:
- Un sprite tiene 8 píxeles de ancho y n filas de alto (1 <= n <= 15).
- Cada fila es un byte: bit 7 = píxel más a la izquierda, bit 0 = más a la derecha.
- Los bits a 1 invierten (XOR) el píxel correspondiente de la pantalla.

Colisión:
- Si algún bit del sprite a 1 cae sobre un píxel que ya estaba encendido, ese píxel
  se apaga y se informa colisión (VF = 1). Es la forma en que los juegos detectan
  choques entre objetos.

Coordenadas:
- La pantalla es un toro: tanto el origen como cada píxel del sprite hacen
  wrap-around en ambos ejes (módulo 64 y módulo 32). No hay recorte.

Fuente: Cowgod's Chip-8 Technical Reference - 2.4 Display, Dxyn
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Dimensiones de la pantalla
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
SPRITE_WIDTH = 8


class Display:
    """
    Framebuffer de 64x32 píxeles.
    
    Internamente es un bytearray lineal (fila a fila): índice = y * 64 + x,
    con 1 = encendido y 0 = apagado.
    """

    WIDTH = DISPLAY_WIDTH
    HEIGHT = DISPLAY_HEIGHT

    def __init__(self) -> None:
        self._pixels: bytearray = bytearray(DISPLAY_WIDTH * DISPLAY_HEIGHT)
        # Se activa cada vez que cambia el framebuffer (el host decide cuándo redibujar)
        self.dirty: bool = True

    def clear(self) -> None:
        """Apaga todos los píxeles (CLS)."""
        self._pixels[:] = bytes(len(self._pixels))
        self.dirty = True

    def get_pixel(self, x: int, y: int) -> bool:
        """Devuelve el estado del píxel (x, y) con wrap-around."""
        return self._pixels[(y % DISPLAY_HEIGHT) * DISPLAY_WIDTH + (x % DISPLAY_WIDTH)] == 1

    def draw_sprite(self, x: int, y: int, sprite: bytes | bytearray) -> bool:
        """
        Dibuja un sprite con XOR en (x, y).
        
        Cada byte de sprite es una fila de 8 píxeles. Los bits a 0 no tocan la
        pantalla; los bits a 1 invierten el píxel.
        
        Args:
            x: Columna de origen (se aplica módulo 64)
            y: Fila de origen (se aplica módulo 32)
            sprite: Filas del sprite (un byte por fila)
            
        Returns:
            True si algún píxel encendido se apagó (colisión), False en caso contrario
        """
        pixels = self._pixels
        collision = False
        
        for row, sprite_byte in enumerate(sprite):
            if sprite_byte == 0:
                continue
            py = (y + row) % DISPLAY_HEIGHT
            row_base = py * DISPLAY_WIDTH
            
            for col in range(SPRITE_WIDTH):
                # Bit 7 = columna 0 (izquierda)
                if (sprite_byte >> (7 - col)) & 0x01 == 0:
                    continue
                index = row_base + (x + col) % DISPLAY_WIDTH
                # Colisión: el píxel estaba encendido y el bit del sprite lo apaga
                if pixels[index]:
                    collision = True
                pixels[index] ^= 1
        
        self.dirty = True
        return collision

    def framebuffer(self) -> list[list[bool]]:
        """
        Devuelve una copia del framebuffer como rejilla de booleanos.
        
        Returns:
            Lista de 32 filas, cada una con 64 booleanos (acceso frame[y][x])
        """
        return [
            [bool(value) for value in self._pixels[row * DISPLAY_WIDTH:(row + 1) * DISPLAY_WIDTH]]
            for row in range(DISPLAY_HEIGHT)
        ]

    def to_array(self) -> np.ndarray:
        """
        Devuelve una copia del framebuffer como array NumPy (32, 64) de uint8.
        
        Formato (y, x), con 1 = encendido. Es el formato que consume el Renderer.
        """
        return np.frombuffer(bytes(self._pixels), dtype=np.uint8).reshape(
            DISPLAY_HEIGHT, DISPLAY_WIDTH
        ).copy()

    def count_lit(self) -> int:
        """Número de píxeles encendidos (útil para tests y heartbeat)."""
        return sum(self._pixels)
