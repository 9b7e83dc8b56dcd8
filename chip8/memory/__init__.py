"""
Módulo de gestión de memoria (MMU)

La MMU gestiona los 4096 bytes de RAM del CHIP-8 (0x000 a 0xFFF).
Incluye también la clase Rom para cargar imágenes de programa desde disco.
"""

from .mmu import MMU
from .rom import Rom

__all__ = ["MMU", "Rom"]
