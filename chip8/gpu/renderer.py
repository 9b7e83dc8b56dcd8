"""
Renderer - Motor de Renderizado Gráfico

Este módulo se encarga de visualizar el framebuffer del CHIP-8 usando Pygame.

El núcleo entrega una rejilla de 64x32 píxeles de 1 bit. El renderer:
1. Convierte cada píxel en un color RGB (paleta de 2 colores)
2. Vuelca el array en una superficie nativa de 64x32 (pygame.surfarray)
3. Escala la superficie a la ventana (factor scale, 10 por defecto = 640x320)

La conversión de formato, el escalado y la elección de colores son cosa del host:
el núcleo nunca los hace.
"""

from __future__ import annotations

import logging

import numpy as np

try:
    import pygame
except ImportError:
    pygame = None  # type: ignore

from .display import DISPLAY_HEIGHT, DISPLAY_WIDTH

logger = logging.getLogger(__name__)

# Paleta por defecto: 0 = apagado, 1 = encendido
PALETTE_MONO = [
    (0, 0, 0),        # Apagado: Negro
    (255, 255, 255),  # Encendido: Blanco
]

DEFAULT_SCALE = 10
WINDOW_TITLE = "CHIP-8"


def frame_to_rgb(frame: np.ndarray, palette: list[tuple[int, int, int]] = PALETTE_MONO) -> np.ndarray:
    """
    Convierte un framebuffer (32, 64) de 0/1 en un array RGB (32, 64, 3).

    Args:
        frame: Array de uint8 con formato (y, x); cualquier valor distinto de 0 es "encendido"
        palette: Colores para apagado (índice 0) y encendido (índice 1)

    Returns:
        Array uint8 (32, 64, 3)
    """
    lut = np.array(palette, dtype=np.uint8)
    indices = (np.asarray(frame) != 0).astype(np.uint8)
    return lut[indices]


class Renderer:
    """
    Motor de renderizado gráfico usando Pygame.

    Mantiene una superficie nativa de 64x32 y la escala a la ventana en cada frame.
    """

    def __init__(self, scale: int = DEFAULT_SCALE, palette: list[tuple[int, int, int]] | None = None) -> None:
        """
        Inicializa el renderer con Pygame.

        Args:
            scale: Factor de escala para la ventana (p.ej. 10 = 640x320)
            palette: Colores (apagado, encendido). Por defecto blanco sobre negro.

        Raises:
            ImportError: Si pygame no está instalado
        """
        if pygame is None:
            raise ImportError(
                "Pygame no está instalado. Instala con: pip install pygame-ce"
            )

        self.scale = scale
        self.palette = list(palette) if palette is not None else list(PALETTE_MONO)

        # Dimensiones de la ventana (64x32 escalado)
        self.window_width = DISPLAY_WIDTH * scale
        self.window_height = DISPLAY_HEIGHT * scale

        # Inicializar Pygame
        pygame.init()

        # Crear ventana
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption(WINDOW_TITLE)

        # Framebuffer interno (64x32 píxeles, tamaño nativo del CHIP-8)
        # Se escribe con surfarray y luego se escala a la ventana
        self.buffer = pygame.Surface((DISPLAY_WIDTH, DISPLAY_HEIGHT))

        self.frames_rendered = 0

        logger.info(f"Renderer inicializado: {self.window_width}x{self.window_height} (scale={scale})")

    def render_frame(self, frame: np.ndarray) -> None:
        """
        Dibuja un framebuffer en la ventana.

        Args:
            frame: Array (32, 64) con formato (y, x), 1 = encendido
        """
        rgb_array = frame_to_rgb(frame, self.palette)

        # surfarray espera (width, height, channels), así que necesitamos (64, 32, 3)
        rgb_array_swapped = np.swapaxes(rgb_array, 0, 1)
        pygame.surfarray.blit_array(self.buffer, rgb_array_swapped)

        # Escalado con vecino más cercano (píxeles nítidos)
        scaled = pygame.transform.scale(self.buffer, (self.window_width, self.window_height))
        self.screen.blit(scaled, (0, 0))
        pygame.display.flip()

        self.frames_rendered += 1

    def set_caption(self, text: str) -> None:
        pygame.display.set_caption(text)

    def quit(self) -> None:
        """Cierra Pygame limpiamente."""
        if pygame is not None:
            pygame.quit()
            logger.info("Renderer cerrado")
