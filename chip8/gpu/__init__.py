"""
GPU - Pantalla y renderizado

Este módulo contiene los componentes relacionados con la pantalla del CHIP-8:
- Display: Framebuffer de 64x32 píxeles (CLS y dibujo de sprites con XOR)
- Renderer: Motor de visualización usando Pygame (lanza ImportError al
  instanciarse si pygame no está instalado)
"""

from .display import DISPLAY_HEIGHT, DISPLAY_WIDTH, Display
from .renderer import Renderer, frame_to_rgb

__all__ = ["DISPLAY_HEIGHT", "DISPLAY_WIDTH", "Display", "Renderer", "frame_to_rgb"]
