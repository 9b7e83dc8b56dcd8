"""
Configuración global de pytest para el intérprete CHIP-8

Este archivo configura el entorno de testing para evitar bloqueos:
- Configura pygame en modo headless (sin ventanas)
- Configura variables de entorno para tests
- Expone fixtures comunes (máquina con semilla fija)
"""

import os
import sys
from pathlib import Path

import pytest

# Agregar el directorio raíz al sys.path para importar módulos
project_root = Path(__file__).parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Configurar pygame en modo headless (sin ventanas) para evitar bloqueos
# Esto previene que los tests abran ventanas gráficas que bloqueen pytest
os.environ['SDL_VIDEODRIVER'] = 'dummy'
os.environ['SDL_AUDIODRIVER'] = 'dummy'
os.environ['PYGAME_HIDE_SUPPORT_PROMPT'] = '1'

# Configurar variables de entorno para tests
os.environ['CHIP8_HEADLESS'] = '1'

from chip8.machine import Machine  # noqa: E402


@pytest.fixture
def machine() -> Machine:
    """Máquina recién creada con semilla fija (RND determinista)."""
    return Machine(seed=1234)
