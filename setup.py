"""
Setup script del intérprete CHIP-8.

Instala el paquete chip8 (núcleo + host Pygame) y el punto de entrada main.py.

Uso:
    pip install -e .            # instalación en modo desarrollo
    pip install -e ".[test]"    # con dependencias de tests (pytest)
"""

from setuptools import find_packages, setup

setup(
    name="chip8",
    version="0.1.0",
    description="Intérprete de la máquina virtual CHIP-8 (núcleo Python + host Pygame)",
    packages=find_packages(include=["chip8", "chip8.*"]),
    py_modules=["main"],
    python_requires=">=3.10",
    install_requires=[
        "pygame-ce",  # Ventana, teclado y reloj del host
        "numpy",      # Framebuffer -> surfarray
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "chip8=main:main",
        ],
    },
    zip_safe=False,
)
