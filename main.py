#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CHIP-8 - Intérprete de la máquina virtual CHIP-8
Punto de entrada principal del emulador
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Configurar encoding UTF-8 para Windows (permite mostrar emojis en consola)
if sys.platform == "win32":
    import io
    if sys.stdout is not None and hasattr(sys.stdout, 'buffer'):
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    if sys.stderr is not None and hasattr(sys.stderr, 'buffer'):
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')

from chip8.cpu.instruction import disassemble
from chip8.emulator import Emulator
from chip8.gpu.renderer import DEFAULT_SCALE
from chip8.memory.rom import Rom
from chip8.system_clock import DEFAULT_CPU_HZ

# Configurar logging básico
# ERROR: Solo errores fatales. Silencio total para máximo rendimiento.
logging.basicConfig(
    level=logging.ERROR,  # Solo errores fatales
    format="%(message)s",
    force=True,  # Forzar reconfiguración
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CHIP-8 - Intérprete educativo de la máquina virtual CHIP-8"
    )
    parser.add_argument(
        "rom",
        nargs="?",
        type=str,
        help="Ruta al archivo ROM (.ch8)",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=DEFAULT_SCALE,
        help=f"Factor de escala de la ventana (por defecto {DEFAULT_SCALE} = 640x320)",
    )
    parser.add_argument(
        "--cpu-hz",
        type=int,
        default=DEFAULT_CPU_HZ,
        help=f"Instrucciones por segundo (por defecto {DEFAULT_CPU_HZ})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Semilla para RND (ejecución determinista)",
    )
    parser.add_argument(
        "--disassemble",
        action="store_true",
        help="Mostrar el desensamblado de la ROM y salir (no abre ventana)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Activar modo debug con trazas detalladas de instrucciones",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Activar modo verbose (muestra mensajes INFO, incluyendo heartbeat)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Función principal del emulador"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Si se especifica --debug, cambiar nivel de logging
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.verbose:
        # Modo verbose: mostrar INFO (incluye heartbeat)
        logging.getLogger().setLevel(logging.INFO)

    print("CHIP-8 - Sistema Iniciado")
    print("=" * 50)

    # Si no se proporciona ROM, mostrar mensaje y salir
    if not args.rom:
        print("Error: Se requiere especificar una ROM")
        print("Uso: python main.py <ruta_a_rom.ch8> [--debug]")
        sys.exit(1)

    if args.scale <= 0:
        print(f"Error: --scale debe ser positivo (recibido {args.scale})")
        sys.exit(1)

    headless = os.environ.get("CHIP8_HEADLESS") == "1"

    try:
        # Modo desensamblador: no necesita ventana
        if args.disassemble:
            rom = Rom(args.rom)
            print(f"\n📦 {rom.name} ({rom.get_rom_size()} bytes)\n")
            for line in disassemble(rom.data):
                print(line)
            return

        # Verificar dependencias críticas antes de continuar
        if not headless:
            try:
                import pygame  # noqa: F401
            except ImportError:
                print("\n❌ ERROR: Pygame no está instalado.\n\nInstala con: pip install pygame-ce")
                sys.exit(1)

        emulator = Emulator(
            rom_path=args.rom,
            scale=args.scale,
            cpu_hz=args.cpu_hz,
            seed=args.seed,
            headless=headless,
        )
        emulator.verbose = args.verbose or args.debug

        # Obtener información de la ROM
        rom = emulator.get_rom()
        if rom is not None:
            info = rom.get_info()
            print(f"\n📦 ROM cargada:")
            print(f"   Título: {info['title']}")
            print(f"   Tamaño: {info['size']} bytes")
            print(f"   Libre: {info['free']} bytes")
            print(f"   Primer opcode: {info['entry_opcode']}")

        regs = emulator.get_machine().registers
        print(f"\n🖥️  CPU inicializada:")
        print(f"   PC = 0x{regs.get_pc():03X}")
        print(f"   SP = {regs.get_sp()}")
        print(f"   Velocidad = {args.cpu_hz} instrucciones/s")

        print("\n✅ Sistema listo para ejecutar")
        if args.debug:
            print("   Modo DEBUG activado - Mostrando trazas de instrucciones")
        elif args.verbose:
            print("   Modo VERBOSE activado - Mostrando heartbeat y mensajes INFO")
        print("   ESC cierra, F5 reinicia. Presiona Ctrl+C para detener\n")

        # Ejecutar bucle principal
        emulator.run()

    except (FileNotFoundError, IOError, ValueError) as e:
        print(f"\n❌ Error al cargar ROM: {e}")
        if args.debug or args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)
    except (NotImplementedError, RuntimeError) as e:
        print(f"\n❌ Error de ejecución: {e}")
        if args.debug or args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)
    except Exception as e:
        # Capturar TODAS las demás excepciones (ImportError, AttributeError, etc.)
        print(f"\n❌ Error inesperado: {e}")
        print("\nTraceback completo:")
        import traceback
        traceback.print_exc()
        print("\n💡 Sugerencias:")
        print("   - Ejecuta con --verbose para más información")
        print("   - Ejecuta con --debug para trazas detalladas")
        print("   - Verifica que todas las dependencias estén instaladas: pip install -e .")
        sys.exit(1)


if __name__ == "__main__":
    main()
