"""
Rom - Carga de imágenes de programa CHIP-8

Los programas CHIP-8 se distribuyen como archivos binarios (`.ch8`, `.c8`, `.rom`)
sin cabecera ni metadatos: los bytes se copian tal cual a partir de 0x200.

La única validación posible es de tamaño:
- Una ROM vacía no es un programa.
- Una ROM mayor de 3584 bytes (4096 - 0x200) no cabe en memoria y se rechaza
  en lugar de truncarla.

Como no hay cabecera, la información que exponemos se deriva del archivo
(nombre, tamaño) y de la primera instrucción.

Fuente: Cowgod's Chip-8 Technical Reference - 2.1 Memory
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import RomTooLargeError
from .mmu import MAX_PROGRAM_SIZE

logger = logging.getLogger(__name__)


class Rom:
    """
    Imagen ROM de un programa CHIP-8 cargada desde disco.
    
    Valida el tamaño al construirse, de modo que una instancia de Rom siempre
    es cargable en la memoria de la máquina.
    """

    def __init__(self, rom_path: str | Path) -> None:
        """
        Carga la ROM desde el archivo especificado.
        
        Args:
            rom_path: Ruta al archivo ROM
            
        Raises:
            FileNotFoundError: Si el archivo no existe
            IOError: Si hay un error al leer el archivo
            ValueError: Si el archivo está vacío
            RomTooLargeError: Si la ROM no cabe en memoria
        """
        # Convertir a Path para portabilidad (Windows/Linux/macOS)
        path = Path(rom_path)
        
        if not path.exists():
            raise FileNotFoundError(f"ROM no encontrada: {rom_path}")
        
        try:
            with open(path, "rb") as f:
                data = f.read()
        except IOError as e:
            raise IOError(f"Error al leer ROM: {rom_path}") from e
        
        if not data:
            raise ValueError(f"ROM vacía: {rom_path}")
        
        if len(data) > MAX_PROGRAM_SIZE:
            raise RomTooLargeError(len(data), MAX_PROGRAM_SIZE)
        
        self._path = path
        self._data = bytes(data)
        
        logger.info(f"ROM cargada: {path.name} ({len(self._data)} bytes)")

    @property
    def data(self) -> bytes:
        """Bytes de la ROM (inmutables)."""
        return self._data

    @property
    def name(self) -> str:
        return self._path.stem

    def get_rom_size(self) -> int:
        """
        Devuelve el tamaño total de la ROM en bytes.
        
        Returns:
            Tamaño de la ROM en bytes
        """
        return len(self._data)

    def get_info(self) -> dict[str, str | int]:
        """
        Devuelve un diccionario con la información de la ROM.
        
        Returns:
            Diccionario con:
            - 'title': Nombre del archivo sin extensión
            - 'size': Tamaño en bytes
            - 'free': Bytes libres que quedan en memoria tras cargarla
            - 'entry_opcode': Primera instrucción (hex string, ej: '0x00E0')
        """
        entry = self._data[0] << 8
        if len(self._data) > 1:
            entry |= self._data[1]
        
        return {
            "title": self.name,
            "size": len(self._data),
            "free": MAX_PROGRAM_SIZE - len(self._data),
            "entry_opcode": f"0x{entry:04X}",
        }
