"""
Keypad - Teclado hexadecimal del CHIP-8

El CHIP-8 usa un teclado de 16 teclas (0x0-0xF) dispuesto así:

    1 2 3 C
    4 5 6 D
    7 8 9 E
    A 0 B F

El host entrega eventos discretos de tecla pulsada / soltada. El mapeo desde un
teclado físico a estas 16 teclas es responsabilidad del host (ver Emulator).

Las instrucciones consultan el teclado de dos formas:
- SKP / SKNP (Ex9E / ExA1): leen el estado actual (nivel) de una tecla.
- LD Vx, K (Fx0A): espera una PULSACIÓN. Para ello el teclado guarda un "latch":
  mientras la CPU está esperando, la primera tecla pulsada queda retenida hasta
  que la CPU la consume. Las pulsaciones anteriores a la espera no cuentan.

Fuente: Cowgod's Chip-8 Technical Reference - 2.3 Keyboard
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

NUM_KEYS = 16


class Keypad:
    """
    Estado de las 16 teclas del CHIP-8 más el latch de espera de tecla.
    """

    def __init__(self) -> None:
        # Estado de las teclas (True = pulsada, False = soltada)
        self._state: list[bool] = [False] * NUM_KEYS
        
        # Espera de tecla (Fx0A): solo se retienen pulsaciones mientras está armada
        self._armed: bool = False
        self._latched: int | None = None
        
        logger.debug("Keypad inicializado: todas las teclas soltadas")

    def reset(self) -> None:
        """Suelta todas las teclas y cancela cualquier espera pendiente."""
        self._state = [False] * NUM_KEYS
        self._armed = False
        self._latched = None

    def press(self, key: int) -> None:
        """
        Marca una tecla como pulsada (evento key-down).
        
        Si hay una espera armada y todavía no hay tecla retenida, esta pulsación
        queda retenida para la instrucción Fx0A.
        
        Args:
            key: Tecla CHIP-8 (0x0-0xF)
            
        Raises:
            ValueError: Si la tecla está fuera de rango
        """
        self._check_key(key)
        self._state[key] = True
        
        if self._armed and self._latched is None:
            self._latched = key
            logger.debug(f"Keypad: tecla 0x{key:X} retenida para LD Vx, K")
        
        logger.debug(f"Keypad: tecla 0x{key:X} pulsada")

    def release(self, key: int) -> None:
        """
        Marca una tecla como soltada (evento key-up).
        
        Args:
            key: Tecla CHIP-8 (0x0-0xF)
        """
        self._check_key(key)
        self._state[key] = False
        logger.debug(f"Keypad: tecla 0x{key:X} soltada")

    def is_pressed(self, key: int) -> bool:
        """
        Obtiene el estado actual de una tecla.
        
        Solo se usa el nibble bajo: SKP Vx con Vx = 0x1A consulta la tecla 0xA.
        """
        return self._state[key & 0x0F]

    def get_state(self) -> list[bool]:
        """Copia del estado de las 16 teclas."""
        return list(self._state)

    # ========== Espera de tecla (Fx0A) ==========

    def arm(self) -> None:
        """Empieza a retener la próxima pulsación (descarta retenciones previas)."""
        self._armed = True
        self._latched = None

    def take_latched(self) -> int | None:
        """
        Consume la tecla retenida, si la hay.
        
        Returns:
            La tecla retenida (y desarma la espera), o None si aún no hay ninguna
        """
        key = self._latched
        if key is not None:
            self._latched = None
            self._armed = False
        return key

    @staticmethod
    def _check_key(key: int) -> None:
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Tecla CHIP-8 fuera de rango: {key!r} (esperado 0x0-0xF)")
