"""
Módulo CPU - Intérprete de instrucciones CHIP-8
"""

from .core import CPU, StepResult
from .instruction import Instruction, decode
from .registers import Registers

__all__ = ["CPU", "Instruction", "Registers", "StepResult", "decode"]
