"""
Registros de la CPU CHIP-8

El CHIP-8 tiene:
- 16 registros de propósito general de 8 bits: V0 a VF
- Registro índice I de 16 bits (solo se usan los 12 bits bajos para direccionar)
- PC (Program Counter) de 16 bits, inicializado a 0x200
- SP (Stack Pointer) y una pila de 16 direcciones de retorno de 16 bits

Peculiaridad: VF es a la vez un registro de propósito general y el flag implícito
de acarreo / préstamo / colisión. Las instrucciones que escriben el flag pisan
cualquier valor previo de VF sin aviso. NO es un bug: es la semántica del CHIP-8.
Por eso VF se almacena exactamente igual que el resto de registros V.

Fuente: Cowgod's Chip-8 Technical Reference - 2.2 Registers
"""

from __future__ import annotations

# Número de registros V y de entradas de la pila
NUM_V_REGISTERS = 16
STACK_SIZE = 16

# Índice del registro de flags
VF = 0xF

# SP máximo: CALL pre-incrementa SP y la entrada 0 nunca se usa,
# así que caben 15 llamadas anidadas (SP = 1..15)
MAX_SP = STACK_SIZE - 1

# Dirección de inicio de los programas
PC_START = 0x200


class Registers:
    """
    Banco de registros de la CPU CHIP-8.
    
    Todas las escrituras aplican wrap-around al ancho del registro.
    """

    def __init__(self) -> None:
        """
        Inicializa todos los registros a su estado de arranque.
        
        - V0-VF = 0
        - I = 0
        - PC = 0x200 (inicio del programa)
        - SP = 0 (pila vacía)
        """
        self.v: list[int] = [0] * NUM_V_REGISTERS
        self.i: int = 0
        self.pc: int = PC_START
        self.sp: int = 0
        self.stack: list[int] = [0] * STACK_SIZE

    def reset(self) -> None:
        """Devuelve todos los registros y la pila al estado de arranque."""
        self.v = [0] * NUM_V_REGISTERS
        self.i = 0
        self.pc = PC_START
        self.sp = 0
        self.stack = [0] * STACK_SIZE

    # ========== Registros V (8 bits, con wrap-around) ==========

    def get_v(self, index: int) -> int:
        """Obtiene el registro Vx (x = 0x0-0xF)"""
        return self.v[index & 0x0F]

    def set_v(self, index: int, value: int) -> None:
        """Establece el registro Vx (8 bits, wrap-around)"""
        self.v[index & 0x0F] = value & 0xFF

    def get_vf(self) -> int:
        """Obtiene el registro VF (flag)"""
        return self.v[VF]

    def set_vf(self, flag: bool | int) -> None:
        """
        Establece VF como flag (1 o 0).
        
        Cualquier valor verdadero se normaliza a 1.
        """
        self.v[VF] = 1 if flag else 0

    # ========== Registros de 16 bits ==========

    def get_i(self) -> int:
        """Obtiene el registro índice I"""
        return self.i

    def set_i(self, value: int) -> None:
        """Establece el registro índice I (16 bits, wrap-around)"""
        self.i = value & 0xFFFF

    def get_pc(self) -> int:
        """Obtiene el Program Counter"""
        return self.pc

    def set_pc(self, value: int) -> None:
        """Establece el Program Counter (16 bits, wrap-around)"""
        self.pc = value & 0xFFFF

    def advance_pc(self, amount: int = 2) -> None:
        """Avanza el PC (2 = una instrucción, 4 = salto de la siguiente)"""
        self.pc = (self.pc + amount) & 0xFFFF

    def get_sp(self) -> int:
        """Obtiene el Stack Pointer"""
        return self.sp

    def __repr__(self) -> str:
        regs = " ".join(f"V{index:X}={value:02X}" for index, value in enumerate(self.v))
        return (
            f"Registers(PC=0x{self.pc:03X} I=0x{self.i:03X} SP={self.sp} {regs})"
        )
