"""
Instruction - Decodificación de instrucciones CHIP-8

Cada instrucción ocupa 16 bits (Big-Endian). Los campos se extraen siempre de la
misma forma, independientemente del opcode:

    nnn: 12 bits bajos (dirección)
    x:   bits 8-11 (índice de registro)
    y:   bits 4-7 (índice de registro)
    kk:  8 bits bajos (byte inmediato)
    n:   4 bits bajos (nibble, altura del sprite)

El nibble alto (bits 12-15) identifica la clase de operación (0x0-0xF). Las clases
0x0, 0x8, 0xE y 0xF se subdividen por el byte bajo o el nibble bajo.

Este módulo también formatea mnemónicos (estilo Cowgod) para las trazas de debug.

Fuente: Cowgod's Chip-8 Technical Reference - 3.0 Instructions
"""

from __future__ import annotations


class Instruction:
    """
    Instrucción de 16 bits decodificada en sus campos.
    
    Es inmutable en la práctica: los campos se calculan una vez en __init__.
    """

    __slots__ = ("opcode", "op_class", "nnn", "x", "y", "kk", "n")

    def __init__(self, opcode: int) -> None:
        opcode &= 0xFFFF
        self.opcode = opcode
        self.op_class = (opcode >> 12) & 0x0F
        self.nnn = opcode & 0x0FFF
        self.x = (opcode >> 8) & 0x0F
        self.y = (opcode >> 4) & 0x0F
        self.kk = opcode & 0x00FF
        self.n = opcode & 0x000F

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Instruction):
            return NotImplemented
        return self.opcode == other.opcode

    def __hash__(self) -> int:
        return hash(self.opcode)

    def __repr__(self) -> str:
        return f"Instruction(0x{self.opcode:04X} {self.mnemonic()})"

    def mnemonic(self) -> str:
        """
        Devuelve el mnemónico de la instrucción.
        
        Las codificaciones desconocidas se muestran como datos: "DW 0xABCD".
        """
        x, y, kk, nnn, n = self.x, self.y, self.kk, self.nnn, self.n
        op_class = self.op_class
        
        if op_class == 0x0:
            if self.opcode == 0x00E0:
                return "CLS"
            if self.opcode == 0x00EE:
                return "RET"
            return f"SYS 0x{nnn:03X}"
        if op_class == 0x1:
            return f"JP 0x{nnn:03X}"
        if op_class == 0x2:
            return f"CALL 0x{nnn:03X}"
        if op_class == 0x3:
            return f"SE V{x:X}, 0x{kk:02X}"
        if op_class == 0x4:
            return f"SNE V{x:X}, 0x{kk:02X}"
        if op_class == 0x5 and n == 0x0:
            return f"SE V{x:X}, V{y:X}"
        if op_class == 0x6:
            return f"LD V{x:X}, 0x{kk:02X}"
        if op_class == 0x7:
            return f"ADD V{x:X}, 0x{kk:02X}"
        if op_class == 0x8:
            alu = ALU_MNEMONICS.get(n)
            if alu is not None:
                if n in (0x6, 0xE):
                    return f"{alu} V{x:X}"
                return f"{alu} V{x:X}, V{y:X}"
        if op_class == 0x9 and n == 0x0:
            return f"SNE V{x:X}, V{y:X}"
        if op_class == 0xA:
            return f"LD I, 0x{nnn:03X}"
        if op_class == 0xB:
            return f"JP V0, 0x{nnn:03X}"
        if op_class == 0xC:
            return f"RND V{x:X}, 0x{kk:02X}"
        if op_class == 0xD:
            return f"DRW V{x:X}, V{y:X}, {n}"
        if op_class == 0xE:
            if kk == 0x9E:
                return f"SKP V{x:X}"
            if kk == 0xA1:
                return f"SKNP V{x:X}"
        if op_class == 0xF:
            template = MISC_MNEMONICS.get(kk)
            if template is not None:
                return template.format(x=x)
        
        return f"DW 0x{self.opcode:04X}"


# Subclase 0x8xyN: operaciones de registro a registro
ALU_MNEMONICS: dict[int, str] = {
    0x0: "LD",
    0x1: "OR",
    0x2: "AND",
    0x3: "XOR",
    0x4: "ADD",
    0x5: "SUB",
    0x6: "SHR",
    0x7: "SUBN",
    0xE: "SHL",
}

# Subclase 0xFxKK: temporizadores, teclado, índice y memoria
MISC_MNEMONICS: dict[int, str] = {
    0x07: "LD V{x:X}, DT",
    0x0A: "LD V{x:X}, K",
    0x15: "LD DT, V{x:X}",
    0x18: "LD ST, V{x:X}",
    0x1E: "ADD I, V{x:X}",
    0x29: "LD F, V{x:X}",
    0x33: "LD B, V{x:X}",
    0x55: "LD [I], V{x:X}",
    0x65: "LD V{x:X}, [I]",
}


def decode(opcode: int) -> Instruction:
    """Decodifica una palabra de 16 bits en una Instruction."""
    return Instruction(opcode)


def disassemble(program: bytes | bytearray, start: int = 0x200) -> list[str]:
    """
    Desensambla una imagen de programa en líneas "ADDR: OPCODE  MNEMONIC".
    
    Un byte final suelto (longitud impar) se muestra como DB.
    """
    lines: list[str] = []
    for offset in range(0, len(program) - 1, 2):
        instruction = decode((program[offset] << 8) | program[offset + 1])
        lines.append(
            f"{start + offset:03X}: {instruction.opcode:04X}  {instruction.mnemonic()}"
        )
    if len(program) % 2:
        lines.append(f"{start + len(program) - 1:03X}: {program[-1]:02X}    DB 0x{program[-1]:02X}")
    return lines
