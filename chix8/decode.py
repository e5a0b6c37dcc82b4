"""CHIP-8 instruction decoding."""

import enum
from typing import Optional

from chex import dataclass

from chix8.errors import DecodeError


class Operation(enum.Enum):
    """Canonical CHIP-8 instruction set, one member per semantic handler."""
    CLEAR_SCREEN = enum.auto()       # 00E0
    RETURN = enum.auto()             # 00EE
    JUMP = enum.auto()               # 1NNN
    CALL = enum.auto()               # 2NNN
    SKIP_EQ_IMMEDIATE = enum.auto()  # 3XNN
    SKIP_NE_IMMEDIATE = enum.auto()  # 4XNN
    SKIP_EQ_REGISTER = enum.auto()   # 5XY0
    SET_IMMEDIATE = enum.auto()      # 6XNN
    ADD_IMMEDIATE = enum.auto()      # 7XNN
    ALU_SET = enum.auto()            # 8XY0
    ALU_OR = enum.auto()             # 8XY1
    ALU_AND = enum.auto()            # 8XY2
    ALU_XOR = enum.auto()            # 8XY3
    ALU_ADD = enum.auto()            # 8XY4
    ALU_SUB = enum.auto()            # 8XY5
    ALU_SHIFT_RIGHT = enum.auto()    # 8XY6
    ALU_SUBN = enum.auto()           # 8XY7
    ALU_SHIFT_LEFT = enum.auto()     # 8XYE
    SKIP_NE_REGISTER = enum.auto()   # 9XY0
    SET_INDEX = enum.auto()          # ANNN
    JUMP_WITH_OFFSET = enum.auto()   # BNNN
    RANDOM = enum.auto()             # CXNN
    DRAW = enum.auto()               # DXYN
    SKIP_IF_KEY = enum.auto()        # EX9E
    SKIP_IF_NOT_KEY = enum.auto()    # EXA1
    GET_DELAY_TIMER = enum.auto()    # FX07
    WAIT_FOR_KEY = enum.auto()       # FX0A
    SET_DELAY_TIMER = enum.auto()    # FX15
    SET_SOUND_TIMER = enum.auto()    # FX18
    ADD_TO_INDEX = enum.auto()       # FX1E
    FONT_CHARACTER = enum.auto()     # FX29
    BCD = enum.auto()                # FX33
    STORE_REGISTERS = enum.auto()    # FX55
    LOAD_REGISTERS = enum.auto()     # FX65


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    operation: Operation
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)

    def disassemble(self) -> str:
        return DISASSEMBLY[self.operation].format(x=self.x, y=self.y, n=self.n, nn=self.nn, nnn=self.nnn)


# Families whose operation is fully determined by the top nibble
_SINGLE_OPERATION_FAMILIES = {
    0x1: Operation.JUMP,
    0x2: Operation.CALL,
    0x3: Operation.SKIP_EQ_IMMEDIATE,
    0x4: Operation.SKIP_NE_IMMEDIATE,
    0x6: Operation.SET_IMMEDIATE,
    0x7: Operation.ADD_IMMEDIATE,
    0xA: Operation.SET_INDEX,
    0xB: Operation.JUMP_WITH_OFFSET,
    0xC: Operation.RANDOM,
    0xD: Operation.DRAW,
}

_SYSTEM_OPERATIONS = {
    0x00E0: Operation.CLEAR_SCREEN,
    0x00EE: Operation.RETURN,
}

# 5XY0 and 9XY0 require a zero low nibble
_REGISTER_SKIP_OPERATIONS = {
    0x5: Operation.SKIP_EQ_REGISTER,
    0x9: Operation.SKIP_NE_REGISTER,
}

_ALU_OPERATIONS = {
    0x0: Operation.ALU_SET,
    0x1: Operation.ALU_OR,
    0x2: Operation.ALU_AND,
    0x3: Operation.ALU_XOR,
    0x4: Operation.ALU_ADD,
    0x5: Operation.ALU_SUB,
    0x6: Operation.ALU_SHIFT_RIGHT,
    0x7: Operation.ALU_SUBN,
    0xE: Operation.ALU_SHIFT_LEFT,
}

_KEY_OPERATIONS = {
    0x9E: Operation.SKIP_IF_KEY,
    0xA1: Operation.SKIP_IF_NOT_KEY,
}

_MISC_OPERATIONS = {
    0x07: Operation.GET_DELAY_TIMER,
    0x0A: Operation.WAIT_FOR_KEY,
    0x15: Operation.SET_DELAY_TIMER,
    0x18: Operation.SET_SOUND_TIMER,
    0x1E: Operation.ADD_TO_INDEX,
    0x29: Operation.FONT_CHARACTER,
    0x33: Operation.BCD,
    0x55: Operation.STORE_REGISTERS,
    0x65: Operation.LOAD_REGISTERS,
}

DISASSEMBLY = {
    Operation.CLEAR_SCREEN: "CLS",
    Operation.RETURN: "RET",
    Operation.JUMP: "JP 0x{nnn:03X}",
    Operation.CALL: "CALL 0x{nnn:03X}",
    Operation.SKIP_EQ_IMMEDIATE: "SE V{x:X}, 0x{nn:02X}",
    Operation.SKIP_NE_IMMEDIATE: "SNE V{x:X}, 0x{nn:02X}",
    Operation.SKIP_EQ_REGISTER: "SE V{x:X}, V{y:X}",
    Operation.SET_IMMEDIATE: "LD V{x:X}, 0x{nn:02X}",
    Operation.ADD_IMMEDIATE: "ADD V{x:X}, 0x{nn:02X}",
    Operation.ALU_SET: "LD V{x:X}, V{y:X}",
    Operation.ALU_OR: "OR V{x:X}, V{y:X}",
    Operation.ALU_AND: "AND V{x:X}, V{y:X}",
    Operation.ALU_XOR: "XOR V{x:X}, V{y:X}",
    Operation.ALU_ADD: "ADD V{x:X}, V{y:X}",
    Operation.ALU_SUB: "SUB V{x:X}, V{y:X}",
    Operation.ALU_SHIFT_RIGHT: "SHR V{x:X}, V{y:X}",
    Operation.ALU_SUBN: "SUBN V{x:X}, V{y:X}",
    Operation.ALU_SHIFT_LEFT: "SHL V{x:X}, V{y:X}",
    Operation.SKIP_NE_REGISTER: "SNE V{x:X}, V{y:X}",
    Operation.SET_INDEX: "LD I, 0x{nnn:03X}",
    Operation.JUMP_WITH_OFFSET: "JP V0, 0x{nnn:03X}",
    Operation.RANDOM: "RND V{x:X}, 0x{nn:02X}",
    Operation.DRAW: "DRW V{x:X}, V{y:X}, {n}",
    Operation.SKIP_IF_KEY: "SKP V{x:X}",
    Operation.SKIP_IF_NOT_KEY: "SKNP V{x:X}",
    Operation.GET_DELAY_TIMER: "LD V{x:X}, DT",
    Operation.WAIT_FOR_KEY: "LD V{x:X}, K",
    Operation.SET_DELAY_TIMER: "LD DT, V{x:X}",
    Operation.SET_SOUND_TIMER: "LD ST, V{x:X}",
    Operation.ADD_TO_INDEX: "ADD I, V{x:X}",
    Operation.FONT_CHARACTER: "LD F, V{x:X}",
    Operation.BCD: "LD B, V{x:X}",
    Operation.STORE_REGISTERS: "LD [I], V{x:X}",
    Operation.LOAD_REGISTERS: "LD V{x:X}, [I]",
}


def _lookup_operation(instruction: int) -> Optional[Operation]:
    family = (instruction & 0xF000) >> 12
    n = instruction & 0x000F
    nn = instruction & 0x00FF

    if family in _SINGLE_OPERATION_FAMILIES:
        return _SINGLE_OPERATION_FAMILIES[family]
    if family == 0x0:
        return _SYSTEM_OPERATIONS.get(instruction)
    if family in _REGISTER_SKIP_OPERATIONS:
        return _REGISTER_SKIP_OPERATIONS[family] if n == 0 else None
    if family == 0x8:
        return _ALU_OPERATIONS.get(n)
    if family == 0xE:
        return _KEY_OPERATIONS.get(nn)
    return _MISC_OPERATIONS.get(nn)


def decode(instruction: int, address: Optional[int] = None) -> DecodedInstruction:
    """Decode 16-bit instruction into components.

    Raises:
        DecodeError: If the opcode is not part of the canonical instruction set
            (including 0NNN machine code calls).
    """
    instruction = int(instruction) & 0xFFFF
    operation = _lookup_operation(instruction)
    if operation is None:
        raise DecodeError(address=address, opcode=instruction)

    return DecodedInstruction(
        raw=instruction,
        operation=operation,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def disassemble(instruction: int) -> str:
    """Return assembly text for an opcode, or a data directive if it does not decode."""
    try:
        return decode(instruction).disassemble()
    except DecodeError:
        return f"DW 0x{int(instruction) & 0xFFFF:04X}"
