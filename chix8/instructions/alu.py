"""CHIP-8 ALU operations (8xxx).

Every operation reads both operands before writing anything, writes the result
to VX and then writes VF, so ``8FY4`` leaves the carry (not the sum) in VF.
"""

from typing import Optional

import jax.numpy as jnp
from chix8.constants import FLAG_REGISTER
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction, Operation

AluResult = tuple[jnp.ndarray, Optional[jnp.ndarray]]


def _flag(condition) -> jnp.ndarray:
    return jnp.astype(condition, jnp.uint8)


def alu_set(vx: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.int32) + jnp.astype(vy, jnp.int32)
    return jnp.astype(result & 0xFF, jnp.uint8), _flag(result > 0xFF)


def alu_sub(vx: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    return vx - vy, _flag(vx >= vy)


def alu_subn(vx: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    return vy - vx, _flag(vy >= vx)


def alu_shift_right(source: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XY6 - Shift right, VF = bit shifted out."""
    return source >> 1, source & 1


def alu_shift_left(source: jnp.ndarray, vy: jnp.ndarray) -> AluResult:
    """8XYE - Shift left, VF = bit shifted out."""
    return jnp.astype((jnp.astype(source, jnp.int32) << 1) & 0xFF, jnp.uint8), source >> 7


ALU_OPERATIONS = {
    Operation.ALU_SET: alu_set,
    Operation.ALU_OR: alu_or,
    Operation.ALU_AND: alu_and,
    Operation.ALU_XOR: alu_xor,
    Operation.ALU_ADD: alu_add,
    Operation.ALU_SUB: alu_sub,
    Operation.ALU_SHIFT_RIGHT: alu_shift_right,
    Operation.ALU_SUBN: alu_subn,
    Operation.ALU_SHIFT_LEFT: alu_shift_left,
}

_LOGIC_OPERATIONS = (Operation.ALU_OR, Operation.ALU_AND, Operation.ALU_XOR)
_SHIFT_OPERATIONS = (Operation.ALU_SHIFT_RIGHT, Operation.ALU_SHIFT_LEFT)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]

    if instruction.operation in _SHIFT_OPERATIONS and state.quirks.shift_uses_vy:
        vx = vy

    result, vf = ALU_OPERATIONS[instruction.operation](vx, vy)

    if vf is None and state.quirks.vf_reset and instruction.operation in _LOGIC_OPERATIONS:
        vf = jnp.zeros((), dtype=jnp.uint8)

    new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
    if vf is not None:
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(vf, jnp.uint8))
    return state.replace(V=new_V)
