"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.constants import FONT_START, FONT_GLYPH_SIZE, NUM_REGISTERS
from chix8.memory import check_read, check_write


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register (VF unaffected)."""
    return state.replace(I=jnp.astype(state.I + jnp.astype(state.V[instruction.x], jnp.uint16), jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Enters the awaiting-key sub-state and leaves PC on this instruction; the
    engine completes it once a key goes from released to pressed.
    """
    return state.replace(
        pc=state.pc - 2,
        waiting_for_key=jnp.ones((), dtype=jnp.bool_),
        wait_register=jnp.asarray(instruction.x, dtype=jnp.uint8),
        key_snapshot=state.keypad,
    )


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=FONT_START + digit * FONT_GLYPH_SIZE)


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    check_write(state.I, 3)
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + state.I
    return state.replace(memory=state.memory.at[indices].set(digits))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    count = instruction.x + 1
    check_write(state.I, count)
    new_memory = state.memory.at[state.I + jnp.arange(count)].set(state.V[:count])

    if state.quirks.load_store_increments_index:
        return state.replace(memory=new_memory, I=state.I + count)
    return state.replace(memory=new_memory)


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    count = instruction.x + 1
    check_read(state.I, count)
    register_mask = jnp.arange(NUM_REGISTERS) < count
    loaded = state.memory[jnp.clip(state.I + jnp.arange(NUM_REGISTERS), 0, state.memory.shape[0] - 1)]
    new_V = jnp.where(register_mask, loaded, state.V)

    if state.quirks.load_store_increments_index:
        return state.replace(V=new_V, I=state.I + count)
    return state.replace(V=new_V)
