"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chix8.constants import NUM_KEYS
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.stack import push


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


def _key_pressed(state: EmulatorState, inst: DecodedInstruction) -> jnp.ndarray:
    # Register values above 0xF name no key and are never pressed
    key = state.V[inst.x]
    return (key < NUM_KEYS) & state.keypad[key & 0xF]


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

execute_skip_if_key = make_skip_instruction(_key_pressed)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: ~_key_pressed(state, inst)
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0 (NNN + VX with the jump_uses_vx quirk).

    The target is not masked: a jump past the end of memory surfaces as a bounds
    error on the next fetch.
    """
    offset_register = instruction.x if state.quirks.jump_uses_vx else 0
    jump_address = instruction.nnn + jnp.astype(state.V[offset_register], jnp.uint16)
    return state.replace(pc=jump_address)
