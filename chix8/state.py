"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chix8.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)


@dataclass(frozen=True)
class Quirks:
    """Historical behaviors on which CHIP-8 interpreters disagree.

    Attributes:
        shift_uses_vy: 8XY6/8XYE shift VY into VX instead of shifting VX in place
        load_store_increments_index: FX55/FX65 leave I pointing past the last register
        jump_uses_vx: BNNN jumps to NNN + VX (X = high nibble of NNN) instead of NNN + V0
        vf_reset: 8XY1/8XY2/8XY3 reset VF to 0
    """
    shift_uses_vy: bool = field(pytree_node=False, default=False)
    load_store_increments_index: bool = field(pytree_node=False, default=False)
    jump_uses_vx: bool = field(pytree_node=False, default=False)
    vf_reset: bool = field(pytree_node=False, default=False)

    @classmethod
    def modern(cls) -> "Quirks":
        """Behavior expected by most ROMs written after the 1990s."""
        return cls()

    @classmethod
    def cosmac(cls) -> "Quirks":
        """Behavior of the original COSMAC VIP interpreter."""
        return cls(shift_uses_vy=True, load_store_increments_index=True, vf_reset=True)

    @classmethod
    def from_name(cls, name: str) -> "Quirks":
        presets = {"modern": cls.modern, "cosmac": cls.cosmac}
        if name not in presets:
            raise ValueError(f"Unknown quirks preset '{name}'. Available: {list(presets.keys())}")
        return presets[name]()


@dataclass(frozen=True)
class StackState:
    """Call stack holding return addresses."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The whole machine lives in one immutable pytree; every instruction returns a
    new state through ``replace``.
    """
    rng: jax.Array
    memory: jnp.ndarray
    pc: jnp.ndarray
    display: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    # FX0A sub-state: register to receive the key and latch seen on the previous poll
    waiting_for_key: jnp.ndarray
    wait_register: jnp.ndarray
    key_snapshot: jnp.ndarray
    quirks: Quirks = field(pytree_node=False, default=Quirks())


def create_stack() -> StackState:
    return StackState(
        data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
        pointer=jnp.zeros((), dtype=jnp.uint8),
    )


def create_state(rng: jax.Array = jax.random.PRNGKey(0), quirks: Quirks = Quirks()) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(jnp.asarray(FONT_DATA))
    return EmulatorState(
        rng=rng,
        memory=memory,
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_),
        stack=create_stack(),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
        wait_register=jnp.zeros((), dtype=jnp.uint8),
        key_snapshot=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        quirks=quirks,
    )
