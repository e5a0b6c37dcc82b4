"""CHIP-8 display operations."""

import jax.numpy as jnp
from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction
from chix8.constants import SCREEN_WIDTH, SCREEN_HEIGHT, FLAG_REGISTER
from chix8.memory import check_read

SPRITE_WIDTH = 8

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(memory: jnp.ndarray, index: jnp.ndarray, x: jnp.ndarray, y: jnp.ndarray,
                height: int) -> jnp.ndarray:
    """Rasterize an 8xN sprite read from memory[index:] into a screen-sized mask.

    The sprite origin is expected to already lie on screen; pixels past the right
    or bottom edge are clipped.
    """
    col_offset = xx - jnp.astype(x, jnp.int32)
    row_offset = yy - jnp.astype(y, jnp.int32)
    in_sprite = (col_offset >= 0) & (col_offset < SPRITE_WIDTH) & (row_offset >= 0) & (row_offset < height)

    addresses = jnp.clip(jnp.astype(index, jnp.int32) + row_offset, 0, memory.shape[0] - 1)
    sprite_rows = jnp.astype(memory[addresses], jnp.int32)
    bits = (sprite_rows >> jnp.clip(SPRITE_WIDTH - 1 - col_offset, 0, SPRITE_WIDTH - 1)) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    check_read(state.I, instruction.n)

    sprite_x = state.V[instruction.x] % SCREEN_WIDTH
    sprite_y = state.V[instruction.y] % SCREEN_HEIGHT
    sprite = sprite_mask(state.memory, state.I, sprite_x, sprite_y, instruction.n)

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
