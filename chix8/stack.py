"""CHIP-8 stack operations."""

import jax.numpy as jnp

from chix8.constants import STACK_SIZE
from chix8.errors import StackOverflowError, StackUnderflowError
from chix8.state import StackState


def depth(stack: StackState) -> int:
    """Number of return addresses currently on the stack."""
    return int(stack.pointer)


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack.

    The address is stored as is; a return past the end of memory fails on the
    next fetch.
    """
    if depth(stack) >= STACK_SIZE:
        raise StackOverflowError(f"Call stack overflow (depth {STACK_SIZE})")
    new_data = stack.data.at[stack.pointer].set(jnp.astype(address, jnp.uint16))
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    if depth(stack) == 0:
        raise StackUnderflowError("Return with empty call stack")
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
