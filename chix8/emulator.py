"""Main CHIP-8 emulator execution engine."""

import enum
from typing import Callable, Iterable, Optional, Union

import jax.numpy as jnp
import numpy as np
from chex import dataclass

from chix8.state import EmulatorState
from chix8.decode import DecodedInstruction, Operation, decode
from chix8.constants import PROGRAM_START, MAX_ROM_SIZE, ADDRESS_MASK, NUM_KEYS
from chix8.errors import BoundsError, ExecutionError, RomLoadError
from chix8.instructions.system import execute_clear_screen, execute_return
from chix8.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chix8.instructions.alu import ALU_OPERATIONS, execute_alu_operation
from chix8.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chix8.instructions.display import execute_display
from chix8.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

Handler = Callable[[EmulatorState, DecodedInstruction], EmulatorState]

INSTRUCTION_TABLE: dict[Operation, Handler] = {
    Operation.CLEAR_SCREEN: execute_clear_screen,
    Operation.RETURN: execute_return,
    Operation.JUMP: execute_jump,
    Operation.CALL: execute_call,
    Operation.SKIP_EQ_IMMEDIATE: execute_skip_if_equal_immediate,
    Operation.SKIP_NE_IMMEDIATE: execute_skip_if_not_equal_immediate,
    Operation.SKIP_EQ_REGISTER: execute_skip_if_equal_register,
    Operation.SET_IMMEDIATE: execute_set,
    Operation.ADD_IMMEDIATE: execute_add,
    **{operation: execute_alu_operation for operation in ALU_OPERATIONS},
    Operation.SKIP_NE_REGISTER: execute_skip_if_not_equal_register,
    Operation.SET_INDEX: execute_set_index,
    Operation.JUMP_WITH_OFFSET: execute_jump_with_offset,
    Operation.RANDOM: execute_random,
    Operation.DRAW: execute_display,
    Operation.SKIP_IF_KEY: execute_skip_if_key,
    Operation.SKIP_IF_NOT_KEY: execute_skip_if_not_key,
    Operation.GET_DELAY_TIMER: execute_get_delay_timer,
    Operation.WAIT_FOR_KEY: execute_wait_for_key,
    Operation.SET_DELAY_TIMER: execute_set_delay_timer,
    Operation.SET_SOUND_TIMER: execute_set_sound_timer,
    Operation.ADD_TO_INDEX: execute_add_to_index,
    Operation.FONT_CHARACTER: execute_font_character,
    Operation.BCD: execute_bcd_conversion,
    Operation.STORE_REGISTERS: execute_store_registers,
    Operation.LOAD_REGISTERS: execute_load_registers,
}

DISPLAY_OPERATIONS = frozenset({Operation.CLEAR_SCREEN, Operation.DRAW})


class StepStatus(enum.Enum):
    EXECUTED = "executed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one ``step`` call.

    Attributes:
        status: EXECUTED, or BLOCKED while waiting for a key press
        address: PC at the start of the step
        opcode: Raw opcode at ``address``
        operation: Decoded operation, None when only the keypad was polled
        display_changed: Whether the display buffer may have changed
    """
    status: StepStatus
    address: int
    opcode: int
    operation: Optional[Operation] = None
    display_changed: bool = False


@dataclass(frozen=True)
class FrameResult:
    """Outcome of one ``run_frame`` call."""
    instructions: int
    blocked: bool
    display_changed: bool
    sound_active: bool


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory.

    Raises:
        BoundsError: If PC does not address a full two-byte opcode.
    """
    pc = int(state.pc)
    if pc + 1 > ADDRESS_MASK:
        raise BoundsError("Program counter outside memory", address=pc)
    instruction = _pack_u16(state.memory[pc], state.memory[pc + 1])
    return state.replace(pc=state.pc + 2), instruction


def _dispatch(state: EmulatorState, decoded: DecodedInstruction, address: Optional[int]) -> EmulatorState:
    try:
        return INSTRUCTION_TABLE[decoded.operation](state, decoded)
    except ExecutionError as e:
        if e.address is None:
            raise e.at(address, decoded.raw) from e
        raise


def execute(state: EmulatorState, instruction: int, address: Optional[int] = None) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    PC is expected to already point past the instruction, as after ``fetch``.

    Raises:
        DecodeError: If the opcode is not a canonical CHIP-8 instruction.
        BoundsError: If the instruction addresses memory outside its valid range.
        StackError: On call stack overflow or underflow.
    """
    return _dispatch(state, decode(instruction, address), address)


def poll_key(state: EmulatorState) -> tuple[EmulatorState, bool]:
    """Complete a pending FX0A if a key went from released to pressed since the last poll."""
    newly_pressed = state.keypad & ~state.key_snapshot
    if not bool(jnp.any(newly_pressed)):
        return state.replace(key_snapshot=state.keypad), False

    key = jnp.astype(jnp.argmax(newly_pressed), jnp.uint8)
    return state.replace(
        V=state.V.at[state.wait_register].set(key),
        pc=state.pc + 2,
        waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
        key_snapshot=jnp.zeros_like(state.key_snapshot),
    ), True


def step(state: EmulatorState) -> tuple[EmulatorState, StepResult]:
    """Run one fetch-decode-execute cycle.

    While an FX0A is pending the step only samples the keypad and reports
    BLOCKED until a key press completes the instruction.
    """
    address = int(state.pc)

    if bool(state.waiting_for_key):
        opcode = int(_pack_u16(state.memory[address], state.memory[address + 1]))
        state, pressed = poll_key(state)
        status = StepStatus.EXECUTED if pressed else StepStatus.BLOCKED
        return state, StepResult(status=status, address=address, opcode=opcode)

    state, instruction = fetch(state)
    opcode = int(instruction)
    decoded = decode(opcode, address)
    state = _dispatch(state, decoded, address)

    status = StepStatus.BLOCKED if bool(state.waiting_for_key) else StepStatus.EXECUTED
    return state, StepResult(
        status=status,
        address=address,
        opcode=opcode,
        operation=decoded.operation,
        display_changed=decoded.operation in DISPLAY_OPERATIONS,
    )


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers by one, floored at zero. Call at 60 Hz."""
    def _decrement(timer):
        return jnp.astype(jnp.where(timer > 0, timer - 1, 0), jnp.uint8)

    return state.replace(
        delay_timer=_decrement(state.delay_timer),
        sound_timer=_decrement(state.sound_timer),
    )


def run_frame(
    state: EmulatorState,
    instructions_per_frame: int,
    callback: Optional[Callable[[EmulatorState, StepResult], None]] = None,
) -> tuple[EmulatorState, FrameResult]:
    """Run one 60 Hz frame: up to ``instructions_per_frame`` steps, then one timer tick.

    Stepping stops early when the machine blocks on a key press; timers still tick.
    """
    executed = 0
    blocked = False
    display_changed = False

    for _ in range(instructions_per_frame):
        state, result = step(state)
        if callback is not None:
            callback(state, result)
        display_changed = display_changed or result.display_changed
        if result.status is StepStatus.BLOCKED:
            blocked = True
            break
        executed += 1

    state = tick_timers(state)
    return state, FrameResult(
        instructions=executed,
        blocked=blocked,
        display_changed=display_changed,
        sound_active=sound_active(state),
    )


def load_rom(state: EmulatorState, rom_data: Union[bytes, bytearray, Iterable[int]]) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    try:
        rom_array = np.frombuffer(bytes(rom_data), dtype=np.uint8)
    except (TypeError, ValueError) as e:
        raise RomLoadError(f"ROM data is not a byte sequence: {e}") from e
    if len(rom_array) > MAX_ROM_SIZE:
        raise RomLoadError(f"ROM is {len(rom_array)} bytes, at most {MAX_ROM_SIZE} fit in program memory")
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_array)].set(jnp.asarray(rom_array))
    return state.replace(memory=new_memory)


def load_rom_file(state: EmulatorState, filename: str) -> EmulatorState:
    """Read a ROM file and load it at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise RomLoadError(f"Cannot read ROM '{filename}': {e.strerror or e}") from e
    return load_rom(state, rom_data)


def set_keypad(state: EmulatorState, keys: Iterable[bool]) -> EmulatorState:
    """Replace the whole input latch."""
    keypad = jnp.asarray(list(keys), dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key states, got {keypad.shape[0]}")
    return state.replace(keypad=keypad)


def _check_key(key: int) -> int:
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in 0x0-0xF, got {key:#x}")
    return key


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(True))


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(False))


def sound_active(state: EmulatorState) -> bool:
    """Whether the audio adapter should be emitting tone."""
    return bool(state.sound_timer != 0)


def framebuffer(state: EmulatorState) -> np.ndarray:
    """Copy of the display as a (64, 32) boolean array indexed [x, y]."""
    return np.array(state.display, dtype=np.bool_)
