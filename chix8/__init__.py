"""CHIP-8 emulator package."""

from chix8.state import EmulatorState, Quirks, create_state
from chix8.emulator import (
    execute, fetch, step, tick_timers, run_frame, load_rom, load_rom_file,
    set_keypad, press_key, release_key, sound_active, framebuffer,
    StepStatus, StepResult, FrameResult,
)
from chix8.decode import DecodedInstruction, Operation, decode, disassemble
from chix8.errors import (
    Chip8Error, ConfigError, RomLoadError, ExecutionError, DecodeError,
    BoundsError, StackError, StackOverflowError, StackUnderflowError,
)
from chix8.constants import PROGRAM_START, FONT_START, SCREEN_WIDTH, SCREEN_HEIGHT, MAX_ROM_SIZE
from chix8.rendering import display_to_rgb, color_scheme

__all__ = [
    "EmulatorState",
    "Quirks",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "run_frame",
    "load_rom",
    "load_rom_file",
    "set_keypad",
    "press_key",
    "release_key",
    "sound_active",
    "framebuffer",
    "StepStatus",
    "StepResult",
    "FrameResult",
    "DecodedInstruction",
    "Operation",
    "decode",
    "disassemble",
    "Chip8Error",
    "ConfigError",
    "RomLoadError",
    "ExecutionError",
    "DecodeError",
    "BoundsError",
    "StackError",
    "StackOverflowError",
    "StackUnderflowError",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "MAX_ROM_SIZE",
    "display_to_rgb",
    "color_scheme",
]
