"""Headless host loop: runs a ROM for a fixed number of frames without a window."""

import os
from typing import Optional

import jax

from chix8.config import EmulatorConfig
from chix8.emulator import StepResult, load_rom_file, run_frame
from chix8.errors import Chip8Error
from chix8.logging import ExecutionLogger, build_progress_bar
from chix8.state import EmulatorState, create_state


def create_machine(
    rom_filename: str,
    config: EmulatorConfig,
    logger: Optional[ExecutionLogger] = None,
) -> EmulatorState:
    """Fresh machine with the ROM loaded, configured from ``config``."""
    state = create_state(jax.random.PRNGKey(config.seed), config.make_quirks())
    state = load_rom_file(state, rom_filename)
    if logger is not None:
        logger.log_rom_loaded(os.path.basename(rom_filename), os.path.getsize(rom_filename))
    return state


def run_headless(
    state: EmulatorState,
    frames: int,
    config: EmulatorConfig,
    logger: Optional[ExecutionLogger] = None,
    progress: bool = True,
) -> tuple[EmulatorState, Optional[Chip8Error]]:
    """Run ``frames`` frames as fast as possible.

    A fatal error halts the run; it is logged and returned together with the
    state of the last completed frame.

    Returns:
        Tuple of the final state and the fatal error, if any
    """
    if logger is None:
        logger = ExecutionLogger(log_level=config.log_level)

    def _trace(_: EmulatorState, result: StepResult):
        if result.operation is not None:
            logger.log_instruction(result.address, result.opcode)

    callback = _trace if logger.tracing else None
    bar = build_progress_bar(frames, disable=not progress)
    try:
        for _ in range(frames):
            try:
                state, frame = run_frame(state, config.instructions_per_frame, callback)
            except Chip8Error as e:
                logger.log_fatal(e)
                return state, e
            logger.log_frame(frame.instructions)
            bar.update(1)
    finally:
        bar.close()
    return state, None
