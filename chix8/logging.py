"""Console logging utilities for chix8 runs.

This module provides a level-filtered console logger, an emulator-specific
logger that knows how to report ROM loads, instruction traces, fatal errors and
run summaries, and a tqdm progress bar for headless runs.
"""

import sys
import time
from typing import Any, Dict, Optional

from tqdm import tqdm

from chix8.decode import disassemble
from chix8.errors import Chip8Error, ExecutionError


class ConsoleLogger:
    """Flexible console logger with level filtering, colors and timestamps."""

    def __init__(
        self,
        name: str = "chix8",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }
        if self.log_level not in self.level_order:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(self.level_order.keys())}"
            )

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)


class ExecutionLogger(ConsoleLogger):
    """Logger for emulator runs with instruction tracing and run statistics."""

    def __init__(self, name: str = "chix8", **kwargs):
        super().__init__(name, **kwargs)
        self.instructions = 0
        self.frames = 0

    @property
    def tracing(self) -> bool:
        """Whether per-instruction trace lines are emitted."""
        return self._should_log("DEBUG")

    def log_config(self, config: Dict[str, Any]):
        self.debug("Configuration:")
        for key, value in config.items():
            self.debug(f"  {key}: {value}")

    def log_rom_loaded(self, filename: str, size: int):
        self.info(f"Loaded {filename} ({size} bytes)")

    def log_instruction(self, address: int, opcode: int):
        """Trace one executed instruction, e.g. ``$0200: 6005  LD V0, 0x05``."""
        if self.tracing:
            self.debug(f"${address:04X}: {opcode:04X}  {disassemble(opcode)}")

    def log_frame(self, instructions: int):
        self.frames += 1
        self.instructions += instructions

    def log_fatal(self, error: Chip8Error):
        """Report a fatal error, with the disassembled opcode when known."""
        message = str(error)
        if isinstance(error, ExecutionError) and error.opcode is not None:
            message = f"{message} ({disassemble(error.opcode)})"
        self.critical(f"{type(error).__name__}: {message}")

    def log_summary(self):
        elapsed = time.time() - self.start_time
        rate = self.instructions / elapsed if elapsed > 0 else 0.0
        self.info(
            f"Ran {self.instructions} instructions over {self.frames} frames "
            f"in {elapsed:.1f}s ({rate:.0f} Hz)"
        )


def build_progress_bar(n: int, desc: Optional[str] = None, **kwargs) -> tqdm:
    """Build a tqdm progress bar over ``n`` emulated frames."""
    if desc is None:
        desc = f"Emulating ({n:,} frames)"

    for kwarg in ("total", "unit"):
        kwargs.pop(kwarg, None)

    return tqdm(total=n, desc=desc, unit="frame", **kwargs)
