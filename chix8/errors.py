"""Fatal error types raised by the CHIP-8 engine and its adapters."""

from typing import Optional


class Chip8Error(Exception):
    """Base class for every error raised by chix8."""


class ConfigError(Chip8Error):
    """Invalid emulator configuration."""


class RomLoadError(Chip8Error):
    """ROM could not be read or does not fit in program memory."""


class ExecutionError(Chip8Error):
    """Fatal error raised while executing an instruction.

    Attributes:
        address: Address of the instruction that failed, when known
        opcode: Raw 16-bit opcode that failed, when known
    """

    def __init__(self, message: str, address: Optional[int] = None, opcode: Optional[int] = None):
        self.message = message
        self.address = address
        self.opcode = opcode
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = [self.message]
        if self.opcode is not None:
            parts.append(f"opcode=${self.opcode:04X}")
        if self.address is not None:
            parts.append(f"PC=${self.address:04X}")
        return " ".join(parts)

    def at(self, address: int, opcode: Optional[int]) -> "ExecutionError":
        """Return a copy of this error located at the given instruction."""
        return type(self)(self.message, address=address, opcode=opcode)


class DecodeError(ExecutionError):
    """Opcode does not map to any canonical CHIP-8 instruction."""

    def __init__(self, message: str = "Unsupported instruction", address: Optional[int] = None,
                 opcode: Optional[int] = None):
        super().__init__(message, address=address, opcode=opcode)


class BoundsError(ExecutionError):
    """Memory access outside the addressable or writable range."""


class StackError(ExecutionError):
    """Call stack misuse."""


class StackOverflowError(StackError):
    """CALL with a full call stack."""


class StackUnderflowError(StackError):
    """RET with an empty call stack."""
