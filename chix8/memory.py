"""Memory layout checks for instructions that address memory through I or PC."""

from chix8.constants import MEMORY_SIZE, PROGRAM_START
from chix8.errors import BoundsError


def check_read(address: int, length: int = 1) -> None:
    """Raise BoundsError unless [address, address + length) lies inside memory."""
    address = int(address)
    if length > 0 and (address < 0 or address + length > MEMORY_SIZE):
        raise BoundsError(f"Read of {length} byte(s) at ${address:04X} outside memory")


def check_write(address: int, length: int = 1) -> None:
    """Raise BoundsError unless [address, address + length) lies inside program memory."""
    address = int(address)
    check_read(address, length)
    if length > 0 and address < PROGRAM_START:
        raise BoundsError(f"Write of {length} byte(s) at ${address:04X} into reserved memory")
