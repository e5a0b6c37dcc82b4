"""Host keyboard to CHIP-8 keypad mapping.

The COSMAC VIP keypad::

    1 2 3 C        1 2 3 4
    4 5 6 D   <-   Q W E R
    7 8 9 E        A S D F
    A 0 B F        Z X C V

Keys are named the way ``pygame.key.key_code`` names them.
"""

from typing import Iterable, List, Mapping

from chix8.constants import NUM_KEYS

DEFAULT_KEY_MAP = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


def keypad_from_pressed(pressed: Iterable[str], key_map: Mapping[str, int] = DEFAULT_KEY_MAP) -> List[bool]:
    """Build the 16-entry input latch from the names of currently held host keys."""
    keypad = [False] * NUM_KEYS
    for name in pressed:
        key = key_map.get(name.lower())
        if key is not None:
            keypad[key] = True
    return keypad
