"""
Run a CHIP-8 ROM in a window: python main.py path/to/rom.ch8
"""

import sys

from chix8.cli import main

if __name__ == "__main__":
    sys.exit(main())
