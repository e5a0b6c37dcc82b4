"""Command line entry point: ``chix8 ROM``."""

import argparse
import sys
from dataclasses import asdict
from typing import Optional, Sequence

from chix8.config import LOG_LEVELS, load_config
from chix8.errors import ConfigError, RomLoadError
from chix8.logging import ExecutionLogger
from chix8.rendering import display_to_text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chix8", description="Run a CHIP-8 ROM."
    )
    parser.add_argument("rom", help="ROM to load and play in the emulator")
    parser.add_argument(
        "--config", default=None, help="YAML file with emulator settings"
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a setting, e.g. --set instructions_per_frame=20 (repeatable)",
    )
    parser.add_argument(
        "--headless",
        type=int,
        default=None,
        metavar="FRAMES",
        help="Run FRAMES frames without a window and print the final display",
    )
    parser.add_argument(
        "--log-level", choices=LOG_LEVELS, default=None, help="Console log level"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    overrides = list(args.overrides)
    if args.log_level is not None:
        overrides.append(f"log_level={args.log_level}")

    try:
        config = load_config(args.config, overrides)
    except ConfigError as e:
        print(f"chix8: {e}", file=sys.stderr)
        return 1

    logger = ExecutionLogger(log_level=config.log_level)
    logger.log_config(asdict(config))

    if args.headless is None:
        # pygame is only needed for the interactive window
        from chix8.host import run_window

        try:
            return run_window(args.rom, config, logger)
        except RomLoadError as e:
            logger.log_fatal(e)
            return 1

    from chix8.runner import create_machine, run_headless

    try:
        state = create_machine(args.rom, config, logger)
    except RomLoadError as e:
        logger.log_fatal(e)
        return 1

    state, error = run_headless(state, args.headless, config, logger)
    logger.log_summary()
    print(display_to_text(state.display))
    return 2 if error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
