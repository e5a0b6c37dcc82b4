"""Emulator host configuration.

Settings are layered with OmegaConf: structured defaults, then an optional YAML
file, then ``key=value`` overrides from the command line.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from chix8.constants import TIMER_FREQUENCY
from chix8.errors import ConfigError
from chix8.rendering import COLOR_SCHEMES
from chix8.state import Quirks

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EmulatorConfig:
    """Host loop settings.

    Attributes:
        instructions_per_frame: CHIP-8 instructions executed per 60 Hz frame
        fps: Host frame rate, which is also the timer rate
        scale: Window upscaling factor
        color_scheme: Rendering color scheme name
        tone_hz: Frequency of the square wave played while the sound timer runs
        volume: Tone volume in [0, 1]
        quirks: Quirks preset name ("modern" or "cosmac")
        seed: Seed of the CXNN random number generator
        log_level: Console log level; DEBUG enables the instruction trace
    """
    instructions_per_frame: int = 11
    fps: int = TIMER_FREQUENCY
    scale: int = 10
    color_scheme: str = "classic"
    tone_hz: int = 440
    volume: float = 0.2
    quirks: str = "modern"
    seed: int = 0
    log_level: str = "INFO"

    @property
    def instruction_frequency(self) -> int:
        """Effective CPU speed in instructions per second."""
        return self.instructions_per_frame * self.fps

    def make_quirks(self) -> Quirks:
        return Quirks.from_name(self.quirks)


def validate_config(config: EmulatorConfig) -> EmulatorConfig:
    """Check value ranges OmegaConf's type checks do not cover."""
    if config.instructions_per_frame < 1:
        raise ConfigError("instructions_per_frame must be at least 1")
    if config.fps < 1:
        raise ConfigError("fps must be at least 1")
    if config.scale < 1:
        raise ConfigError("scale must be at least 1")
    if not 0.0 <= config.volume <= 1.0:
        raise ConfigError("volume must be between 0 and 1")
    if config.color_scheme not in COLOR_SCHEMES:
        raise ConfigError(
            f"Unknown color scheme '{config.color_scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
        )
    if config.log_level.upper() not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level '{config.log_level}'. Available: {list(LOG_LEVELS)}")
    try:
        config.make_quirks()
    except ValueError as e:
        raise ConfigError(str(e)) from e
    return config


def load_config(path: Optional[str] = None, overrides: Sequence[str] = ()) -> EmulatorConfig:
    """Build an EmulatorConfig from defaults, an optional YAML file and dot-list overrides.

    Args:
        path: YAML file with any subset of the EmulatorConfig fields
        overrides: ``key=value`` strings applied last

    Raises:
        ConfigError: On unreadable files, unknown keys or invalid values.
    """
    try:
        cfg = OmegaConf.structured(EmulatorConfig)
        if path is not None:
            cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
        if overrides:
            cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
        config = OmegaConf.to_object(cfg)
    except (OmegaConfBaseException, OSError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    return validate_config(config)
