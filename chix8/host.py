"""Interactive pygame host: window, keyboard and tone around the engine."""

import numpy as np
import pygame

from chix8.config import EmulatorConfig
from chix8.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chix8.emulator import StepResult, framebuffer, run_frame, set_keypad
from chix8.errors import Chip8Error
from chix8.keymap import keypad_from_pressed
from chix8.logging import ExecutionLogger
from chix8.rendering import color_scheme, display_to_rgb
from chix8.runner import create_machine
from chix8.state import EmulatorState

SAMPLE_RATE = 44100


def build_tone(tone_hz: int, volume: float) -> pygame.mixer.Sound:
    """One second of square wave, looped while the sound timer runs."""
    t = np.arange(SAMPLE_RATE)
    wave = np.where((t * tone_hz * 2 // SAMPLE_RATE) % 2 == 0, 1, -1)
    return pygame.sndarray.make_sound((wave * 32767 * volume).astype(np.int16))


def key_name(event: pygame.event.Event) -> str:
    """Host key name of a KEYDOWN or KEYUP event, as used by the key map."""
    return pygame.key.name(event.key)


def draw_display(screen: pygame.Surface, state: EmulatorState, config: EmulatorConfig):
    on_color, off_color = color_scheme(config.color_scheme)
    rgb = display_to_rgb(framebuffer(state), config.scale, on_color, off_color)
    # surfarray expects (width, height, 3)
    pygame.surfarray.blit_array(screen, rgb.transpose(1, 0, 2))


def draw_error(screen: pygame.Surface, message: str):
    font = pygame.font.Font(None, 20)
    text = font.render(message, True, (255, 64, 64))
    overlay = pygame.Surface((screen.get_width(), text.get_height() + 8))
    overlay.set_alpha(160)
    overlay.fill((0, 0, 0))
    screen.blit(overlay, (0, 0))
    screen.blit(text, (4, 4))


def reset_machine(
    screen: pygame.Surface, rom_filename: str, config: EmulatorConfig, logger: ExecutionLogger
) -> EmulatorState:
    """Reload the ROM into a fresh machine and repaint the blank screen over any error banner."""
    state = create_machine(rom_filename, config, logger)
    draw_display(screen, state, config)
    return state


def run_window(rom_filename: str, config: EmulatorConfig, logger: ExecutionLogger) -> int:
    """Run the ROM in a window until closed.

    ESC quits, P pauses, F5 reloads the ROM. A fatal error stops the machine and
    leaves the last frame on screen with the error message.

    Returns:
        0 when the window is closed normally, 2 if the machine halted on a fatal error.
    """
    state = create_machine(rom_filename, config, logger)

    pygame.mixer.pre_init(SAMPLE_RATE, -16, 1, 512)
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * config.scale, SCREEN_HEIGHT * config.scale))
    pygame.display.set_caption(f"chix8 - {rom_filename}")
    clock = pygame.time.Clock()

    tone = build_tone(config.tone_hz, config.volume) if pygame.mixer.get_init() else None
    held = set()
    running = True
    paused = False
    halted = None
    tone_playing = False

    def _trace(_: EmulatorState, result: StepResult):
        if result.operation is not None:
            logger.log_instruction(result.address, result.opcode)

    callback = _trace if logger.tracing else None
    draw_display(screen, state, config)

    try:
        while running:
            clock.tick(config.fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        paused = not paused
                        logger.info("Paused" if paused else "Resumed")
                    elif event.key == pygame.K_F5:
                        state = reset_machine(screen, rom_filename, config, logger)
                        held.clear()
                        halted = None
                        logger.info("Reset")
                    else:
                        held.add(key_name(event))
                elif event.type == pygame.KEYUP:
                    held.discard(key_name(event))

            sound = False
            if not paused and halted is None:
                state = set_keypad(state, keypad_from_pressed(held))
                try:
                    state, frame = run_frame(state, config.instructions_per_frame, callback)
                except Chip8Error as e:
                    logger.log_fatal(e)
                    halted = str(e)
                else:
                    logger.log_frame(frame.instructions)
                    sound = frame.sound_active
                    if frame.display_changed:
                        draw_display(screen, state, config)

            if tone is not None and sound != tone_playing:
                if sound:
                    tone.play(loops=-1)
                else:
                    tone.stop()
                tone_playing = sound

            if halted is not None:
                draw_display(screen, state, config)
                draw_error(screen, halted)
            pygame.display.flip()
    finally:
        logger.log_summary()
        pygame.quit()

    return 2 if halted is not None else 0
