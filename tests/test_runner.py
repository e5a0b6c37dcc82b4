"""Tests for the headless runner and the command line entry point."""

import io

import pytest
from chix8 import DecodeError, RomLoadError
from chix8.cli import main
from chix8.config import EmulatorConfig
from chix8.logging import ExecutionLogger
from chix8.runner import create_machine, run_headless
from conftest import assemble


@pytest.fixture
def counter_rom(tmp_path):
    """ROM that sets V0 = 5, adds 3, draws the glyph of V0 and spins."""
    rom = tmp_path / "counter.ch8"
    rom.write_bytes(assemble(0x6005, 0x7003, 0xF029, 0x6100, 0xD115, 0x120A))
    return str(rom)


@pytest.fixture
def bad_rom(tmp_path):
    rom = tmp_path / "bad.ch8"
    rom.write_bytes(assemble(0x6001, 0x0123))
    return str(rom)


def quiet_logger(level="INFO"):
    stream = io.StringIO()
    return ExecutionLogger(log_level=level, show_timestamps=False, stream=stream), stream


def test_create_machine_uses_config(counter_rom):
    state = create_machine(counter_rom, EmulatorConfig(quirks="cosmac"))
    assert state.quirks.vf_reset
    assert state.memory[0x200] == 0x60


def test_create_machine_logs_rom(counter_rom):
    logger, stream = quiet_logger()
    create_machine(counter_rom, EmulatorConfig(), logger)
    assert "Loaded counter.ch8 (12 bytes)" in stream.getvalue()


def test_create_machine_missing_rom(tmp_path):
    with pytest.raises(RomLoadError):
        create_machine(str(tmp_path / "missing.ch8"), EmulatorConfig())


def test_run_headless(counter_rom):
    config = EmulatorConfig()
    logger, _ = quiet_logger()
    state = create_machine(counter_rom, config)

    state, error = run_headless(state, 3, config, logger, progress=False)

    assert error is None
    assert state.V[0] == 8
    assert state.display.any()
    assert logger.frames == 3
    assert logger.instructions == 3 * config.instructions_per_frame


def test_run_headless_traces_at_debug(counter_rom):
    config = EmulatorConfig(instructions_per_frame=2)
    logger, stream = quiet_logger("DEBUG")
    state = create_machine(counter_rom, config)

    run_headless(state, 1, config, logger, progress=False)

    assert "$0200: 6005  LD V0, 0x05" in stream.getvalue()
    assert "$0202: 7003  ADD V0, 0x03" in stream.getvalue()


def test_run_headless_stops_on_fatal_error(bad_rom):
    config = EmulatorConfig()
    logger, stream = quiet_logger()
    state = create_machine(bad_rom, config)

    state, error = run_headless(state, 5, config, logger, progress=False)

    assert isinstance(error, DecodeError)
    assert error.address == 0x202
    assert error.opcode == 0x0123
    assert logger.frames == 0
    assert "DecodeError" in stream.getvalue()


class TestCli:
    def test_headless_prints_display(self, counter_rom, capsys):
        assert main([counter_rom, "--headless", "2", "--log-level", "WARNING"]) == 0

        lines = capsys.readouterr().out.strip().split("\n")
        assert len(lines) == 32
        assert any("#" in line for line in lines)

    def test_overrides(self, counter_rom, capsys):
        assert main([counter_rom, "--headless", "1", "--set", "instructions_per_frame=1",
                     "--log-level", "WARNING"]) == 0

    def test_invalid_config(self, counter_rom, capsys):
        assert main([counter_rom, "--headless", "1", "--set", "fps=0"]) == 1
        assert "fps must be at least 1" in capsys.readouterr().err

    def test_missing_rom(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.ch8"), "--headless", "1"]) == 1
        assert "RomLoadError" in capsys.readouterr().out

    def test_fatal_error(self, bad_rom, capsys):
        assert main([bad_rom, "--headless", "1"]) == 2
        assert "Unsupported instruction" in capsys.readouterr().out
