"""Test timing, environment and logging helpers."""

import logging
import pytest

from iobench.utils.env import Env
from iobench.utils.logging import setup_logging, get_logger, LoggerMixin
from iobench.utils.timer import Timer


class TestTimer:
    """Test the stopwatch."""

    def test_units(self):
        """Elapsed time converts between units."""
        ticks = iter([0, 2_500_000, 2_500_000, 2_500_000])
        timer = Timer(nano_clock=lambda: next(ticks))

        assert timer.elapsed_millis() == 2.5
        assert timer.elapsed_micros() == 2500.0
        assert timer.elapsed_seconds() == pytest.approx(0.0025)

    def test_restart(self):
        """Restarting moves the start to now."""
        ticks = iter([0, 10, 10])
        timer = Timer(nano_clock=lambda: next(ticks))
        timer.restart()

        assert timer.elapsed_nanos() == 0


class TestEnv:
    """Test environment lookups."""

    def test_prefixed_lookup(self, monkeypatch):
        monkeypatch.setenv("IOBENCH_THREADS", "3")
        assert Env.get_int("THREADS", 1) == 3

    def test_fallback(self, monkeypatch):
        monkeypatch.setenv("IOBENCH_THREADS", "lots")
        monkeypatch.delenv("IOBENCH_SIZE", raising=False)
        assert Env.get_int("THREADS", 1) == 1
        assert Env.get_int("SIZE", None) is None

    def test_not_instantiable(self):
        with pytest.raises(RuntimeError):
            Env()


class TestLogging:
    """Test logger setup."""

    def test_setup_logging(self, tmp_path):
        """Handlers live on the package logger, components share them."""
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logging(level="DEBUG", log_file=str(log_file), component="cli", enable_rich=False)

        assert logger.name == "iobench.cli"
        root = logging.getLogger("iobench")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        get_logger("driver").info("hello")
        for handler in root.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()

        for handler in root.handlers:
            handler.close()
        root.handlers.clear()

    def test_logger_mixin(self):
        """Components log under their class name."""
        class Sample(LoggerMixin):
            pass

        assert Sample().logger.name == "iobench.sample"
