"""Unit tests for kk logging configuration."""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from kk.logging import default_log_dir, get_logger, setup_logging, truncate_output


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_log_directory(self) -> None:
        """Log directory is created if it doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "nested" / "logs"
            setup_logging(log_dir=log_dir)

            assert log_dir.exists()

    def test_creates_log_file(self) -> None:
        """Log file is created."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir)

            assert (Path(tmpdir) / "kk.log").exists()

    def test_writes_to_log_file(self) -> None:
        """Log messages are written to the file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir)
            logger.info("test message 123")

            content = (Path(tmpdir) / "kk.log").read_text()
            assert "test message 123" in content

    def test_log_format(self) -> None:
        """Log entries carry level and logger name between pipes."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir)
            logger.info("format test")

            content = (Path(tmpdir) / "kk.log").read_text()
            # Format: 2026-01-28 16:30:45 | INFO     | kk | message
            assert " | INFO" in content
            assert " | kk | " in content

    def test_all_components_write_to_same_file(self) -> None:
        """Component loggers share the kk log file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir)

            logging.getLogger("kk.store").info("store log")
            logging.getLogger("kk.editor").info("editor log")
            logging.getLogger("kk.navigation.navigator").info("navigator log")

            content = (Path(tmpdir) / "kk.log").read_text()
            assert "store log" in content
            assert "editor log" in content
            assert "kk.navigation.navigator" in content

    def test_no_console_handler_by_default(self) -> None:
        """Only the file handler is installed while the TUI owns the terminal."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir)

            assert len(logger.handlers) == 1

    def test_console_handler_opt_in(self) -> None:
        """console=True adds a stream handler."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, console=True)

            assert len(logger.handlers) == 2
            setup_logging(log_dir=tmpdir)

    def test_log_level_configurable(self) -> None:
        """Log level filters messages appropriately."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, level="WARNING")
            logger = logging.getLogger("kk")
            logger.info("should not appear")
            logger.warning("should appear")

            content = (Path(tmpdir) / "kk.log").read_text()
            assert "should not appear" not in content
            assert "should appear" in content

    @patch.dict(os.environ, {"KK_LOG_LEVEL": "DEBUG"})
    def test_log_level_from_env(self) -> None:
        """Log level can be set via environment variable."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir)

            assert logger.level == logging.DEBUG

    def test_log_dir_from_env(self) -> None:
        """Log directory can be set via environment variable."""
        with (
            tempfile.TemporaryDirectory() as tmpdir,
            patch.dict(os.environ, {"KK_LOG_DIR": tmpdir}),
        ):
            setup_logging()

            assert (Path(tmpdir) / "kk.log").exists()

    def test_no_duplicate_handlers_on_repeated_setup(self) -> None:
        """Repeated setup_logging calls don't add duplicate handlers."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir)
            setup_logging(log_dir=tmpdir)

            assert len(logging.getLogger("kk").handlers) == 1

    def test_returns_kk_logger(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir)

            assert logger.name == "kk"


@pytest.mark.unit
class TestDefaultLogDir:
    """Tests for default_log_dir."""

    def test_uses_xdg_state_home(self) -> None:
        with patch.dict(os.environ, {"XDG_STATE_HOME": "/tmp/state"}):
            assert default_log_dir() == Path("/tmp/state/kk")

    def test_falls_back_to_local_state(self) -> None:
        env = {k: v for k, v in os.environ.items() if k != "XDG_STATE_HOME"}
        with patch.dict(os.environ, env, clear=True):
            assert default_log_dir() == Path.home() / ".local" / "state" / "kk"


@pytest.mark.unit
class TestRotation:
    """Tests for log rotation."""

    def test_rotation_configured(self) -> None:
        """RotatingFileHandler is configured with correct max size."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, max_bytes=1024, backup_count=3)

            handler = logging.getLogger("kk").handlers[0]
            assert handler.maxBytes == 1024
            assert handler.backupCount == 3

    def test_logs_rotate_at_max_size(self) -> None:
        """Log files rotate when they reach max size."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, max_bytes=500, backup_count=2)
            logger = logging.getLogger("kk")

            for i in range(50):
                logger.info("Rotation test message number %d with padding data", i)

            assert (Path(tmpdir) / "kk.log").exists()
            assert (Path(tmpdir) / "kk.log.1").exists()


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_prefixes_kk(self) -> None:
        assert get_logger("store").name == "kk.store"

    def test_get_logger_no_double_prefix(self) -> None:
        assert get_logger("kk.editor").name == "kk.editor"


@pytest.mark.unit
class TestTruncateOutput:
    """Tests for truncate_output function."""

    def test_short_output_unchanged(self) -> None:
        assert truncate_output("short text", max_length=100) == "short text"

    def test_long_output_truncated(self) -> None:
        """Long output is truncated with indicator."""
        result = truncate_output("x" * 200, max_length=100)

        assert result.startswith("x" * 100)
        assert "truncated, 100 more chars" in result
