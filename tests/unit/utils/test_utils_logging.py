"""Unit tests for logging utilities."""

import logging
from argparse import Namespace
from pathlib import Path
from unittest.mock import patch

import pytest

from signagebot.utils.logging import (
    LOG_LEVEL_CHOICES,
    VERBOSE,
    AutoColoredFormatter,
    TimestampedFileHandler,
    apply_command_line_overrides,
    get_log_level,
    get_logger,
    setup_logging,
)


@pytest.fixture
def restore_package_logger():
    package_logger = logging.getLogger("signagebot")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield package_logger
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers = handlers
    package_logger.setLevel(level)


class TestLogLevels:
    """Test cases for level helpers."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("DEBUG", 10), ("verbose", VERBOSE), ("Info", 20), ("WARNING", 30), ("ERROR", 40)],
    )
    def test_get_log_level(self, name, expected):
        assert get_log_level(name) == expected

    def test_unknown_level_raises(self):
        with pytest.raises(AttributeError):
            get_log_level("LOUD")

    def test_verbose_level_registered(self):
        assert VERBOSE == 15
        assert logging.getLevelName(VERBOSE) == "VERBOSE"

    def test_logger_verbose_method(self, caplog):
        test_logger = logging.getLogger("signagebot.test.verbose")

        with caplog.at_level(VERBOSE, logger="signagebot.test.verbose"):
            test_logger.verbose("navigation allowed")

        assert caplog.records[-1].levelno == VERBOSE
        assert caplog.records[-1].getMessage() == "navigation allowed"

    def test_get_logger_namespaces_under_package(self):
        assert get_logger("kiosk.bridge").name == "signagebot.kiosk.bridge"

    def test_choices_cover_custom_level(self):
        assert "VERBOSE" in LOG_LEVEL_CHOICES
        assert all(isinstance(get_log_level(name), int) for name in LOG_LEVEL_CHOICES)


class TestAutoColoredFormatter:
    """Test cases for AutoColoredFormatter."""

    def _record(self, level=logging.ERROR):
        return logging.LogRecord("signagebot", level, __file__, 1, "message", None, None)

    def test_colors_disabled(self):
        formatter = AutoColoredFormatter("%(levelname)s - %(message)s", enable_colors=False)

        assert formatter.color_mode == "none"
        assert formatter.format(self._record()) == "ERROR - message"

    def test_no_colors_without_tty(self):
        with patch("sys.stdout.isatty", return_value=False):
            formatter = AutoColoredFormatter("%(levelname)s")

        assert formatter.color_mode == "none"

    def test_truecolor_terminal(self):
        with patch("sys.stdout.isatty", return_value=True), patch.dict(
            "os.environ", {"TERM": "xterm-256color", "COLORTERM": ""}
        ):
            formatter = AutoColoredFormatter("%(levelname)s - %(message)s")

        assert formatter.color_mode == "truecolor"
        assert formatter.format(self._record()).startswith("\033[91mERROR\033[0m")

    def test_dumb_terminal(self):
        with patch("sys.stdout.isatty", return_value=True), patch.dict(
            "os.environ", {"TERM": "dumb", "COLORTERM": ""}
        ):
            formatter = AutoColoredFormatter("%(levelname)s")

        assert formatter.color_mode == "none"

    def test_basic_color_terminal(self):
        with patch("sys.stdout.isatty", return_value=True), patch.dict(
            "os.environ", {"TERM": "xterm-color", "COLORTERM": ""}
        ):
            formatter = AutoColoredFormatter("%(levelname)s")

        assert formatter.color_mode == "basic"
        assert formatter.format(self._record(logging.WARNING)) == "\033[33mWARNING\033[0m"


class TestTimestampedFileHandler:
    """Test cases for TimestampedFileHandler."""

    def test_creates_prefixed_file(self, tmp_path):
        handler = TimestampedFileHandler(tmp_path / "logs", prefix="kiosk")
        try:
            path = Path(handler.baseFilename)
            assert path.parent == tmp_path / "logs"
            assert path.name.startswith("kiosk_")
            assert path.suffix == ".log"
        finally:
            handler.close()

    def test_old_files_are_pruned(self, tmp_path):
        for index in range(6):
            (tmp_path / f"signagebot_20240101_00000{index}.log").write_text("old")

        handler = TimestampedFileHandler(tmp_path, max_files=3)
        handler.close()

        assert len(list(tmp_path.glob("signagebot_*.log"))) == 3
        assert Path(handler.baseFilename).exists()


class TestSetupLogging:
    """Test cases for setup_logging and command-line overrides."""

    def test_console_and_file_handlers(self, test_settings, tmp_path, restore_package_logger):
        test_settings.logging.file_enabled = True
        test_settings.logging.file_directory = str(tmp_path / "logs")
        test_settings.logging.console_level = "WARNING"

        package_logger = setup_logging(test_settings)

        assert package_logger.name == "signagebot"
        console = [h for h in package_logger.handlers if type(h) is logging.StreamHandler]
        files = [h for h in package_logger.handlers if isinstance(h, TimestampedFileHandler)]
        assert len(console) == 1
        assert console[0].level == logging.WARNING
        assert len(files) == 1
        assert files[0].level == logging.DEBUG

    def test_file_logging_disabled(self, test_settings, restore_package_logger):
        test_settings.logging.file_enabled = False

        package_logger = setup_logging(test_settings)

        assert not any(isinstance(h, TimestampedFileHandler) for h in package_logger.handlers)

    def test_third_party_loggers_quieted(self, test_settings, restore_package_logger):
        test_settings.logging.third_party_level = "ERROR"

        setup_logging(test_settings)

        assert logging.getLogger("PyQt6").level == logging.ERROR

    def test_command_line_overrides(self, test_settings):
        args = Namespace(
            log_level="DEBUG", verbose=False, quiet=True, log_dir=Path("/var/log/signagebot"), no_log_colors=True
        )

        apply_command_line_overrides(test_settings, args)

        assert test_settings.logging.console_level == "ERROR"
        assert test_settings.logging.file_level == "DEBUG"
        assert test_settings.logging.file_directory == "/var/log/signagebot"
        assert test_settings.logging.console_colors is False

    def test_verbose_override(self, test_settings):
        apply_command_line_overrides(test_settings, Namespace(verbose=True))

        assert test_settings.logging.console_level == "VERBOSE"
        assert test_settings.logging.file_level == "VERBOSE"
