"""Unit tests for command-line parsing."""

from pathlib import Path

import pytest

from signagebot import __version__
from signagebot.cli.parser import create_parser, parse_args


class TestCreateParser:
    """Test cases for create_parser."""

    def test_defaults_when_no_flags(self):
        args, unknown = parse_args([])

        assert args.kiosk is False
        assert args.dev is False
        assert args.allow_quit is False
        assert args.content is None
        assert args.config is None
        assert unknown == []

    def test_session_flags(self):
        args, _ = parse_args(["--kiosk", "--dev", "--allow-quit"])

        assert args.kiosk is True
        assert args.dev is True
        assert args.allow_quit is True

    def test_unknown_flags_are_ignored(self):
        """Engine switches and typos pass through without an error."""
        args, unknown = parse_args(["--kiosk", "--no-sandbox", "--enable-logging=stderr"])

        assert args.kiosk is True
        assert unknown == ["--no-sandbox", "--enable-logging=stderr"]

    def test_flags_cannot_be_abbreviated(self):
        args, unknown = parse_args(["--kio", "--allow"])

        assert args.kiosk is False
        assert args.allow_quit is False
        assert unknown == ["--kio", "--allow"]

    def test_flags_are_case_sensitive(self):
        args, unknown = parse_args(["--DEV"])

        assert args.dev is False
        assert unknown == ["--DEV"]

    def test_content_and_config_paths(self):
        args, _ = parse_args(["--content", "/opt/signage/index.html", "--config", "cfg.yaml"])

        assert args.content == Path("/opt/signage/index.html")
        assert args.config == Path("cfg.yaml")

    def test_logging_options(self):
        args, _ = parse_args(
            ["--log-level", "VERBOSE", "--log-dir", "/tmp/logs", "--no-log-colors", "-q"]
        )

        assert args.log_level == "VERBOSE"
        assert args.log_dir == Path("/tmp/logs")
        assert args.no_log_colors is True
        assert args.quiet is True

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_known_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
