"""Unit tests for platform detection and rendering engine tuning."""

import pytest

from signagebot.kiosk.platform import (
    CHROMIUM_FLAGS_ENV,
    EMBEDDED_SWITCHES,
    PlatformInfo,
    apply_platform_tuning,
    build_platform_switches,
    detect_platform,
    normalize_architecture,
    normalize_platform,
)


class TestPlatformDetection:
    """Test cases for platform normalisation and detection."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("linux", "linux"), ("linux2", "linux"), ("darwin", "darwin"), ("win32", "win32"), ("cygwin", "win32")],
    )
    def test_normalize_platform(self, raw, expected):
        assert normalize_platform(raw) == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("x86_64", "x64"),
            ("AMD64", "x64"),
            ("aarch64", "arm64"),
            ("armv7l", "arm"),
            ("i686", "ia32"),
            ("riscv64", "riscv64"),
            ("", "unknown"),
        ],
    )
    def test_normalize_architecture(self, raw, expected):
        assert normalize_architecture(raw) == expected

    def test_detect_platform_with_overrides(self):
        """Test detection on a Raspberry Pi style host."""
        info = detect_platform(raw_platform="linux", raw_machine="aarch64", app_version="2.0.0")

        assert info == PlatformInfo(platform="linux", architecture="arm64", app_version="2.0.0")
        assert info.is_embedded_target is True

    def test_detect_platform_uses_package_version_by_default(self):
        """Test app_version falls back to the package version."""
        from signagebot import __version__

        info = detect_platform(raw_platform="darwin", raw_machine="arm64")

        assert info.app_version == __version__
        assert info.is_embedded_target is False


class TestPlatformTuning:
    """Test cases for engine switch selection and application."""

    def test_build_switches_when_embedded_target(self, linux_platform):
        """Test the embedded target gets the full switch set."""
        switches = build_platform_switches(linux_platform)

        assert switches == list(EMBEDDED_SWITCHES)
        assert "--enable-gpu-rasterization" in switches
        assert "--enable-zero-copy" in switches
        assert "--ignore-gpu-blocklist" in switches
        assert "--disable-dev-shm-usage" in switches
        assert "--disable-web-security" in switches

    def test_build_switches_when_desktop_then_empty(self, darwin_platform):
        assert build_platform_switches(darwin_platform) == []

    def test_apply_when_environment_empty_then_sets_flags(self, linux_platform):
        """Test switches are written to QTWEBENGINE_CHROMIUM_FLAGS."""
        environ: dict[str, str] = {}

        added = apply_platform_tuning(build_platform_switches(linux_platform), environ)

        assert added == list(EMBEDDED_SWITCHES)
        assert environ[CHROMIUM_FLAGS_ENV].split() == list(EMBEDDED_SWITCHES)

    def test_apply_twice_then_no_duplicates(self, linux_platform):
        """Test applying tuning is idempotent."""
        environ: dict[str, str] = {}
        switches = build_platform_switches(linux_platform)

        apply_platform_tuning(switches, environ)
        added_again = apply_platform_tuning(switches, environ)

        assert added_again == []
        assert environ[CHROMIUM_FLAGS_ENV].split() == list(EMBEDDED_SWITCHES)

    def test_apply_keeps_operator_flags(self):
        """Test existing operator-supplied flags are preserved and not repeated."""
        environ = {CHROMIUM_FLAGS_ENV: "--enable-zero-copy --remote-debugging-port=9222"}

        added = apply_platform_tuning(["--enable-zero-copy", "--ignore-gpu-blocklist"], environ)

        assert added == ["--ignore-gpu-blocklist"]
        assert environ[CHROMIUM_FLAGS_ENV].split() == [
            "--enable-zero-copy",
            "--remote-debugging-port=9222",
            "--ignore-gpu-blocklist",
        ]

    def test_apply_with_no_switches_leaves_environment_untouched(self):
        environ: dict[str, str] = {}

        assert apply_platform_tuning([], environ) == []
        assert CHROMIUM_FLAGS_ENV not in environ
