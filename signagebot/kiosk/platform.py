"""
Host platform detection and one-time rendering engine tuning.

The embedded target (Raspberry Pi class boards running Linux) gets a fixed set
of Chromium switches. Qt WebEngine reads them from ``QTWEBENGINE_CHROMIUM_FLAGS``
when the first web view is created, so they must be applied before the
``QApplication`` exists and cannot be changed afterwards.
"""

import logging
import platform as _platform
import sys
from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

EMBEDDED_TARGET_PLATFORM = "linux"
CHROMIUM_FLAGS_ENV = "QTWEBENGINE_CHROMIUM_FLAGS"

EMBEDDED_SWITCHES: tuple[str, ...] = (
    "--enable-gpu-rasterization",
    "--enable-zero-copy",
    "--ignore-gpu-blocklist",
    "--disable-dev-shm-usage",
    # Local signage assets pull from arbitrary origins
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
)

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "armv8l": "arm",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
}


@dataclass(frozen=True)
class PlatformInfo:
    """Identity of the host, detected once at startup.

    Attributes:
        platform: Normalised OS identifier (linux, darwin, win32, ...)
        architecture: Normalised CPU architecture (x64, arm64, arm, ia32, or raw)
        app_version: SignageBot version string
    """

    platform: str
    architecture: str
    app_version: str

    @property
    def is_embedded_target(self) -> bool:
        return self.platform == EMBEDDED_TARGET_PLATFORM


def normalize_platform(raw: str) -> str:
    """Map ``sys.platform`` values onto stable identifiers."""
    if raw.startswith("linux"):
        return "linux"
    if raw in ("cygwin", "win32"):
        return "win32"
    return raw


def normalize_architecture(raw: str) -> str:
    """Map ``platform.machine()`` values onto stable identifiers."""
    return _ARCH_ALIASES.get(raw.lower(), raw.lower() or "unknown")


def detect_platform(
    raw_platform: Optional[str] = None,
    raw_machine: Optional[str] = None,
    app_version: Optional[str] = None,
) -> PlatformInfo:
    """Detect the host platform.

    Args:
        raw_platform: Override for ``sys.platform`` (tests)
        raw_machine: Override for ``platform.machine()`` (tests)
        app_version: Override for the package version

    Returns:
        Immutable platform identity
    """
    if app_version is None:
        from .. import __version__  # noqa: PLC0415

        app_version = __version__

    return PlatformInfo(
        platform=normalize_platform(raw_platform if raw_platform is not None else sys.platform),
        architecture=normalize_architecture(
            raw_machine if raw_machine is not None else _platform.machine()
        ),
        app_version=app_version,
    )


def build_platform_switches(platform_info: PlatformInfo) -> list[str]:
    """Return the rendering engine switches for this platform.

    Only the embedded target is tuned; every other platform runs with engine
    defaults.
    """
    if not platform_info.is_embedded_target:
        return []
    return list(EMBEDDED_SWITCHES)


def apply_platform_tuning(
    switches: Sequence[str], environ: MutableMapping[str, str]
) -> list[str]:
    """Merge switches into ``QTWEBENGINE_CHROMIUM_FLAGS``.

    Flags already present (set by the operator or a previous call) are kept
    and not duplicated, so applying twice is harmless.

    Args:
        switches: Switches to add
        environ: Environment mapping to update (normally ``os.environ``)

    Returns:
        The switches that were actually added
    """
    existing = environ.get(CHROMIUM_FLAGS_ENV, "").split()
    added = [switch for switch in switches if switch not in existing]

    if added:
        environ[CHROMIUM_FLAGS_ENV] = " ".join(existing + added)
        logger.info(f"Applied rendering engine switches: {' '.join(added)}")

    return added
