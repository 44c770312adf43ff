"""SignageBot - unattended digital-signage kiosk shell for Raspberry Pi and other edge boards."""

__version__ = "1.0.0"
__author__ = "SignageBot Team"
__email__ = "support@signagebot.local"
__description__ = "Unattended digital-signage kiosk shell with a locked-down web surface"

# Package metadata
__all__ = [
    "__author__",
    "__description__",
    "__email__",
    "__version__",
]
