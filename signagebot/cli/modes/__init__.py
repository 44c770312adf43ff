"""Execution modes for the SignageBot CLI."""

from .kiosk import KioskCLIError, prepare_session, run_kiosk_mode

__all__ = ["KioskCLIError", "prepare_session", "run_kiosk_mode"]
