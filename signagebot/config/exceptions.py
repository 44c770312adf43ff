"""
Configuration-specific exceptions for SignageBot.

Configuration problems are never fatal for a signage device: the loader logs
these errors and falls back to defaults. The exceptions exist so the failure
is reported with enough context to fix the offending file.
"""

from typing import Any, Optional


class SettingsError(Exception):
    """Base exception for all settings-related errors.

    Args:
        message: Human-readable error description
        details: Optional dictionary containing additional error context

    Example:
        >>> raise SettingsError("Configuration failed", {"file": "config.yaml"})
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class SettingsValidationError(SettingsError):
    """Exception raised when a settings value fails validation.

    Args:
        message: Human-readable validation error description
        field_name: Name of the field that failed validation
        field_value: The invalid value that caused the error
        details: Additional context about the validation failure

    Example:
        >>> raise SettingsValidationError(
        ...     "Invalid background color",
        ...     field_name="background_color",
        ...     field_value="dark",
        ... )
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field_name = field_name
        self.field_value = field_value

        error_details = details or {}
        if field_name:
            error_details["field_name"] = field_name
        if field_value is not None:
            error_details["field_value"] = str(field_value)

        super().__init__(message, error_details)


class SettingsFileError(SettingsError):
    """Exception raised when a configuration file cannot be read or parsed.

    Args:
        message: Human-readable error description
        file_path: Path to the file involved
        original_error: The underlying exception that caused the failure
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.file_path = file_path
        self.original_error = original_error

        error_details: dict[str, Any] = {}
        if file_path:
            error_details["file_path"] = file_path
        if original_error:
            error_details["original_error"] = str(original_error)
            error_details["error_type"] = type(original_error).__name__

        super().__init__(message, error_details)
