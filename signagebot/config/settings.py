"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..utils.logging import LOG_LEVEL_CHOICES
from .exceptions import SettingsFileError, SettingsValidationError

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def _check_hex_color(value: str) -> str:
    if not _HEX_COLOR.match(value):
        raise SettingsValidationError(
            f"Invalid background color: {value}",
            field_name="background_color",
            field_value=value,
        )
    return value


# Keys of the YAML "logging" section, in the order they are applied
_LOGGING_FILE_KEYS = [
    "console_enabled",
    "console_level",
    "console_colors",
    "file_enabled",
    "file_level",
    "file_directory",
    "file_prefix",
    "max_log_files",
    "include_function_names",
    "third_party_level",
]


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    # Console Logging
    console_enabled: bool = Field(default=True, description="Enable console logging")
    console_level: str = Field(
        default="INFO",
        description="Console log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    console_colors: bool = Field(
        default=True, description="Enable colored console output (auto-detected)"
    )

    # File Logging
    file_enabled: bool = Field(default=True, description="Enable file logging")
    file_level: str = Field(
        default="DEBUG",
        description="File log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    file_directory: Optional[str] = Field(
        default=None, description="Custom log directory (defaults to data_dir/logs)"
    )
    file_prefix: str = Field(default="signagebot", description="Log file prefix")
    max_log_files: int = Field(default=5, description="Maximum number of log files to keep")
    include_function_names: bool = Field(
        default=True, description="Include function names and line numbers in file logs"
    )

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("console_level", "file_level", "third_party_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any, info: ValidationInfo) -> str:
        """Validate a level name against the levels the logging setup understands.

        Raises:
            SettingsValidationError: If the level name is unknown
        """
        level = str(v).upper()
        if level not in LOG_LEVEL_CHOICES:
            raise SettingsValidationError(
                f"Invalid log level: {v}",
                field_name=f"logging.{info.field_name}",
                field_value=v,
            )
        return level

    @field_validator("max_log_files")
    @classmethod
    def validate_max_log_files(cls, v: int) -> int:
        if v < 1:
            raise SettingsValidationError(
                f"max_log_files must be at least 1, got {v}",
                field_name="logging.max_log_files",
                field_value=v,
            )
        return v


class NavigationSettings(BaseModel):
    """Navigation lockdown options.

    Origin equality against the bundled content is always enforced; these
    options can only tighten it further.
    """

    restrict_to_content_root: bool = Field(
        default=False,
        description="Also require file: navigations to stay under the content directory",
    )


class SignageSettings(BaseSettings):
    """Application settings with environment variable and YAML file support.

    Priority order: constructor arguments > environment (``SIGNAGEBOT_*``) >
    YAML file > defaults.
    """

    _explicit_args: set = PrivateAttr(default_factory=set)
    _env_vars_set: set = PrivateAttr(default_factory=set)
    _config_file: Optional[Path] = PrivateAttr(default=None)

    # Application Configuration
    app_name: str = Field(default="SignageBot", description="Application name")

    # Content
    content_path: Path = Field(
        default=Path("index.html"),
        description="Bundled signage entry document (relative paths resolve against the CWD)",
    )
    background_color: str = Field(
        default="#1a1a1a",
        description="Surface fill shown before content paints (avoids a white flash)",
    )

    # File Paths
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "signagebot")
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local" / "share" / "signagebot")

    navigation: NavigationSettings = Field(
        default_factory=NavigationSettings, description="Navigation lockdown settings"
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings, description="Logging settings"
    )

    model_config = SettingsConfigDict(
        env_prefix="SIGNAGEBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs: Any) -> None:
        config_file = kwargs.pop("config_file", None)

        env_vars_set = set()
        for key in os.environ:
            if key.upper().startswith("SIGNAGEBOT_"):
                env_vars_set.add(key[len("SIGNAGEBOT_") :].lower().split("__")[0])

        super().__init__(**kwargs)

        self._explicit_args = set(kwargs.keys())
        self._env_vars_set = env_vars_set
        self._config_file = Path(config_file) if config_file else None

        self._load_yaml_config()

    @field_validator("background_color")
    @classmethod
    def validate_background_color(cls, v: str) -> str:
        """Validate that the background color is a CSS hex color.

        Raises:
            SettingsValidationError: If the value is not #rgb, #rrggbb or #rrggbbaa
        """
        return _check_hex_color(v)

    @property
    def resolved_content_path(self) -> Path:
        """Absolute path of the bundled content entry document."""
        return self.content_path.expanduser().resolve()

    @property
    def content_url(self) -> str:
        """``file://`` URL of the bundled content entry document."""
        return self.resolved_content_path.as_uri()

    @property
    def log_directory(self) -> Path:
        """Directory used for file logging."""
        if self.logging.file_directory:
            return Path(self.logging.file_directory).expanduser()
        return self.data_dir / "logs"

    def _find_config_file(self) -> Optional[Path]:
        """Find config file: explicit path, then project ``config/``, then user config dir."""
        if self._config_file is not None:
            return self._config_file

        project_config = Path.cwd() / "config" / "config.yaml"
        if project_config.exists():
            return project_config

        user_config = self.config_dir / "config.yaml"
        if user_config.exists():
            return user_config

        return None

    def _read_config_file(self, config_file: Path) -> dict[str, Any]:
        """Read and parse a YAML configuration file.

        Raises:
            SettingsFileError: If the file cannot be read or is not a YAML mapping
        """
        try:
            with config_file.open(encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise SettingsFileError(
                "Failed to load configuration file", str(config_file), e
            ) from e

        if not isinstance(config_data, dict):
            raise SettingsFileError(
                "Configuration file must contain a mapping at the top level", str(config_file)
            )
        return config_data

    def _load_yaml_config(self) -> None:
        """Load settings from the YAML config file, if one is found.

        A missing or broken file never prevents startup; the problem is
        logged and defaults stay in effect.
        """
        config_file = self._find_config_file()
        if config_file is None:
            return
        if not config_file.exists():
            logger.warning(f"Configuration file not found: {config_file}")
            return

        try:
            config_data = self._read_config_file(config_file)
            self._load_basic_settings(config_data)
            self._load_navigation_config(config_data)
            self._load_logging_config(config_data)
            logger.debug(f"Loaded configuration from {config_file}")
        except SettingsFileError as e:
            logger.warning(f"Ignoring configuration file: {e}")
        except (SettingsValidationError, ValueError, TypeError) as e:
            logger.warning(f"Invalid value in configuration file {config_file}: {e}")

    def _is_overridden(self, setting: str) -> bool:
        return setting in self._explicit_args or setting in self._env_vars_set

    def _load_basic_settings(self, config_data: dict) -> None:
        """Load top-level application settings from YAML data."""
        if "app_name" in config_data and not self._is_overridden("app_name"):
            self.app_name = str(config_data["app_name"])

        if "content_path" in config_data and not self._is_overridden("content_path"):
            self.content_path = Path(str(config_data["content_path"]))

        if "background_color" in config_data and not self._is_overridden("background_color"):
            try:
                self.background_color = _check_hex_color(str(config_data["background_color"]))
            except SettingsValidationError as e:
                logger.warning(f"Ignoring invalid value in configuration file: {e}")

        for setting in ["config_dir", "data_dir"]:
            if setting in config_data and not self._is_overridden(setting):
                setattr(self, setting, Path(str(config_data[setting])).expanduser())

    def _load_navigation_config(self, config_data: dict) -> None:
        """Load navigation lockdown settings from YAML data."""
        if "navigation" not in config_data or self._is_overridden("navigation"):
            return

        navigation_config = config_data["navigation"] or {}
        if "restrict_to_content_root" in navigation_config:
            self.navigation.restrict_to_content_root = bool(
                navigation_config["restrict_to_content_root"]
            )

    def _load_logging_config(self, config_data: dict) -> None:
        """Load logging configuration from YAML data."""
        if "logging" not in config_data or self._is_overridden("logging"):
            return

        logging_config = config_data["logging"] or {}

        for setting in _LOGGING_FILE_KEYS:
            if setting not in logging_config:
                continue
            try:
                setattr(self.logging, setting, logging_config[setting])
            except (SettingsValidationError, ValueError) as e:
                # A bad value only costs that one setting
                logger.warning(f"Ignoring logging.{setting} from configuration file: {e}")


def load_settings(config_file: Optional[Path] = None, **overrides: Any) -> SignageSettings:
    """Build settings for this process.

    An invalid environment value is logged and replaced by the field default.
    Invalid explicit values still raise.

    Args:
        config_file: Optional explicit YAML file (``--config``)
        **overrides: Explicit values that win over environment and YAML

    Returns:
        Resolved settings instance

    Raises:
        SettingsValidationError: If an explicit override is invalid
        ValidationError: If an explicit override has the wrong type
    """
    overrides = dict(overrides)
    while True:
        try:
            return SignageSettings(config_file=config_file, **overrides)
        except (SettingsValidationError, ValidationError) as e:
            field_name = _invalid_field(e)
            if field_name not in SignageSettings.model_fields or field_name in overrides:
                raise
            default = SignageSettings.model_fields[field_name].get_default(
                call_default_factory=True
            )
            logger.warning(
                f"Ignoring invalid environment value for {field_name}, using default: {e}"
            )
            overrides[field_name] = default


def _invalid_field(error: Exception) -> Optional[str]:
    """Top-level settings field named by a validation error, if any."""
    if isinstance(error, SettingsValidationError):
        return error.field_name.split(".")[0] if error.field_name else None
    if isinstance(error, ValidationError):
        for detail in error.errors():
            if detail["loc"]:
                return str(detail["loc"][0])
    return None
