"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path

import pendulum
import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from .domain.models import SchedulingWindow


class WindowConfig(BaseModel):
    """Daily window in which tasks may be booked."""
    timezone: str = "America/Los_Angeles"
    start_hour: int = 5
    end_hour: int = 24

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA zone."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("start_hour")
    @classmethod
    def validate_start_hour(cls, v: int) -> int:
        """Validate start hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"start_hour must be between 0 and 23, got {v}")
        return v

    @field_validator("end_hour")
    @classmethod
    def validate_end_hour(cls, v: int) -> int:
        """Validate end hour is between 1 and 24 (24 = midnight)."""
        if not 1 <= v <= 24:
            raise ValueError(f"end_hour must be between 1 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "WindowConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self


class SearchConfig(BaseModel):
    """Default settings for slot search and booking."""
    default_duration_minutes: int = 60
    step_minutes: int = 30
    max_candidates: int = 500
    min_search_days: int = 7
    reminder_minutes: int = 20

    @field_validator(
        "default_duration_minutes",
        "step_minutes",
        "max_candidates",
        "min_search_days",
    )
    @classmethod
    def validate_positive(cls, value: int, info: ValidationInfo) -> int:
        """Ensure counts and durations are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be greater than zero")
        return value

    @field_validator("reminder_minutes")
    @classmethod
    def validate_reminder(cls, value: int) -> int:
        if value < 0:
            raise ValueError("reminder_minutes must not be negative")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    calendar_id: str = "primary"
    window: WindowConfig = Field(default_factory=WindowConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)

    @property
    def timezone(self) -> str:
        return self.window.timezone

    def to_window(self) -> SchedulingWindow:
        """Build the domain scheduling window."""
        return SchedulingWindow(
            timezone=self.window.timezone,
            start_hour=self.window.start_hour,
            end_hour=self.window.end_hour
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of taskslot/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Load the configuration from an explicit path or the default location.

    An explicitly given file must exist; without one, a missing default
    file means built-in defaults.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig()
