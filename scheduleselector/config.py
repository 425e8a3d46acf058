"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Any, List

import pendulum
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .domain.exceptions import ConfigError
from .domain.grid_builder import build_grid
from .domain.models import Grid, Selection, to_selection

CONFIG_FILE_NAME = "selector.yaml"


def _today() -> date:
    return pendulum.today().date()


class SelectorConfig(BaseModel):
    """
    Grid and gesture configuration.

    Range checks on the grid parameters happen when the grid is built, so a
    bad value fails with ``ConfigError`` instead of being clamped.
    """
    start_date: date = Field(default_factory=_today)
    num_days: int = 7
    min_time: int = 9
    max_time: int = 23
    hourly_chunks: int = 1
    selection_scheme: str = "square"
    timezone: str = "UTC"
    date_format: str = "M/D"  # pendulum tokens, display only
    time_format: str = "hA"
    selection: List[datetime] = Field(default_factory=list)

    @field_validator("start_date", mode="before")
    @classmethod
    def drop_time_of_day(cls, value: Any) -> Any:
        """Accept datetimes for start_date; only the calendar date matters."""
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("selection_scheme")
    @classmethod
    def validate_scheme_name(cls, value: str) -> str:
        """Ensure a scheme name is given; whether it exists depends on the registry."""
        value = value.strip()
        if not value:
            raise ValueError("selection_scheme must not be empty")
        return value

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    def build_grid(self) -> Grid:
        """
        Build the slot grid described by this configuration.

        Raises:
            ConfigError: If the grid parameters are out of range
        """
        return build_grid(
            start_date=self.start_date,
            num_days=self.num_days,
            min_time=self.min_time,
            max_time=self.max_time,
            hourly_chunks=self.hourly_chunks,
            timezone=self.timezone,
        )

    def initial_selection(self) -> Selection:
        return to_selection(self.selection, timezone=self.timezone)

    def with_overrides(self, **overrides: Any) -> "SelectorConfig":
        """
        Return a validated copy with the given non-None fields replaced.

        Raises:
            ConfigError: If an override is invalid
        """
        data = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return type(self).model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration override: {exc}") from exc

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "SelectorConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            SelectorConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a {CONFIG_FILE_NAME} file or pass --config."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping at the root level.")

        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for selector.yaml in current directory
    config_path = Path.cwd() / CONFIG_FILE_NAME

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / CONFIG_FILE_NAME

    return config_path
