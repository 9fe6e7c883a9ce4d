"""
Configuration management for ats-grid.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ats_grid.utils.constants import (
    DEFAULT_COLUMN_WIDTH,
    DEFAULT_MIN_COLUMN_WIDTH,
    DEFAULT_OVERSCAN,
    DENSITY_ROW_HEIGHTS,
    MIN_ROW_HEIGHT,
    NullsPosition,
    TableDensity,
)


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
PACKAGE_DIR = ROOT_DIR / "ats_grid"
DATA_DIR = ROOT_DIR / "data"


class GridSettings(BaseSettings):
    """Grid engine defaults."""

    model_config = SettingsConfigDict(env_prefix="GRID_")

    density: TableDensity = TableDensity.DEFAULT
    row_height: Optional[float] = None  # Overrides the density preset when set
    overscan: int = DEFAULT_OVERSCAN
    nulls_position: NullsPosition = NullsPosition.LAST
    default_column_width: int = DEFAULT_COLUMN_WIDTH
    min_column_width: int = DEFAULT_MIN_COLUMN_WIDTH
    min_row_height: float = MIN_ROW_HEIGHT
    page_size: Optional[int] = None  # Paginate with this many rows per page when set
    groups_expanded_by_default: bool = True

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: Optional[int]) -> Optional[int]:
        """A page must hold at least one row."""
        if v is not None and v < 1:
            raise ValueError("page_size must be >= 1")
        return v

    @field_validator("overscan")
    @classmethod
    def validate_overscan(cls, v: int) -> int:
        """Overscan cannot be negative."""
        if v < 0:
            raise ValueError("overscan must be >= 0")
        return v

    @field_validator("min_row_height")
    @classmethod
    def validate_min_row_height(cls, v: float) -> float:
        """A zero minimum would let the virtualizer loop forever."""
        if v <= 0:
            raise ValueError("min_row_height must be > 0")
        return v

    @property
    def effective_row_height(self) -> float:
        """Row height used when the caller supplies no height function."""
        if self.row_height is not None and self.row_height > 0:
            return float(self.row_height)
        return float(DENSITY_ROW_HEIGHTS[self.density])


class ViewStoreSettings(BaseSettings):
    """Saved view persistence configuration."""

    model_config = SettingsConfigDict(env_prefix="VIEWS_")

    backend: Literal["memory", "json", "mongo"] = "json"
    json_path: Path = DATA_DIR / "saved_views.json"
    collection_name: str = "saved_views"


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = "localhost"
    port: int = 27017
    name: str = "ats_grid"
    username: str | None = None
    password: str | None = None
    timeout_ms: int = 5000


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "ats_grid.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True
    audit_file_path: Optional[Path] = None  # Defaults to audit.log beside file_path
    audit_retention: str = "1 year"


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "ats-grid"
    version: str = "0.1.0"
    description: str = "Headless data-grid core for applicant tracking tables"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    grid: GridSettings = Field(default_factory=GridSettings)
    views: ViewStoreSettings = Field(default_factory=ViewStoreSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings
