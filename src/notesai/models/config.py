"""Configuration models for notesai."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class StorageConfig(BaseModel):
    """Configuration for the JSON document store."""

    data_dir: str = Field(
        default="~/.local/share/notesai",
        description="Directory holding index.json and one JSON file per document"
    )

    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, v: str) -> str:
        """Expand ~ in the data directory."""
        return str(Path(v).expanduser())

    model_config = {"frozen": True, "validate_default": True}  # Expand ~ in defaults too


class EditorConfig(BaseModel):
    """Configuration for editing behaviour."""

    autosave_delay: float = Field(
        default=1.5,
        gt=0,
        description="Seconds of inactivity before an autosave fires"
    )

    history_limit: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum undo snapshots kept (None = unlimited)"
    )

    model_config = {"frozen": True}


class PaletteConfig(BaseModel):
    """Configuration for command palette positioning."""

    menu_width: int = Field(
        default=272,
        gt=0,
        description="Fallback menu width when the menu has not been measured"
    )

    menu_height: int = Field(
        default=300,
        gt=0,
        description="Fallback menu height when the menu has not been measured"
    )

    edge_margin: int = Field(
        default=20,
        ge=0,
        description="Gap kept between a clamped menu and the viewport edge"
    )

    model_config = {"frozen": True}


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class LoggingConfig(BaseModel):
    """Configuration for the JSON log file."""

    log_dir: str = Field(
        default="~/.cache/notesai/logs",
        description="Directory holding notesai.log"
    )

    level: str = Field(
        default="INFO",
        description="Minimum level written: DEBUG, INFO, WARNING or ERROR"
    )

    @field_validator("log_dir")
    @classmethod
    def expand_log_dir(cls, v: str) -> str:
        """Expand ~ in the log directory."""
        return str(Path(v).expanduser())

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize the level name and reject unknown levels."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level

    model_config = {"frozen": True, "validate_default": True}  # Expand ~ in defaults too


class Configuration(BaseModel):
    """Root configuration for notesai."""

    storage: StorageConfig = Field(default_factory=StorageConfig, description="Document store settings")
    editor: EditorConfig = Field(default_factory=EditorConfig, description="Editor settings")
    palette: PaletteConfig = Field(default_factory=PaletteConfig, description="Command palette settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Log file settings")

    model_config = {"frozen": True}
