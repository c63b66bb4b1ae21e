"""Configuration loader with YAML and environment variable support.

This module provides a configuration loader that reads from ~/.config/notesai/config.yaml
and allows environment variable overrides using NOTESAI_* prefix.

Environment variables:
- NOTESAI_DATA_DIR: Override storage.data_dir
- NOTESAI_AUTOSAVE_DELAY: Override editor.autosave_delay (seconds)
- NOTESAI_HISTORY_LIMIT: Override editor.history_limit
- NOTESAI_LOG_DIR: Override logging.log_dir
- NOTESAI_LOG_LEVEL: Override logging.level (unknown levels are ignored)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from notesai.models.config import LOG_LEVELS, Configuration


def load_config(config_path: Optional[Path] = None) -> Configuration:
    """Load configuration from YAML file with environment variable overrides.

    A missing config file is not an error: every setting has a default.

    Args:
        config_path: Path to config file. If None, uses ~/.config/notesai/config.yaml

    Returns:
        Validated Configuration object

    Raises:
        ValueError: If the config file is not a YAML mapping or validation fails
    """
    if config_path is None:
        config_path = Path.home() / ".config" / "notesai" / "config.yaml"

    if config_path.exists():
        with config_path.open() as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")
    else:
        data = {}

    data = _apply_env_overrides(data)

    # Pydantic will validate the structure
    return Configuration(**data)


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    for section in ("storage", "editor", "palette", "logging"):
        if data.get(section) is None:
            data[section] = {}

    if env_data_dir := os.getenv("NOTESAI_DATA_DIR"):
        data["storage"]["data_dir"] = env_data_dir

    if env_delay := os.getenv("NOTESAI_AUTOSAVE_DELAY"):
        try:
            data["editor"]["autosave_delay"] = float(env_delay)
        except ValueError:
            pass  # Invalid value, ignore

    if env_limit := os.getenv("NOTESAI_HISTORY_LIMIT"):
        try:
            data["editor"]["history_limit"] = int(env_limit)
        except ValueError:
            pass  # Invalid value, ignore

    if env_log_dir := os.getenv("NOTESAI_LOG_DIR"):
        data["logging"]["log_dir"] = env_log_dir

    if env_log_level := os.getenv("NOTESAI_LOG_LEVEL"):
        if env_log_level.upper() in LOG_LEVELS:
            data["logging"]["level"] = env_log_level.upper()

    return data
