"""Configuration loader with YAML and environment variable support.

This module provides a configuration loader that reads from ~/.config/superscript/config.yaml
and allows environment variable overrides using SUPERSCRIPT_* prefix.

Environment variables:
- SUPERSCRIPT_NOTES_ROOT_DIR: Override notes folder
- SUPERSCRIPT_AUTOSAVE_DEBOUNCE_MS: Override autosave quiet period
- SUPERSCRIPT_COLLISIONS_CASE_POLICY: Override case policy for collision checks
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from superscript.models.config import Config
from superscript.utils.logging import get_logger

logger = get_logger(__name__)


def default_config_path() -> Path:
    """Return ~/.config/superscript/config.yaml for the current user."""
    return Path.home() / ".config" / "superscript" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Unlike a missing file, which falls back to defaults, an unreadable or
    invalid file is an error.

    Args:
        config_path: Path to config file. If None, uses ~/.config/superscript/config.yaml

    Returns:
        Validated Config object

    Raises:
        ValueError: If config file or an override is invalid
    """
    if config_path is None:
        config_path = default_config_path()

    if config_path.exists():
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("config_parse_error", path=str(config_path), error=str(e))
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")
        logger.info("config_loaded", path=str(config_path))
    else:
        data = {}

    data = _apply_env_overrides(data)

    try:
        return Config(**data)
    except ValidationError as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Environment variables use the format: SUPERSCRIPT_SECTION_KEY
    For example: SUPERSCRIPT_NOTES_ROOT_DIR sets data['notes']['root_dir']

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    for section in ("notes", "autosave", "collisions"):
        if not isinstance(data.get(section), dict):
            data[section] = {}

    if env_root := os.getenv("SUPERSCRIPT_NOTES_ROOT_DIR"):
        data["notes"]["root_dir"] = env_root

    if env_debounce := os.getenv("SUPERSCRIPT_AUTOSAVE_DEBOUNCE_MS"):
        try:
            data["autosave"]["debounce_ms"] = int(env_debounce)
        except ValueError:
            logger.warning("config_env_ignored", variable="SUPERSCRIPT_AUTOSAVE_DEBOUNCE_MS", value=env_debounce)

    if env_policy := os.getenv("SUPERSCRIPT_COLLISIONS_CASE_POLICY"):
        data["collisions"]["case_policy"] = env_policy.lower()

    return data
