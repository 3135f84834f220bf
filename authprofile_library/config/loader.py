"""Configuration loading for authprofile.

This module handles loading authprofile settings from an optional YAML file
and environment variables.

Contract:
- Inputs: Config file path, environment variables
- Outputs: AuthProfileSettings objects
- Side Effects: None (a missing config file means defaults)
"""

import logging
import os
from pathlib import Path

import yaml

from ..storage.paths import get_settings_path
from .settings import AuthProfileSettings

logger = logging.getLogger(__name__)


def get_config_path() -> Path:
    """Get path to config file.

    Returns:
        Path to config.yaml

    Example:
        >>> config_path = get_config_path()
        >>> assert config_path.name == "config.yaml"
    """
    return get_settings_path()


def _raw_scalar(text: str, key: str) -> str | None:
    """Return the unresolved text of a top-level scalar value.

    yaml reads ``file_mode: 644`` as the decimal int 644, so the mode is
    taken from the scalar as written and parsed as octal by the settings.
    """
    node = yaml.compose(text)
    if not isinstance(node, yaml.MappingNode):
        return None
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == key and isinstance(value_node, yaml.ScalarNode):
            return value_node.value
    return None


def load_config(config_path: Path | None = None) -> AuthProfileSettings:
    """Load authprofile configuration from YAML and environment.

    Environment variables take precedence over YAML settings.
    Variables should be prefixed with AUTHPROFILE_ (e.g., AUTHPROFILE_FILE_MODE).

    Args:
        config_path: Optional config file path (default: config.yaml in settings dir)

    Returns:
        Validated settings

    Example:
        >>> settings = load_config()
        >>> assert isinstance(settings, AuthProfileSettings)
    """
    if config_path is None:
        config_path = get_config_path()

    yaml_settings = {}
    if config_path.exists():
        try:
            text = config_path.read_text(encoding="utf-8")
            yaml_settings = yaml.safe_load(text) or {}
            if isinstance(yaml_settings, dict) and isinstance(yaml_settings.get("file_mode"), int):
                yaml_settings["file_mode"] = _raw_scalar(text, "file_mode")
            logger.debug(f"Loaded config from {config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.info("Using default settings and environment variables")
    else:
        logger.debug(f"No config file at {config_path}, using defaults")

    if not isinstance(yaml_settings, dict):
        logger.warning(f"Ignoring {config_path}: top level must be a mapping")
        yaml_settings = {}

    # Only pass YAML values that don't have corresponding env vars
    filtered_yaml = {}
    for key, value in yaml_settings.items():
        env_key = f"AUTHPROFILE_{str(key).upper()}"
        if env_key not in os.environ:
            filtered_yaml[key] = value

    settings = AuthProfileSettings(**filtered_yaml)

    logger.debug(
        f"Configuration loaded: file_mode={settings.file_mode:o}, "
        f"file_owner={settings.file_owner}, file_group={settings.file_group}"
    )

    return settings
