"""Configuration module for authprofile_library.

Provides settings loading from YAML and environment variables.

Public Interface:
    - AuthProfileSettings: Settings model
    - load_config: Load configuration
    - get_config_path: Get config file path
"""

from .loader import get_config_path
from .loader import load_config
from .settings import AuthProfileSettings

__all__ = [
    "AuthProfileSettings",
    "load_config",
    "get_config_path",
]
