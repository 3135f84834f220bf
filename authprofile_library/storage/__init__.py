"""Storage module for authprofile_library.

Resolves the host locations authprofile reads from.

Public Interface:
    - get_root_dir: Get AUTHPROFILE_ROOT
    - rooted: Re-root an absolute host path
    - get_config_dir: Get generated files directory
    - get_default_profiles_dir: Get distribution profiles directory
    - get_vendor_profiles_dir: Get vendor profiles directory
    - get_custom_profiles_dir: Get custom profiles directory
    - get_settings_path: Get settings file path
"""

from .paths import get_config_dir
from .paths import get_custom_profiles_dir
from .paths import get_default_profiles_dir
from .paths import get_root_dir
from .paths import get_settings_path
from .paths import get_vendor_profiles_dir
from .paths import rooted

__all__ = [
    "get_root_dir",
    "rooted",
    "get_config_dir",
    "get_default_profiles_dir",
    "get_vendor_profiles_dir",
    "get_custom_profiles_dir",
    "get_settings_path",
]
