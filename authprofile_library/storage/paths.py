"""Path resolution for authprofile filesystem locations.

This module resolves every location authprofile inspects relative to
AUTHPROFILE_ROOT, so a whole host layout can be pointed at a staging tree.

Contract:
- Inputs: Environment variables (AUTHPROFILE_ROOT and per-directory overrides)
- Outputs: Resolved Path objects
- Side Effects: None (directories are never created, the tool is read-only)
"""

import os
from pathlib import Path


def get_root_dir() -> Path:
    """Get AUTHPROFILE_ROOT from environment.

    Returns:
        Path to filesystem root (default: /)
    """
    root = os.environ.get("AUTHPROFILE_ROOT", "/")
    return Path(root).resolve()


def rooted(path: str | Path) -> Path:
    """Re-root an absolute host path under AUTHPROFILE_ROOT.

    Args:
        path: Absolute host path such as /etc/nsswitch.conf

    Returns:
        The same path below the configured root

    Example:
        >>> os.environ["AUTHPROFILE_ROOT"] = "/srv/image"
        >>> str(rooted("/etc/nsswitch.conf"))
        '/srv/image/etc/nsswitch.conf'
    """
    return get_root_dir() / Path(path).relative_to("/")


def _override(env_name: str, default: Path) -> Path:
    env_override: str | None = os.environ.get(env_name)
    if env_override is not None:
        return Path(env_override).resolve()
    return default


def get_config_dir() -> Path:
    """Get the directory holding generated files and the active profile record.

    Returns:
        Path to config directory ($AUTHPROFILE_ROOT/etc/authselect)

    Environment Variables:
        AUTHPROFILE_CONFIG_DIR: Override config directory location
    """
    return _override("AUTHPROFILE_CONFIG_DIR", rooted("/etc/authselect"))


def get_default_profiles_dir() -> Path:
    """Get the distribution profile directory.

    Returns:
        Path to default profiles ($AUTHPROFILE_ROOT/usr/share/authselect/default)
    """
    return _override("AUTHPROFILE_DEFAULT_DIR", rooted("/usr/share/authselect/default"))


def get_vendor_profiles_dir() -> Path:
    """Get the vendor profile directory.

    Returns:
        Path to vendor profiles ($AUTHPROFILE_ROOT/usr/share/authselect/vendor)
    """
    return _override("AUTHPROFILE_VENDOR_DIR", rooted("/usr/share/authselect/vendor"))


def get_custom_profiles_dir() -> Path:
    """Get the locally authored profile directory.

    Returns:
        Path to custom profiles (<config dir>/custom)
    """
    return _override("AUTHPROFILE_CUSTOM_DIR", get_config_dir() / "custom")


def get_settings_path() -> Path:
    """Get path to the authprofile settings file.

    Returns:
        Path to config.yaml ($AUTHPROFILE_ROOT/etc/authprofile/config.yaml)
    """
    return _override("AUTHPROFILE_SETTINGS", rooted("/etc/authprofile/config.yaml"))
