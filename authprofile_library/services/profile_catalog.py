"""Profile catalog: merges default, vendor and custom profile directories.

Default profiles are never suppressed. A vendor profile is listed only when
no default profile has the same name. Custom profiles are always listed,
prefixed with ``custom/``, and sort after every other profile.
"""

import logging
from collections.abc import Iterable
from functools import cmp_to_key
from pathlib import Path

from authprofile_library.models.profiles import DirectoryListing
from authprofile_library.services.profile_directory import ProfileDirectoryReader
from authprofile_library.storage.paths import get_custom_profiles_dir
from authprofile_library.storage.paths import get_default_profiles_dir
from authprofile_library.storage.paths import get_vendor_profiles_dir

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom/"


def custom_profile_id(name: str) -> str:
    """Return the catalog id of a profile read from the custom directory."""
    return f"{CUSTOM_PREFIX}{name}"


def is_custom_profile(profile_id: str) -> bool:
    return profile_id.startswith(CUSTOM_PREFIX)


def custom_profile_name(profile_id: str) -> str:
    """Strip the custom prefix.

    Raises:
        ValueError: profile_id is not a custom profile id
    """
    if not is_custom_profile(profile_id):
        raise ValueError(f"{profile_id} is not a custom profile")
    return profile_id[len(CUSTOM_PREFIX) :]


def _sort_key_bytes(profile_id: str) -> bytes:
    return profile_id.encode("utf-8", "surrogateescape")


def compare_profile_ids(a: str | None, b: str | None) -> int:
    """Catalog ordering: custom ids last, otherwise byte-wise.

    None sorts after everything.
    """
    if a is None:
        return 0 if b is None else 1
    if b is None:
        return -1

    custom_a = is_custom_profile(a)
    custom_b = is_custom_profile(b)

    if custom_a and not custom_b:
        return 1
    if not custom_a and custom_b:
        return -1

    bytes_a = _sort_key_bytes(a)
    bytes_b = _sort_key_bytes(b)
    return (bytes_a > bytes_b) - (bytes_a < bytes_b)


def _names(source: DirectoryListing | Iterable[str]) -> list[str]:
    if isinstance(source, DirectoryListing):
        return list(source.profiles)
    return list(source)


def merge_profiles(
    default: DirectoryListing | Iterable[str],
    vendor: DirectoryListing | Iterable[str],
    custom: DirectoryListing | Iterable[str],
) -> list[str]:
    """Merge three profile listings into one sorted catalog.

    Args:
        default: Distribution profiles
        vendor: Vendor profiles, hidden when a default profile has the same name
        custom: Locally authored profiles, always listed as custom/<name>

    Returns:
        New list of unique profile ids

    Example:
        >>> merge_profiles(["sssd", "winbind"], ["winbind", "local"], ["mine"])
        ['local', 'sssd', 'winbind', 'custom/mine']
    """
    ids = _names(default)

    defaults = set(ids)
    for name in _names(vendor):
        if name in defaults:
            logger.debug(f"Vendor profile [{name}] is shadowed by a default profile")
            continue
        ids.append(name)

    ids.extend(custom_profile_id(name) for name in _names(custom))

    ids.sort(key=cmp_to_key(compare_profile_ids))

    return ids


class ProfileCatalogService:
    """Lists available profiles from the three profile source directories."""

    def __init__(self, reader: ProfileDirectoryReader | None = None) -> None:
        self.reader = reader or ProfileDirectoryReader()

    def merge_catalog(
        self,
        default_dir: str | Path | None = None,
        vendor_dir: str | Path | None = None,
        custom_dir: str | Path | None = None,
    ) -> list[str]:
        """Read and merge profile directories.

        Args:
            default_dir: Distribution profiles (default: get_default_profiles_dir())
            vendor_dir: Vendor profiles (default: get_vendor_profiles_dir())
            custom_dir: Custom profiles (default: get_custom_profiles_dir())

        Returns:
            Sorted list of unique profile ids

        Raises:
            OSError: A profile directory exists but cannot be read
        """
        default = self.reader.read(default_dir or get_default_profiles_dir())
        vendor = self.reader.read(vendor_dir or get_vendor_profiles_dir())
        custom = self.reader.read(custom_dir or get_custom_profiles_dir())

        catalog = merge_profiles(default, vendor, custom)
        logger.info(f"Found {len(catalog)} profiles")

        return catalog
