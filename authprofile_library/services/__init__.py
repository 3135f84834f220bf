"""Services for authprofile_library.

Public Interface:
    - FilesystemProbe: Read-only filesystem primitives
    - ProfileDirectoryReader: Lists profiles of one source directory
    - ProfileCatalogService / merge_profiles: Merged profile catalog
    - ActiveProfileLoader / ActiveProfileStore: Active profile and compilation
    - ConfigurationVerifier: Host state verification
"""

from .active_profile import ActiveProfileLoader
from .active_profile import ActiveProfileStore
from .active_profile import ArtifactLayout
from .active_profile import ProfileCompilationError
from .active_profile import ProfileLoadError
from .active_profile import ProfileNotFoundError
from .filesystem_probe import FilesystemProbe
from .profile_catalog import ProfileCatalogService
from .profile_catalog import merge_profiles
from .profile_directory import ProfileDirectoryReader
from .verifier import ConfigurationVerifier

__all__ = [
    "ActiveProfileLoader",
    "ActiveProfileStore",
    "ArtifactLayout",
    "ConfigurationVerifier",
    "FilesystemProbe",
    "ProfileCatalogService",
    "ProfileCompilationError",
    "ProfileDirectoryReader",
    "ProfileLoadError",
    "ProfileNotFoundError",
    "merge_profiles",
]
