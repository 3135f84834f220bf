"""authprofile library layer.

Business logic for inspecting the host's authentication profile. The
authprofile package is the command line layer on top of it.

Public Interface:
    Modules:
    - storage: Host path resolution
    - config: Settings loading
    - models: Shared data structures
    - services: Catalog merging, profile loading and verification
"""

from .services import ConfigurationVerifier
from .services import ProfileCatalogService

__all__ = [
    "ConfigurationVerifier",
    "ProfileCatalogService",
]
