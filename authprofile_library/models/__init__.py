"""Models for authprofile library."""

from .filesystem import FileKind
from .filesystem import FileMetadata
from .profiles import ActiveProfileRecord
from .profiles import CompiledProfile
from .profiles import DirectoryListing
from .profiles import GeneratedFileSpec
from .profiles import SymlinkSpec
from .verification import ArtifactCheck
from .verification import ArtifactStatus
from .verification import ConflictResult
from .verification import LeftoverResult
from .verification import VerificationResult
from .verification import VerificationState

__all__ = [
    "ActiveProfileRecord",
    "ArtifactCheck",
    "ArtifactStatus",
    "CompiledProfile",
    "ConflictResult",
    "DirectoryListing",
    "FileKind",
    "FileMetadata",
    "GeneratedFileSpec",
    "LeftoverResult",
    "SymlinkSpec",
    "VerificationResult",
    "VerificationState",
]
