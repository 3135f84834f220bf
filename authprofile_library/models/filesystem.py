"""Filesystem metadata models."""

from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict


class FileKind(str, Enum):
    """File type as reported by lstat."""

    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


class FileMetadata(BaseModel):
    """Subset of lstat results authprofile compares against expectations."""

    model_config = ConfigDict(frozen=True)

    kind: FileKind
    mode: int
    owner: int
    group: int
