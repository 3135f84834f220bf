"""Profile-related models for authprofile_library."""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import model_validator


class GeneratedFileSpec(BaseModel):
    """One file the active profile is responsible for creating."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Absolute path of the generated file")
    body: str | None = Field(default=None, description="Expected content after the preamble, None means empty")
    mode: int = Field(default=0o644, description="Expected permission bits")
    owner: int | None = Field(default=0, description="Expected uid, None means don't care")
    group: int | None = Field(default=0, description="Expected gid, None means don't care")

    @property
    def expected_body(self) -> str:
        return self.body if self.body is not None else ""


class SymlinkSpec(BaseModel):
    """One symbolic link pointing a system service at a generated file."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Path of the symbolic link")
    destination: str = Field(description="Generated file the link must point to")


class CompiledProfile(BaseModel):
    """Expected on-disk state of one profile compiled with a feature set."""

    model_config = ConfigDict(frozen=True)

    profile_id: str = Field(description="Profile identifier")
    features: tuple[str, ...] = Field(default=(), description="Enabled features")
    files: tuple[GeneratedFileSpec, ...] = Field(default=(), description="Generated files in layout order")
    symlinks: tuple[SymlinkSpec, ...] = Field(default=(), description="Symbolic links in layout order")

    @model_validator(mode="after")
    def check_link_destinations(self) -> "CompiledProfile":
        paths = [f.path for f in self.files]
        for link in self.symlinks:
            if paths.count(link.destination) != 1:
                raise ValueError(
                    f"Symbolic link {link.path} must point to exactly one generated file, "
                    f"{link.destination} matches {paths.count(link.destination)}"
                )
        return self


class ActiveProfileRecord(BaseModel):
    """Profile currently recorded as active on the host."""

    model_config = ConfigDict(frozen=True)

    profile_id: str = Field(description="Active profile identifier")
    features: tuple[str, ...] = Field(default=(), description="Features enabled for the active profile")


class DirectoryListing(BaseModel):
    """Profile identifiers found as immediate subdirectories of one source directory."""

    path: str = Field(description="Directory that was read")
    exists: bool = Field(default=True, description="Whether the directory was present")
    profiles: list[str] = Field(default_factory=list, description="Subdirectory names in read order")
