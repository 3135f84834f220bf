"""Active profile record and profile compilation.

Compilation turns a profile directory plus a feature set into the
CompiledProfile the verifier checks the host against. The artifact layout
(which files are generated and which system paths link to them) is fixed
data, passed around as an ArtifactLayout value.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from authprofile_library.config.settings import AuthProfileSettings
from authprofile_library.models.profiles import ActiveProfileRecord
from authprofile_library.models.profiles import CompiledProfile
from authprofile_library.models.profiles import GeneratedFileSpec
from authprofile_library.models.profiles import SymlinkSpec
from authprofile_library.services.filesystem_probe import FilesystemProbe
from authprofile_library.services.profile_catalog import custom_profile_name
from authprofile_library.services.profile_catalog import is_custom_profile
from authprofile_library.storage.paths import get_config_dir
from authprofile_library.storage.paths import get_custom_profiles_dir
from authprofile_library.storage.paths import get_default_profiles_dir
from authprofile_library.storage.paths import get_vendor_profiles_dir
from authprofile_library.storage.paths import rooted

logger = logging.getLogger(__name__)

ACTIVE_PROFILE_FILE = "authselect.conf"

# Generated file name -> system path that links to it
LAYOUT_TABLE: tuple[tuple[str, str], ...] = (
    ("system-auth", "/etc/pam.d/system-auth"),
    ("password-auth", "/etc/pam.d/password-auth"),
    ("fingerprint-auth", "/etc/pam.d/fingerprint-auth"),
    ("smartcard-auth", "/etc/pam.d/smartcard-auth"),
    ("postlogin", "/etc/pam.d/postlogin"),
    ("nsswitch.conf", "/etc/nsswitch.conf"),
    ("dconf-db", "/etc/dconf/db/distro.d/20-authselect"),
    ("dconf-locks", "/etc/dconf/db/distro.d/locks/20-authselect"),
)

_DIRECTIVE = re.compile(r'\s*\{(include|exclude) if "([^"]+)"\}')


class ProfileLoadError(Exception):
    """Raised when the active profile cannot be read or compiled."""


class ProfileNotFoundError(ProfileLoadError):
    """Raised when no profile directory exists for a profile id."""


class ProfileCompilationError(ProfileLoadError):
    """Raised when profile files cannot be turned into a CompiledProfile."""


@dataclass(frozen=True)
class LayoutEntry:
    name: str
    generated_path: str
    link_path: str


@dataclass(frozen=True)
class ArtifactLayout:
    """Every generated file and symbolic link authprofile may manage."""

    entries: tuple[LayoutEntry, ...]

    @classmethod
    def default(cls) -> "ArtifactLayout":
        """Build the layout under the configured root and config directory."""
        config_dir = get_config_dir()
        return cls(
            entries=tuple(
                LayoutEntry(name=name, generated_path=str(config_dir / name), link_path=str(rooted(link)))
                for name, link in LAYOUT_TABLE
            )
        )

    @property
    def generated_paths(self) -> list[str]:
        return [e.generated_path for e in self.entries]

    @property
    def symlinks(self) -> list[SymlinkSpec]:
        return [SymlinkSpec(path=e.link_path, destination=e.generated_path) for e in self.entries]


def filter_features(template: str, features: tuple[str, ...] | list[str]) -> str:
    """Apply per-line feature directives.

    A line ending in ``{include if "feature"}`` is kept only when the feature
    is enabled; ``{exclude if "feature"}`` drops the line when it is. The
    directive itself is removed from kept lines.
    """
    enabled = set(features)
    lines = []
    for line in template.splitlines(keepends=True):
        match = _DIRECTIVE.search(line)
        if match is None:
            lines.append(line)
            continue

        action, feature = match.groups()
        keep = (feature in enabled) if action == "include" else (feature not in enabled)
        if keep:
            lines.append(line[: match.start()] + line[match.end() :])

    return "".join(lines)


class ActiveProfileStore:
    """Reads the record of which profile is active on the host.

    The first non-empty, non-comment line of the record names the profile,
    every following one names an enabled feature.
    """

    def __init__(self, probe: FilesystemProbe | None = None, config_dir: Path | None = None) -> None:
        self.probe = probe or FilesystemProbe()
        self.path = (config_dir or get_config_dir()) / ACTIVE_PROFILE_FILE

    def read(self) -> ActiveProfileRecord | None:
        """Read the active profile record.

        Returns:
            The record, or None if no profile is recorded

        Raises:
            ProfileLoadError: The record exists but names no profile
            OSError: The record cannot be read
        """
        try:
            content = self.probe.read_textfile(self.path)
        except FileNotFoundError:
            logger.info(f"No active profile record at [{self.path}]")
            return None

        lines = [line.strip() for line in content.splitlines()]
        lines = [line for line in lines if line and not line.startswith("#")]
        if not lines:
            raise ProfileLoadError(f"Active profile record [{self.path}] is empty")

        record = ActiveProfileRecord(profile_id=lines[0], features=tuple(lines[1:]))
        logger.info(f"Active profile [{record.profile_id}] with features {list(record.features)}")
        return record


class ActiveProfileLoader:
    """Compiles profiles into the state they are expected to leave on disk."""

    def __init__(
        self,
        settings: AuthProfileSettings | None = None,
        probe: FilesystemProbe | None = None,
        layout: ArtifactLayout | None = None,
        store: ActiveProfileStore | None = None,
    ) -> None:
        self.settings = settings or AuthProfileSettings()
        self.probe = probe or FilesystemProbe()
        self.layout = layout or ArtifactLayout.default()
        self.store = store or ActiveProfileStore(probe=self.probe)

    def read_active(self) -> ActiveProfileRecord | None:
        return self.store.read()

    def locate(self, profile_id: str) -> Path:
        """Find the directory of a profile.

        Custom ids resolve to the custom directory. Plain ids resolve to the
        vendor directory first, then the default one.

        Raises:
            ProfileNotFoundError: No such profile
        """
        if is_custom_profile(profile_id):
            candidates = [get_custom_profiles_dir() / custom_profile_name(profile_id)]
        else:
            candidates = [get_vendor_profiles_dir() / profile_id, get_default_profiles_dir() / profile_id]

        for candidate in candidates:
            if candidate.is_dir():
                logger.debug(f"Profile [{profile_id}] found at {candidate}")
                return candidate

        raise ProfileNotFoundError(f"Profile [{profile_id}] was not found")

    def compile(self, profile_id: str, features: tuple[str, ...] | list[str] = ()) -> CompiledProfile:
        """Compile a profile with a feature set.

        Args:
            profile_id: Profile to compile
            features: Enabled features

        Returns:
            Expected files and symlinks for this profile

        Raises:
            ProfileNotFoundError: No such profile
            ProfileCompilationError: Profile files cannot be read or are inconsistent
        """
        profile_dir = self.locate(profile_id)
        features = tuple(features)

        files = []
        for entry in self.layout.entries:
            source = profile_dir / entry.name
            try:
                template = self.probe.read_textfile(source)
            except FileNotFoundError:
                logger.debug(f"Profile [{profile_id}] has no {entry.name}, expecting empty file")
                template = None
            except OSError as e:
                raise ProfileCompilationError(f"Unable to read {source}: {e}") from e

            files.append(
                GeneratedFileSpec(
                    path=entry.generated_path,
                    body=filter_features(template, features) if template is not None else None,
                    mode=self.settings.file_mode,
                    owner=self.settings.file_owner,
                    group=self.settings.file_group,
                )
            )

        try:
            compiled = CompiledProfile(
                profile_id=profile_id,
                features=features,
                files=tuple(files),
                symlinks=tuple(self.layout.symlinks),
            )
        except ValidationError as e:
            raise ProfileCompilationError(f"Profile [{profile_id}] is inconsistent: {e}") from e

        logger.info(f"Compiled profile [{profile_id}]: {len(compiled.files)} files, {len(compiled.symlinks)} links")
        return compiled
