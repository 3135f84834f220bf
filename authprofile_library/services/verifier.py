"""Configuration state verifier.

Checks that the files and symbolic links installed on the host match what the
active profile is expected to produce, or, when no profile is active, that
nothing authprofile would have created is left behind.

Every artifact is checked independently and the scan continues past invalid
ones, so a single run reports every problem. Missing and unreadable artifacts
are validation failures. Any other OSError stops the run and propagates.
"""

import logging

from authprofile_library.config.settings import AuthProfileSettings
from authprofile_library.models.filesystem import FileKind
from authprofile_library.models.profiles import CompiledProfile
from authprofile_library.models.profiles import GeneratedFileSpec
from authprofile_library.models.profiles import SymlinkSpec
from authprofile_library.models.verification import ArtifactCheck
from authprofile_library.models.verification import ConflictResult
from authprofile_library.models.verification import LeftoverResult
from authprofile_library.models.verification import VerificationResult
from authprofile_library.models.verification import VerificationState
from authprofile_library.services.active_profile import ActiveProfileLoader
from authprofile_library.services.active_profile import ArtifactLayout
from authprofile_library.services.filesystem_probe import FilesystemProbe

logger = logging.getLogger(__name__)


def matches_generated_content(content: str, expected: str | None) -> bool:
    """Check a generated file against its expected body.

    Generated files start with a preamble of two comment lines and one empty
    line. The comment lines carry a timestamp, so only their shape is checked.
    Everything after the empty line must equal the expected body exactly.

    Example:
        >>> matches_generated_content("# Generated 2024-01-01\\n# Do not edit\\n\\nbody\\n", "body\\n")
        True
    """
    if expected is None:
        expected = ""

    if not content.startswith("#"):
        return False

    end = content.find("\n")
    if end == -1:
        return False
    rest = content[end + 1 :]

    if not rest.startswith("#"):
        return False

    end = rest.find("\n")
    if end == -1:
        return False
    rest = rest[end + 1 :]

    if not rest.startswith("\n"):
        return False

    return rest[1:] == expected


class ConfigurationVerifier:
    """Compares the host filesystem with the expected profile state."""

    def __init__(
        self,
        loader: ActiveProfileLoader | None = None,
        probe: FilesystemProbe | None = None,
        layout: ArtifactLayout | None = None,
        settings: AuthProfileSettings | None = None,
    ) -> None:
        self.settings = settings or AuthProfileSettings()
        self.probe = probe or FilesystemProbe()
        self.layout = layout or ArtifactLayout.default()
        self.loader = loader or ActiveProfileLoader(settings=self.settings, probe=self.probe, layout=self.layout)

    def verify_active_configuration(self) -> VerificationResult:
        """Verify the host against the profile recorded as active.

        Returns:
            CONFIGURED result with file and link checks, or NOT_CONFIGURED
            result with leftover checks when no profile is recorded

        Raises:
            ProfileLoadError: The active profile cannot be loaded
            OSError: A check could not run
        """
        record = self.loader.read_active()
        if record is None:
            logger.info("No existing configuration detected, checking for leftovers")
            leftovers = self.check_leftovers()
            return VerificationResult(state=VerificationState.NOT_CONFIGURED, checks=leftovers.checks)

        compiled = self.loader.compile(record.profile_id, record.features)
        return self.verify_profile(compiled)

    def verify_profile(self, compiled: CompiledProfile) -> VerificationResult:
        """Check every generated file and symbolic link of a compiled profile."""
        checks = [self.check_generated_file(spec) for spec in compiled.files]
        checks += [self.check_symlink(link) for link in compiled.symlinks]

        result = VerificationResult(
            state=VerificationState.CONFIGURED,
            profile_id=compiled.profile_id,
            features=compiled.features,
            checks=checks,
        )

        if result.valid:
            logger.info(f"Configuration of profile [{compiled.profile_id}] is valid")
        else:
            logger.warning(
                f"Configuration of profile [{compiled.profile_id}] is not valid: "
                f"{len(result.diagnostics)} problems found"
            )

        return result

    def check_generated_file(self, spec: GeneratedFileSpec) -> ArtifactCheck:
        """Check content and metadata of one generated file.

        Raises:
            OSError: The file could not be read for a reason other than
                not-found or permission denied
        """
        try:
            content = self.probe.read_textfile(spec.path)
        except FileNotFoundError:
            return self._modified(spec, f"[{spec.path}] does not exist!")
        except PermissionError as e:
            return self._modified(spec, f"Unable to read [{spec.path}] [{e.errno}]: {e.strerror}")

        if not matches_generated_content(content, spec.expected_body):
            return self._modified(spec, f"[{spec.path}] has unexpected content!")

        check = self.check_metadata(spec)
        if not check.ok:
            logger.warning(f"File [{spec.path}] was modified outside authprofile!")
        return check

    def check_metadata(self, spec: GeneratedFileSpec) -> ArtifactCheck:
        """Check type, permission bits, owner and group of a generated file."""
        path = spec.path
        logger.info(f"Checking mode of file [{path}]")

        meta = self.probe.stat(path)
        if meta is None:
            return self._invalid(path, f"[{path}] does not exist!")

        if meta.kind != FileKind.REGULAR:
            return self._invalid(path, f"[{path}] is not a regular file!")

        if meta.mode != spec.mode:
            return self._invalid(path, f"[{path}] has wrong mode [{meta.mode:04o}], expected [{spec.mode:04o}]!")

        if spec.owner is not None and meta.owner != spec.owner:
            return self._invalid(path, f"[{path}] has wrong owner [{meta.owner}], expected [{spec.owner}]!")

        if spec.group is not None and meta.group != spec.group:
            return self._invalid(path, f"[{path}] has wrong group [{meta.group}], expected [{spec.group}]!")

        return ArtifactCheck.valid(path)

    def check_symlink(self, link: SymlinkSpec) -> ArtifactCheck:
        """Check that a symbolic link exists and points to its generated file."""
        logger.info(f"Checking link [{link.path}]")

        meta = self.probe.stat(link.path)
        if meta is None:
            return self._invalid(link.path, f"[{link.path}] was not created by authprofile!")

        if meta.kind != FileKind.SYMLINK:
            return self._invalid(link.path, f"[{link.path}] is not a symbolic link, it was not created by authprofile!")

        target = self.probe.read_link(link.path)
        if not self._link_matches(target, link.destination):
            return self._invalid(link.path, f"Link [{link.path}] does not point to [{link.destination}]")

        return ArtifactCheck.valid(link.path)

    def check_leftovers(self) -> LeftoverResult:
        """Check that no generated file or authprofile symbolic link remains.

        Foreign files and links to other targets at the symlink paths are
        tolerated, only links that point to a generated file are leftovers.

        Raises:
            OSError: A path could not be inspected
        """
        checks = []

        for path in self.layout.generated_paths:
            if self._exists(path):
                checks.append(self._invalid(path, f"File [{path}] is still present"))
            else:
                checks.append(ArtifactCheck.not_applicable(path))

        for link in self.layout.symlinks:
            if not self._exists(link.path):
                checks.append(ArtifactCheck.not_applicable(link.path))
                continue
            checks.append(self._check_not_our_link(link))

        result = LeftoverResult(checks=checks)
        if result.valid:
            logger.info("No leftovers found")
        return result

    def check_install_conflicts(self) -> ConflictResult:
        """Report every symbolic link path that is already occupied.

        Raises:
            OSError: A path could not be inspected
        """
        checks = []
        for link in self.layout.symlinks:
            if self._exists(link.path):
                checks.append(self._invalid(link.path, f"File [{link.path}] exists but it needs to be overwritten!"))
            else:
                checks.append(ArtifactCheck.valid(link.path))

        return ConflictResult(checks=checks)

    def _check_not_our_link(self, link: SymlinkSpec) -> ArtifactCheck:
        logger.info(f"Checking that file [{link.path}] is not an authprofile symbolic link")

        meta = self.probe.stat(link.path)
        if meta is None or meta.kind != FileKind.SYMLINK:
            return ArtifactCheck.valid(link.path)

        target = self.probe.read_link(link.path)
        if self._link_matches(target, link.destination):
            return self._invalid(link.path, f"Symbolic link [{link.path}] to [{link.destination}] still exists!")

        return ArtifactCheck.valid(link.path)

    def _link_matches(self, target: str, destination: str) -> bool:
        if self.settings.strict_link_targets:
            return target == destination
        # Compare only as many characters as the link target holds
        return destination.startswith(target)

    def _exists(self, path: str) -> bool:
        try:
            return self.probe.exists(path)
        except OSError as e:
            logger.error(f"Error while trying to access file [{path}] [{e.errno}]: {e.strerror}")
            raise

    def _modified(self, spec: GeneratedFileSpec, reason: str) -> ArtifactCheck:
        check = self._invalid(spec.path, reason)
        logger.warning(f"File [{spec.path}] was modified outside authprofile!")
        return check

    def _invalid(self, path: str, reason: str) -> ArtifactCheck:
        logger.error(reason)
        return ArtifactCheck.invalid(path, reason)
