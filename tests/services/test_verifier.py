"""Test ConfigurationVerifier."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from authprofile_library.config.settings import AuthProfileSettings
from authprofile_library.models.profiles import CompiledProfile
from authprofile_library.models.profiles import GeneratedFileSpec
from authprofile_library.models.verification import ArtifactStatus
from authprofile_library.models.verification import VerificationState
from authprofile_library.services.active_profile import ArtifactLayout
from authprofile_library.services.active_profile import ProfileNotFoundError
from authprofile_library.services.verifier import ConfigurationVerifier
from authprofile_library.services.verifier import matches_generated_content


@pytest.mark.unit
class TestMatchesGeneratedContent:
    """Test the generated-file preamble convention."""

    def test_preamble_with_any_date(self) -> None:
        for date in ("2024-01-01", "1999-12-31", "whenever"):
            content = f"# generated {date}\n# do not edit\n\nexpected-body\n"
            assert matches_generated_content(content, "expected-body\n")

    def test_missing_blank_line(self) -> None:
        content = "# generated\n# do not edit\n# third\nexpected-body\n"

        assert not matches_generated_content(content, "expected-body\n")

    def test_body_mismatch(self) -> None:
        assert not matches_generated_content("# a\n# b\n\nbody\n", "other\n")

    def test_body_must_match_exactly(self) -> None:
        assert not matches_generated_content("# a\n# b\n\nbody\n\n", "body\n")

    def test_first_line_not_a_comment(self) -> None:
        assert not matches_generated_content("a\n# b\n\nbody\n", "body\n")

    def test_second_line_not_a_comment(self) -> None:
        assert not matches_generated_content("# a\nb\n\nbody\n", "body\n")

    def test_truncated_preamble(self) -> None:
        assert not matches_generated_content("", "")
        assert not matches_generated_content("# a", "")
        assert not matches_generated_content("# a\n# b", "")
        assert not matches_generated_content("# a\n# b\n", "")

    def test_none_expected_means_empty(self) -> None:
        assert matches_generated_content("# a\n# b\n\n", None)
        assert not matches_generated_content("# a\n# b\n\nx", None)


@pytest.fixture
def compiled(layout: ArtifactLayout, settings: AuthProfileSettings) -> CompiledProfile:
    files = tuple(
        GeneratedFileSpec(
            path=path,
            body=f"body of {Path(path).name}\n",
            mode=settings.file_mode,
            owner=settings.file_owner,
            group=settings.file_group,
        )
        for path in layout.generated_paths
    )
    return CompiledProfile(profile_id="sssd", files=files, symlinks=tuple(layout.symlinks))


@pytest.fixture
def verifier(layout: ArtifactLayout, settings: AuthProfileSettings) -> ConfigurationVerifier:
    return ConfigurationVerifier(layout=layout, settings=settings)


@pytest.mark.integration
class TestVerifyProfile:
    """Test verification of an installed profile."""

    def test_installed_profile_is_valid(self, verifier, compiled, install) -> None:
        install(compiled)

        result = verifier.verify_profile(compiled)

        assert result.state == VerificationState.CONFIGURED
        assert result.valid
        assert result.diagnostics == []
        assert all(c.status == ArtifactStatus.VALID for c in result.checks)

    def test_file_without_body_holds_only_preamble(self, verifier, preamble: str, tmp_path: Path) -> None:
        path = tmp_path / "dconf-db"
        path.write_text(preamble)
        path.chmod(0o644)
        spec = GeneratedFileSpec(path=str(path), owner=None, group=None)

        assert verifier.check_generated_file(spec).ok

        path.write_text(preamble + "extra\n")

        assert not verifier.check_generated_file(spec).ok

    def test_all_files_absent(self, verifier, compiled) -> None:
        """Every missing file is reported and links are still checked."""
        result = verifier.verify_profile(compiled)

        assert not result.valid
        assert len(result.checks) == len(compiled.files) + len(compiled.symlinks)
        assert len(result.diagnostics) >= len(compiled.files)
        for spec in compiled.files:
            assert f"[{spec.path}] does not exist!" in result.diagnostics
        for link in compiled.symlinks:
            assert f"[{link.path}] was not created by authprofile!" in result.diagnostics

    def test_one_modified_file(self, verifier, compiled, install, preamble) -> None:
        install(compiled)
        target = Path(compiled.files[0].path)
        target.write_text(preamble + "tampered\n")

        result = verifier.verify_profile(compiled)

        assert not result.valid
        assert result.diagnostics == [f"[{target}] has unexpected content!"]

    def test_timestamp_change_is_tolerated(self, verifier, compiled, install) -> None:
        install(compiled)
        spec = compiled.files[0]
        Path(spec.path).write_text("# Generated by authselect on Tue Feb  2 12:34:56 2027\n# x\n\n" + spec.body)

        assert verifier.verify_profile(compiled).valid

    def test_wrong_mode(self, verifier, compiled, install) -> None:
        install(compiled)
        target = Path(compiled.files[0].path)
        target.chmod(0o600)

        result = verifier.verify_profile(compiled)

        assert not result.valid
        assert result.diagnostics == [f"[{target}] has wrong mode [0600], expected [0644]!"]

    def test_wrong_owner(self, verifier, compiled, install) -> None:
        install(compiled)
        spec = compiled.files[0].model_copy(update={"owner": os.getuid() + 1})

        check = verifier.check_generated_file(spec)

        assert check.status == ArtifactStatus.INVALID
        assert "wrong owner" in check.reason

    def test_wrong_group(self, verifier, compiled, install) -> None:
        install(compiled)
        spec = compiled.files[0].model_copy(update={"group": os.getgid() + 1})

        check = verifier.check_generated_file(spec)

        assert check.status == ArtifactStatus.INVALID
        assert "wrong group" in check.reason

    def test_owner_and_group_dont_care(self, verifier, compiled, install) -> None:
        install(compiled)
        spec = compiled.files[0].model_copy(update={"owner": None, "group": None})

        assert verifier.check_generated_file(spec).ok

    def test_generated_file_replaced_by_link(self, verifier, compiled, install, preamble, tmp_path: Path) -> None:
        install(compiled)
        spec = compiled.files[0]
        real = tmp_path / "elsewhere"
        real.write_text(preamble + spec.body)
        Path(spec.path).unlink()
        Path(spec.path).symlink_to(real)

        check = verifier.check_generated_file(spec)

        assert check.reason == f"[{spec.path}] is not a regular file!"

    def test_permission_denied_is_a_validation_failure(self, verifier, compiled, install) -> None:
        install(compiled)
        denied = compiled.files[1].path
        real_read = verifier.probe.read_textfile

        def read(path):
            if str(path) == denied:
                raise PermissionError(13, "Permission denied")
            return real_read(path)

        with patch.object(verifier.probe, "read_textfile", side_effect=read):
            result = verifier.verify_profile(compiled)

        assert not result.valid
        assert result.diagnostics == [f"Unable to read [{denied}] [13]: Permission denied"]

    def test_io_error_aborts(self, verifier, compiled, install) -> None:
        install(compiled)

        with patch.object(verifier.probe, "read_textfile", side_effect=OSError(5, "Input/output error")):
            with pytest.raises(OSError) as exc_info:
                verifier.verify_profile(compiled)

        assert exc_info.value.errno == 5

    def test_memory_error_aborts(self, verifier, compiled, install) -> None:
        install(compiled)

        with patch.object(verifier.probe, "read_textfile", side_effect=MemoryError):
            with pytest.raises(MemoryError):
                verifier.verify_profile(compiled)

    def test_missing_symlink(self, verifier, compiled, install) -> None:
        install(compiled)
        link = compiled.symlinks[0]
        Path(link.path).unlink()

        result = verifier.verify_profile(compiled)

        assert result.diagnostics == [f"[{link.path}] was not created by authprofile!"]

    def test_symlink_replaced_by_file(self, verifier, compiled, install) -> None:
        install(compiled)
        link = compiled.symlinks[0]
        Path(link.path).unlink()
        Path(link.path).write_text("manual\n")

        check = verifier.check_symlink(link)

        assert check.status == ArtifactStatus.INVALID
        assert "is not a symbolic link" in check.reason

    def test_symlink_wrong_target(self, verifier, compiled, install) -> None:
        install(compiled)
        link = compiled.symlinks[0]
        Path(link.path).unlink()
        Path(link.path).symlink_to(compiled.files[1].path)

        check = verifier.check_symlink(link)

        assert check.reason == f"Link [{link.path}] does not point to [{link.destination}]"

    def test_symlink_prefix_target_strict(self, verifier, compiled, install) -> None:
        install(compiled)
        link = compiled.symlinks[0]
        Path(link.path).unlink()
        Path(link.path).symlink_to(link.destination[:-3])

        assert not verifier.check_symlink(link).ok

    def test_symlink_prefix_target_lenient(self, layout, compiled, install) -> None:
        """Prefix comparison accepts a target that is a prefix of the destination."""
        settings = AuthProfileSettings(
            file_owner=os.getuid(), file_group=os.getgid(), strict_link_targets=False
        )
        verifier = ConfigurationVerifier(layout=layout, settings=settings)
        install(compiled)
        link = compiled.symlinks[0]
        Path(link.path).unlink()
        Path(link.path).symlink_to(link.destination[:-3])

        assert verifier.check_symlink(link).ok


@pytest.mark.integration
class TestVerifyActiveConfiguration:
    """Test the full verification run."""

    def test_not_configured_clean_host(self, verifier, host_root: Path) -> None:
        result = verifier.verify_active_configuration()

        assert result.state == VerificationState.NOT_CONFIGURED
        assert result.valid
        assert result.profile_id is None

    def test_not_configured_with_leftovers(self, verifier, compiled, install) -> None:
        install(compiled)

        result = verifier.verify_active_configuration()

        assert result.state == VerificationState.NOT_CONFIGURED
        assert not result.valid

    def test_configured_and_valid(self, verifier, make_profile, install) -> None:
        make_profile("sssd", {"nsswitch.conf": "passwd: sss files\n"})
        install(verifier.loader.compile("sssd", ["with-sudo"]), record="sssd\nwith-sudo\n")

        result = verifier.verify_active_configuration()

        assert result.state == VerificationState.CONFIGURED
        assert result.profile_id == "sssd"
        assert result.features == ("with-sudo",)
        assert result.valid

    def test_configured_but_nothing_installed(self, verifier, make_profile, host_root: Path) -> None:
        make_profile("sssd")
        conf_dir = host_root / "etc/authselect"
        conf_dir.mkdir(parents=True)
        (conf_dir / "authselect.conf").write_text("sssd\n")

        result = verifier.verify_active_configuration()

        assert result.state == VerificationState.CONFIGURED
        assert not result.valid

    def test_compile_failure_propagates(self, verifier, host_root: Path) -> None:
        conf_dir = host_root / "etc/authselect"
        conf_dir.mkdir(parents=True)
        (conf_dir / "authselect.conf").write_text("missing-profile\n")

        with pytest.raises(ProfileNotFoundError):
            verifier.verify_active_configuration()


@pytest.mark.integration
class TestCheckLeftovers:
    """Test scanning for leftovers of a removed configuration."""

    def test_clean_host(self, verifier, host_root: Path) -> None:
        result = verifier.check_leftovers()

        assert result.valid
        assert result.diagnostics == []

    def test_generated_file_still_present(self, verifier, layout: ArtifactLayout) -> None:
        path = Path(layout.generated_paths[2])
        path.parent.mkdir(parents=True)
        path.write_text("anything")

        result = verifier.check_leftovers()

        assert not result.valid
        assert result.diagnostics == [f"File [{path}] is still present"]

    def test_every_leftover_reported(self, verifier, compiled, install) -> None:
        install(compiled)

        result = verifier.check_leftovers()

        assert not result.valid
        assert len(result.diagnostics) == len(compiled.files) + len(compiled.symlinks)

    def test_link_to_other_target_is_tolerated(self, verifier, layout: ArtifactLayout, tmp_path: Path) -> None:
        other = tmp_path / "other-nsswitch.conf"
        other.write_text("passwd: files\n")
        link = layout.symlinks[5]
        Path(link.path).parent.mkdir(parents=True, exist_ok=True)
        Path(link.path).symlink_to(other)

        result = verifier.check_leftovers()

        assert result.valid
        assert result.diagnostics == []

    def test_regular_file_at_link_path_is_tolerated(self, verifier, layout: ArtifactLayout) -> None:
        link = layout.symlinks[0]
        Path(link.path).parent.mkdir(parents=True)
        Path(link.path).write_text("auth required pam_unix.so\n")

        assert verifier.check_leftovers().valid

    def test_access_error_aborts(self, verifier, host_root: Path) -> None:
        with patch.object(verifier.probe, "exists", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(PermissionError):
                verifier.check_leftovers()

    def test_file_in_place_of_parent_directory_aborts(self, verifier, host_root: Path) -> None:
        (host_root / "etc").mkdir()
        (host_root / "etc/authselect").write_text("not a directory")

        with pytest.raises(NotADirectoryError):
            verifier.check_leftovers()


@pytest.mark.integration
class TestCheckInstallConflicts:
    """Test the pre-install scan of symlink paths."""

    def test_no_conflicts(self, verifier, host_root: Path) -> None:
        result = verifier.check_install_conflicts()

        assert not result.conflicts_exist
        assert result.diagnostics == []

    def test_every_conflict_reported(self, verifier, layout: ArtifactLayout) -> None:
        occupied = [layout.symlinks[0].path, layout.symlinks[5].path]
        for path in occupied:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            Path(path).write_text("existing\n")

        result = verifier.check_install_conflicts()

        assert result.conflicts_exist
        assert result.diagnostics == [f"File [{path}] exists but it needs to be overwritten!" for path in occupied]
