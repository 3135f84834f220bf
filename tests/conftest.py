"""
Shared pytest fixtures for the authprofile test suite.

Provides fixtures for:
- An isolated fake host root (AUTHPROFILE_ROOT)
- Settings matching the test user's uid/gid
- Helpers to create profiles and install their generated state
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from authprofile_library.config.settings import AuthProfileSettings
from authprofile_library.models.profiles import CompiledProfile
from authprofile_library.services.active_profile import ArtifactLayout

PREAMBLE = "# Generated by authselect on Mon Jan  1 00:00:00 2024\n# Do not modify this file manually.\n\n"

_ENV_OVERRIDES = (
    "AUTHPROFILE_CONFIG_DIR",
    "AUTHPROFILE_DEFAULT_DIR",
    "AUTHPROFILE_VENDOR_DIR",
    "AUTHPROFILE_CUSTOM_DIR",
    "AUTHPROFILE_SETTINGS",
    "AUTHPROFILE_FILE_MODE",
    "AUTHPROFILE_FILE_OWNER",
    "AUTHPROFILE_FILE_GROUP",
    "AUTHPROFILE_LOG_LEVEL",
    "AUTHPROFILE_STRICT_LINK_TARGETS",
)


@pytest.fixture
def preamble() -> str:
    """Two comment lines and a blank line, as written at the top of generated files."""
    return PREAMBLE


@pytest.fixture
def host_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point AUTHPROFILE_ROOT at an empty temporary tree.

    Returns:
        Resolved path of the fake host root
    """
    root = tmp_path.resolve()
    monkeypatch.setenv("AUTHPROFILE_ROOT", str(root))
    for name in _ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    return root


@pytest.fixture
def settings(host_root: Path) -> AuthProfileSettings:
    """Settings expecting generated files owned by the test user."""
    return AuthProfileSettings(file_owner=os.getuid(), file_group=os.getgid(), file_mode=0o644)


@pytest.fixture
def layout(host_root: Path) -> ArtifactLayout:
    return ArtifactLayout.default()


@pytest.fixture
def make_profile(host_root: Path) -> Callable[..., Path]:
    """Create a profile directory with the given files.

    Example:
        >>> def test_x(make_profile):
        ...     make_profile("sssd", {"nsswitch.conf": "passwd: sss files\\n"})
    """

    def _make(name: str, files: dict[str, str] | None = None, source: str = "default") -> Path:
        if source == "custom":
            base = host_root / "etc/authselect/custom"
        else:
            base = host_root / "usr/share/authselect" / source
        profile_dir = base / name
        profile_dir.mkdir(parents=True, exist_ok=True)
        for filename, content in (files or {}).items():
            (profile_dir / filename).write_text(content)
        return profile_dir

    return _make


@pytest.fixture
def install() -> Callable[..., None]:
    """Write a compiled profile's files and links the way an install would."""

    def _install(compiled: CompiledProfile, record: str | None = None) -> None:
        for spec in compiled.files:
            path = Path(spec.path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(PREAMBLE + spec.expected_body)
            path.chmod(spec.mode)

        for link in compiled.symlinks:
            path = Path(link.path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.symlink_to(link.destination)

        if record is not None and compiled.files:
            conf = Path(compiled.files[0].path).parent / "authselect.conf"
            conf.write_text(record)

    return _install
