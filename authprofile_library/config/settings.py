"""Settings models for authprofile.

This module defines the expectations authprofile applies to generated files
and the logging level of the command line tool.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class AuthProfileSettings(BaseSettings):
    """Configuration for authprofile.

    Attributes:
        log_level: Logging level (default: warning)
        file_owner: Expected uid of generated files, None means don't care (default: 0)
        file_group: Expected gid of generated files, None means don't care (default: 0)
        file_mode: Expected permission bits of generated files (default: 0o644)
        strict_link_targets: Compare symlink targets exactly instead of by
            prefix of the actual target (default: True)

    Example:
        >>> settings = AuthProfileSettings()
        >>> assert settings.file_mode == 0o644
        >>> assert settings.file_owner == 0
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHPROFILE_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "warning"

    file_owner: int | None = 0
    file_group: int | None = 0
    file_mode: int = 0o644

    strict_link_targets: bool = True

    @field_validator("file_mode", mode="before")
    @classmethod
    def parse_octal_mode(cls, v: int | str) -> int:
        """Accept permission bits written as octal strings.

        Environment values and YAML scalars such as "0644", "644" or
        "0o644" are read as octal (the loader hands unquoted YAML modes over
        as written). Integers pass through.

        Args:
            v: Mode as int or octal string

        Returns:
            Permission bits as int
        """
        if isinstance(v, str):
            return int(v, 8)
        return v

    @field_validator("file_mode")
    @classmethod
    def check_permission_bits(cls, v: int) -> int:
        if v < 0 or v > 0o7777:
            raise ValueError(f"file_mode {v:o} is not a permission mask")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.lower()
