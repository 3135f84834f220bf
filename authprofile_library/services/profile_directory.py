"""Profile directory reader."""

import logging
from pathlib import Path

from authprofile_library.models.profiles import DirectoryListing
from authprofile_library.services.filesystem_probe import FilesystemProbe

logger = logging.getLogger(__name__)


class ProfileDirectoryReader:
    """Lists the profiles of one profile source directory.

    Every immediate subdirectory is taken as a profile. A missing directory
    yields an empty listing; any other read failure propagates.
    """

    def __init__(self, probe: FilesystemProbe | None = None) -> None:
        self.probe = probe or FilesystemProbe()

    def read(self, dirpath: str | Path) -> DirectoryListing:
        """Read profile identifiers from a directory.

        Args:
            dirpath: Profile source directory

        Returns:
            DirectoryListing with subdirectory names in read order

        Raises:
            OSError: The directory exists but cannot be read
        """
        logger.info(f"Reading profile directory [{dirpath}]")

        try:
            names = self.probe.list_subdirectories(dirpath)
        except OSError as e:
            logger.error(f"Unable to read directory [{dirpath}] [{e.errno}]: {e.strerror}")
            raise

        if names is None:
            logger.warning(f"Directory [{dirpath}] is missing!")
            return DirectoryListing(path=str(dirpath), exists=False)

        for name in names:
            logger.info(f"Found profile [{name}]")

        return DirectoryListing(path=str(dirpath), profiles=names)
