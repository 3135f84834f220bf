"""Read-only filesystem primitives used by the verifier and profile readers.

Not-found is reported as a value (None or False) where callers treat it as a
normal outcome. Every other OSError, including PermissionError from
read_textfile, propagates so callers can decide how to classify it.
"""

import errno
import logging
import os
import stat
from pathlib import Path

from authprofile_library.models.filesystem import FileKind
from authprofile_library.models.filesystem import FileMetadata

logger = logging.getLogger(__name__)


def _kind(st_mode: int) -> FileKind:
    if stat.S_ISREG(st_mode):
        return FileKind.REGULAR
    if stat.S_ISDIR(st_mode):
        return FileKind.DIRECTORY
    if stat.S_ISLNK(st_mode):
        return FileKind.SYMLINK
    return FileKind.OTHER


class FilesystemProbe:
    """Whole-file reads, lstat metadata, link targets and directory listings."""

    def read_textfile(self, path: str | Path) -> str:
        """Read a whole text file.

        Raises:
            FileNotFoundError: The file does not exist
            PermissionError: The file cannot be read
            OSError: Any other read failure
        """
        logger.info(f"Reading file [{path}]")
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
            return f.read()

    def stat(self, path: str | Path) -> FileMetadata | None:
        """Return lstat metadata, or None if the path does not exist."""
        try:
            st = os.lstat(path)
        except FileNotFoundError:
            return None

        return FileMetadata(
            kind=_kind(st.st_mode),
            mode=stat.S_IMODE(st.st_mode),
            owner=st.st_uid,
            group=st.st_gid,
        )

    def read_link(self, path: str | Path) -> str:
        """Return the raw target of a symbolic link."""
        return os.readlink(path)

    def exists(self, path: str | Path) -> bool:
        """Check existence the way access(F_OK) does.

        Symbolic links are followed, so a dangling link counts as absent.

        Raises:
            OSError: Anything other than not-found (e.g. EACCES on a parent)
        """
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        return True

    def list_subdirectories(self, path: str | Path) -> list[str] | None:
        """List names of immediate subdirectories.

        Entries are returned in directory order. Symbolic links to directories
        count as directories. Other entries are skipped.

        Returns:
            Subdirectory names, or None if the directory does not exist

        Raises:
            OSError: The directory or one of its entries cannot be read
        """
        path = Path(path)
        try:
            entries = os.listdir(path)
        except FileNotFoundError:
            return None

        names: list[str] = []
        for name in entries:
            try:
                is_dir = stat.S_ISDIR(os.stat(path / name).st_mode)
            except OSError as e:
                if e.errno != errno.ENOENT:
                    raise
                # Dangling link, nothing to follow
                is_dir = False

            if not is_dir:
                logger.warning(f"Not a directory: {name}")
                continue

            names.append(name)

        return names
