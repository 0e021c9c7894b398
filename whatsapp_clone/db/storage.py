"""
Local Key-Value Storage

A small persistent key-value store backed by one JSON file per key in
STORAGE_DIR — the device-side equivalent of the app's async storage.
Values are strings; callers serialize their own data.

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so a reader never observes a partial value.
"""

import logging
import os
import re
import tempfile
from pathlib import Path

from whatsapp_clone.core.config import STORAGE_DIR

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

# Module-level storage, initialized lazily
_default_storage: "FileStorage | None" = None


class FileStorage:
    """Key-value storage rooted at a directory."""

    def __init__(self, directory: str | os.PathLike[str]):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key was never set."""
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        """
        Atomically replace the value stored under key.

        Raises:
            OSError: If the directory cannot be created or written.
        """
        path = self._path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.directory, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass


def get_storage() -> FileStorage:
    """Get the storage rooted at the configured STORAGE_DIR."""
    global _default_storage
    if _default_storage is None:
        _default_storage = FileStorage(STORAGE_DIR)
        logger.debug("Using local storage at %s", STORAGE_DIR)
    return _default_storage
