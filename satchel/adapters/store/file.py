"""File-based cart store.

Implements StorePort by keeping one file per cart in a directory.
Writes go through a temporary file and an atomic rename so a crash
mid-write never leaves a truncated blob behind.
"""

import logging
import os
import re
import tempfile
import time
from pathlib import Path

from satchel.core.errors import StoreIOError
from satchel.core.ports import StorePort

logger = logging.getLogger(__name__)


class FileStore(StorePort):
    """Stores each cart as ``<prefix><sanitized id><extension>``."""

    def __init__(
        self,
        storage_path: str,
        prefix: str = "cart_",
        extension: str = ".json",
    ):
        """Initialize the file store.

        Args:
            storage_path: Directory holding cart files. Created if missing.
            prefix: Filename prefix for cart files.
            extension: Filename extension for cart files.

        Raises:
            StoreIOError: If the directory cannot be created or is not a directory.
        """
        self.storage_path = Path(storage_path)
        self.prefix = prefix
        self.extension = extension

        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(
                f"Failed to create storage directory {self.storage_path}: {e}"
            ) from e

        if not self.storage_path.is_dir():
            raise StoreIOError(f"Storage path is not a directory: {self.storage_path}")

    @staticmethod
    def _sanitize_filename(text: str) -> str:
        """Replace anything but letters, digits, underscores and hyphens.

        Examples:
            >>> FileStore._sanitize_filename("user@example.com")
            'user_example_com'
        """
        return re.sub(r"[^A-Za-z0-9_\-]", "_", text)

    def _file_path(self, cart_id: str) -> Path:
        return self.storage_path / (
            f"{self.prefix}{self._sanitize_filename(cart_id)}{self.extension}"
        )

    def get(self, cart_id: str) -> str:
        path = self._file_path(cart_id)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except OSError as e:
            raise StoreIOError(f"Failed to read cart file {path}: {e}") from e

    def put(self, cart_id: str, data: str) -> None:
        path = self._file_path(cart_id)
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.storage_path,
                prefix=f".{path.name}.",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StoreIOError(f"Failed to write cart file {path}: {e}") from e

    def flush(self, cart_id: str) -> None:
        path = self._file_path(cart_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreIOError(f"Failed to delete cart file {path}: {e}") from e

    def exists(self, cart_id: str) -> bool:
        return self._file_path(cart_id).is_file()

    def cleanup(self, max_age_seconds: int = 2592000) -> int:
        """Delete cart files not modified within max_age_seconds.

        Returns:
            Number of files removed.
        """
        cutoff = time.time() - max_age_seconds
        cleaned = 0
        for path in self.storage_path.glob(f"{self.prefix}*{self.extension}"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    cleaned += 1
            except OSError as e:
                logger.warning(f"Could not remove stale cart file {path}: {e}")
        if cleaned:
            logger.info(f"Removed {cleaned} stale cart files from {self.storage_path}")
        return cleaned
