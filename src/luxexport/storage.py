"""Filesystem inventory used to reconcile documents against folder contents."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Protocol

from .types import StorageAccessError

logger = logging.getLogger(__name__)

DEFAULT_MIMETYPE = "application/octet-stream"


class StorageInventory(Protocol):
    """
    Read-only view on folders. The pipeline never copies, moves or deletes
    files through this interface; it only lists them.
    """

    def list_names(self, folder: str) -> list[str]: ...
    def list_paths(self, folder: str) -> list[Path]: ...
    def exists(self, folder: str) -> bool: ...
    def mime_type(self, path: Path) -> str: ...


class LocalStorage:
    """StorageInventory backed by the local filesystem."""

    def list_paths(self, folder: str) -> list[Path]:
        """
        List regular files of a folder, sorted by name.

        Args:
            folder: Folder to list

        Returns:
            Sorted file paths; empty if the folder does not exist

        Raises:
            StorageAccessError: If listing the folder is not permitted
        """
        path = Path(folder)
        if not path.is_dir():
            logger.debug(f"Folder does not exist: {folder}")
            return []
        try:
            return sorted((entry for entry in path.iterdir() if entry.is_file()), key=lambda p: p.name)
        except PermissionError as e:
            raise StorageAccessError(str(path)) from e

    def list_names(self, folder: str) -> list[str]:
        return [entry.name for entry in self.list_paths(folder)]

    def exists(self, folder: str) -> bool:
        try:
            return Path(folder).exists()
        except PermissionError as e:
            raise StorageAccessError(folder) from e

    def mime_type(self, path: Path) -> str:
        guessed, _ = mimetypes.guess_type(path.name)
        return guessed or DEFAULT_MIMETYPE
