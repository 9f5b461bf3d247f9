"""
File group planning.

Turns the configured project file groups into the virtual file groups of the
published descriptor and, when original files are used, points pages at the
files actually present in the media folder.
"""

import logging
from functools import cmp_to_key
from pathlib import Path
from typing import Optional

from ..document import Document
from ..domain.models import ExportJob, ProjectFileGroup, VirtualFileGroup
from ..storage import StorageInventory
from ..utils import base_name, extension, is_blank
from .generation import VariableReplacer

logger = logging.getLogger(__name__)

MAIN_GROUP_NAME = "PRESENTATION"


def compare_media_files(first: Path, second: Path) -> int:
    """Plain name order; for equal base names (any case) the file without extension sorts last."""
    name1, name2 = first.name, second.name
    if base_name(name1).lower() == base_name(name2).lower():
        if is_blank(extension(name1)):
            return 1
        if is_blank(extension(name2)):
            return -1
        return 0
    return (name1 > name2) - (name1 < name2)


class FileGroupPlanner:
    """Plans virtual file groups for one export job."""

    def __init__(self, storage: StorageInventory):
        self.storage = storage

    def create_file_group(self, replacer: VariableReplacer, group: ProjectFileGroup) -> VirtualFileGroup:
        return VirtualFileGroup(
            name=group.name,
            path_to_files=replacer.replace(group.path),
            mimetype=group.mimetype,
            file_suffix=group.suffix.strip() if group.suffix is not None else None,
            file_extensions_to_ignore=group.ignore_mimetypes,
            ignore_configured_mimetype_and_suffix=group.use_original_files,
            main_group=group.name == MAIN_GROUP_NAME,
        )

    def plan(self,
             document: Document,
             job: ExportJob,
             groups: list[ProjectFileGroup],
             replacer: VariableReplacer) -> list[VirtualFileGroup]:
        """
        Plan the virtual file groups of the job.

        A group bound to a job folder is planned only if that folder exists
        and holds files; groups without a folder are always planned.

        Args:
            document: Document whose pages may be re-pointed at original files
            job: Export job providing the named folders and the media folder
            groups: Configured project file groups
            replacer: Variable replacer for the group paths

        Returns:
            Planned virtual file groups in configuration order
        """
        planned = []
        for group in groups:
            if group.folder:
                folder = job.folders.get(group.folder)
                if folder is None:
                    logger.debug(f"File group {group.name}: job has no folder '{group.folder}'")
                    continue
                if not self.storage.exists(folder) or not self.storage.list_names(folder):
                    logger.debug(f"File group {group.name}: folder {folder} is missing or empty")
                    continue
            planned.append(self.create_file_group(replacer, group))

        if any(group.use_original_files for group in groups) and job.media_folder:
            self.match_original_files(document, job.media_folder)

        logger.debug(f"Planned file groups: {[group.name for group in planned]}")
        return planned

    def match_original_files(self, document: Document, media_folder: str) -> int:
        """
        Point every page at the media folder file with the same base name (any case).

        Returns:
            Number of pages re-pointed
        """
        files = sorted(self.storage.list_paths(media_folder), key=cmp_to_key(compare_media_files))
        physical = document.physical
        if not files or physical is None:
            return 0

        matched = 0
        for page in document.children(physical.id):
            content_file = document.content_file_of(page)
            image_name = document.image_name(page)
            if content_file is None or image_name is None:
                continue
            original = self._find_original(base_name(image_name), files)
            if original is not None:
                content_file.location = original.as_posix()
                matched += 1
        return matched

    @staticmethod
    def _find_original(page_base: str, files: list[Path]) -> Optional[Path]:
        for path in files:
            if base_name(path.name).lower() == page_base.lower():
                return path
        return None
