"""
Physical Structure Maintenance

Keeps the physical page sequence consistent with the files on storage:
- StructureReconciler prunes duplicate and missing pages, then renumbers
- PaginationRebuilder discards all pages and regenerates them from a folder listing

Both components only edit the in-memory document; files are never touched.
"""

import logging
from pathlib import Path

from ..document import LOGICAL_PHYSICAL, Document, Metadata, StructureNode
from ..storage import StorageInventory
from ..types import RebuildResult, ReconcileResult
from ..utils import base_name

logger = logging.getLogger(__name__)

PAGE_TYPE = "page"
PHYS_PAGE_NUMBER = "physPageNumber"
LOGICAL_PAGE_NUMBER = "logicalPageNumber"
UNCOUNTED = "uncounted"


def renumber_pages(pages: list[StructureNode]) -> None:
    """Set the first physPageNumber of each page to a running 1-based counter."""
    order = 1
    for page in pages:
        for md in page.metadata:
            if md.type == PHYS_PAGE_NUMBER:
                md.value = str(order)
                order += 1
                break


class StructureReconciler:
    """Removes pages whose image is duplicated or missing from the image folder."""

    def __init__(self, storage: StorageInventory):
        self.storage = storage

    def reconcile(self, document: Document, image_folder: str) -> ReconcileResult:
        """
        Reconcile the physical pages with the image folder listing.

        Args:
            document: Document to reconcile in place
            image_folder: Folder holding the published images

        Returns:
            ReconcileResult with the removed page ids and surviving page count
        """
        physical = document.physical
        if physical is None:
            return ReconcileResult()
        pages = document.children(physical.id)
        if not pages:
            return ReconcileResult()

        names_in_folder = set(self.storage.list_names(image_folder))
        seen_base_names: set[str] = set()
        to_remove: list[StructureNode] = []

        for page in pages:
            image_name = document.image_name(page)
            if image_name is None:
                logger.debug(f"Page {page.id} has no image, removing it")
                to_remove.append(page)
                continue
            page_base = base_name(image_name)
            if page_base in seen_base_names:
                logger.debug(f"Page {page.id} duplicates image {page_base}, removing it")
                to_remove.append(page)
                continue
            seen_base_names.add(page_base)
            if image_name not in names_in_folder:
                logger.debug(f"Image {image_name} of page {page.id} not found in {image_folder}")
                to_remove.append(page)

        for page in to_remove:
            document.detach_node(page.id)

        remaining = document.children(physical.id)
        renumber_pages(remaining)

        if to_remove:
            logger.info(f"Removed {len(to_remove)} pages without matching images, {len(remaining)} pages remain")
        return ReconcileResult(removed_pages=tuple(page.id for page in to_remove), page_count=len(remaining))


class PaginationRebuilder:
    """Replaces the whole page sequence with one page per file of the media folder."""

    def __init__(self, storage: StorageInventory):
        self.storage = storage

    def rebuild(self, document: Document, media_folder: str) -> RebuildResult:
        """
        Rebuild the physical structure from the media folder.

        Existing pages and all content files are dropped regardless of what is
        on disk; new pages are created in listing order.

        Args:
            document: Document to rebuild in place
            media_folder: Folder whose files become the new pages

        Returns:
            RebuildResult; persist_required is set when pages were replaced
        """
        physical = document.physical
        if physical is None:
            return RebuildResult()
        old_pages = document.children(physical.id)
        if not old_pages:
            return RebuildResult()

        paths = self.storage.list_paths(media_folder)

        for page in old_pages:
            document.detach_node(page.id)
        for content_file in list(document.file_set):
            document.remove_content_file(content_file)

        logical = document.logical
        folder = media_folder.rstrip("/")
        for order, path in enumerate(paths, start=1):
            page = document.create_node(PAGE_TYPE)
            document.add_child(physical.id, page.id)
            page.metadata.append(Metadata(PHYS_PAGE_NUMBER, str(order)))
            page.metadata.append(Metadata(LOGICAL_PAGE_NUMBER, UNCOUNTED))
            if logical is not None:
                document.add_reference(logical.id, page.id, LOGICAL_PHYSICAL)
            content_file = document.new_content_file(
                location=f"file://{folder}/{Path(path).name}",
                mimetype=self.storage.mime_type(Path(path)),
            )
            document.add_content_file(page, content_file)

        logger.info(f"Rebuilt pagination: replaced {len(old_pages)} pages with {len(paths)} pages from {media_folder}")
        return RebuildResult(page_count=len(paths), replaced_pages=len(old_pages), persist_required=True)
