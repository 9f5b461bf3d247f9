"""
Group pruning for the logical root.

Unpublished groups are removed before any other stage reads the tree; Source
and Bibliography groups are collected for downstream consumers.
"""

import logging
from dataclasses import dataclass, field

from ..document import Document, MetadataGroup
from ..types import ExportError

logger = logging.getLogger(__name__)

SOURCE_GROUP = "Source"
BIBLIOGRAPHY_GROUP = "Bibliography"


@dataclass
class PrunedGroups:
    """Groups collected or removed while pruning."""
    sources: list[MetadataGroup] = field(default_factory=list)
    bibliographies: list[MetadataGroup] = field(default_factory=list)
    removed: list[MetadataGroup] = field(default_factory=list)


def is_unpublished(group: MetadataGroup) -> bool:
    """True if the group directly carries Published=N (any case)."""
    return any((md.value or "").lower() == "n" for md in group.metadata_by_type("Published"))


class GroupPruner:
    """Removes unpublished top-level groups and aggregates Source/Bibliography groups."""

    def prune(self, document: Document) -> PrunedGroups:
        logical = document.logical
        if logical is None:
            raise ExportError("No logical structure defined")

        result = PrunedGroups()
        for group in list(logical.groups):
            if is_unpublished(group):
                logical.remove_group(group)
                result.removed.append(group)
                continue
            result.sources.extend(group.find_groups(SOURCE_GROUP))
            if group.type == BIBLIOGRAPHY_GROUP:
                result.bibliographies.append(group)

        logger.debug(
            f"Removed {len(result.removed)} unpublished groups, collected "
            f"{len(result.sources)} sources and {len(result.bibliographies)} bibliographies"
        )
        return result
