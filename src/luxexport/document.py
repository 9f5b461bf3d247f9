"""
In-memory document model: logical and physical structure trees.

Structure nodes live in an arena keyed by opaque ids. The Document keeps
explicit adjacency tables (children, parent, outgoing and incoming
references) so that removing a node is a single update across all tables
instead of pointer surgery on the nodes themselves.

Metadata and metadata groups are owned directly by their container. The
Ruleset decides which metadata types may be attached to which container.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import ClassVar, Iterator, Optional

from .domain.enums import ContainerKind
from .types import AttachResult

logger = logging.getLogger(__name__)

LOGICAL_PHYSICAL = "logical_physical"


@dataclass
class Metadata:
    """Typed scalar value with an optional authority reference."""
    type: str
    value: Optional[str] = None
    authority_id: Optional[str] = None
    authority_uri: Optional[str] = None
    authority_value: Optional[str] = None

    def set_authority_file(self, authority_id: str, authority_uri: str, authority_value: str) -> None:
        self.authority_id = authority_id
        self.authority_uri = authority_uri
        self.authority_value = authority_value


class MetadataContainer:
    """Lookup helpers shared by structure nodes and metadata groups."""

    kind: ClassVar[ContainerKind]
    type: str
    metadata: list[Metadata]
    groups: list[MetadataGroup]

    def metadata_by_type(self, metadata_type: str) -> list[Metadata]:
        return [md for md in self.metadata if md.type == metadata_type]

    def first_value(self, metadata_type: str) -> Optional[str]:
        """Value of the first metadata of the given type, if any."""
        for md in self.metadata:
            if md.type == metadata_type:
                return md.value
        return None

    def groups_by_type(self, group_type: str) -> list[MetadataGroup]:
        """Direct child groups of the given type."""
        return [grp for grp in self.groups if grp.type == group_type]

    def find_groups(self, group_type: str) -> list[MetadataGroup]:
        """All nested groups of the given type, at any depth, depth first."""
        found = []
        for grp in self.groups:
            if grp.type == group_type:
                found.append(grp)
            found.extend(grp.find_groups(group_type))
        return found

    def remove_group(self, group: MetadataGroup) -> bool:
        for index, candidate in enumerate(self.groups):
            if candidate is group:
                del self.groups[index]
                return True
        return False


@dataclass(eq=False)
class MetadataGroup(MetadataContainer):
    """Typed bundle of metadata and nested groups."""
    kind: ClassVar[ContainerKind] = ContainerKind.GROUP

    type: str
    metadata: list[Metadata] = field(default_factory=list)
    groups: list[MetadataGroup] = field(default_factory=list)


@dataclass(eq=False)
class StructureNode(MetadataContainer):
    """Logical section or physical page."""
    kind: ClassVar[ContainerKind] = ContainerKind.STRUCTURE

    id: str
    type: str
    metadata: list[Metadata] = field(default_factory=list)
    groups: list[MetadataGroup] = field(default_factory=list)
    content_file: Optional[str] = None


@dataclass(eq=False)
class ContentFile:
    """File referenced by a page."""
    id: str
    location: Optional[str] = None
    mimetype: Optional[str] = None
    representative: bool = False


@dataclass(frozen=True)
class Reference:
    """Directed, labeled edge from a source node to a target node."""
    source: str
    target: str
    type: str = LOGICAL_PHYSICAL


class FileSet:
    """Ordered collection of content files."""

    def __init__(self):
        self._files: dict[str, ContentFile] = {}

    @property
    def files(self) -> list[ContentFile]:
        return list(self._files.values())

    def get(self, file_id: str) -> Optional[ContentFile]:
        return self._files.get(file_id)

    def add(self, content_file: ContentFile) -> None:
        self._files[content_file.id] = content_file

    def remove(self, file_id: str) -> Optional[ContentFile]:
        return self._files.pop(file_id, None)

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[ContentFile]:
        return iter(list(self._files.values()))


class Ruleset:
    """
    Registry of metadata types and where they may be attached.

    A container type missing from the structure or group mapping accepts
    every known metadata type.
    """

    def __init__(
        self,
        metadata_types: Optional[set[str]] = None,
        structure_types: Optional[dict[str, set[str]]] = None,
        group_types: Optional[dict[str, set[str]]] = None,
    ):
        self.metadata_types = set(metadata_types or ())
        self.structure_types = {name: set(allowed) for name, allowed in (structure_types or {}).items()}
        self.group_types = {name: set(allowed) for name, allowed in (group_types or {}).items()}

    def has_metadata_type(self, name: Optional[str]) -> bool:
        return bool(name) and name in self.metadata_types

    def check(self, container: MetadataContainer, metadata_type: str) -> Optional[str]:
        """Return the reason the type is rejected by the container, or None."""
        if not self.has_metadata_type(metadata_type):
            return "unknown metadata type"
        mapping = self.group_types if container.kind is ContainerKind.GROUP else self.structure_types
        allowed = mapping.get(container.type)
        if allowed is not None and metadata_type not in allowed:
            return f"type not allowed for {container.kind.value} '{container.type}'"
        return None


class Document:
    """
    Arena-backed document with one logical and one physical root.

    All structural edits go through this class so that the children table
    and both reference tables stay consistent.
    """

    def __init__(self, ruleset: Optional[Ruleset] = None):
        self.ruleset = ruleset or Ruleset()
        self.file_set = FileSet()
        self.logical_id: Optional[str] = None
        self.physical_id: Optional[str] = None

        self._nodes: dict[str, StructureNode] = {}
        self._children: dict[str, list[str]] = {}
        self._parent: dict[str, str] = {}
        self._refs_to: dict[str, list[Reference]] = {}
        self._refs_from: dict[str, list[Reference]] = {}
        self._next_id = 1

    # ------------------------------------------------------------------
    # nodes

    def _new_id(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}{self._next_id:04d}"
            self._next_id += 1
            if candidate not in self._nodes and self.file_set.get(candidate) is None:
                return candidate

    def create_node(self, node_type: str, node_id: Optional[str] = None) -> StructureNode:
        """Create a detached node in the arena."""
        node_id = node_id or self._new_id("LOG_" if node_type != "page" else "PHYS_")
        if node_id in self._nodes:
            raise ValueError(f"Duplicate node id: {node_id}")
        node = StructureNode(id=node_id, type=node_type)
        self._nodes[node_id] = node
        self._children[node_id] = []
        self._refs_to[node_id] = []
        self._refs_from[node_id] = []
        return node

    def node(self, node_id: str) -> StructureNode:
        return self._nodes[node_id]

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    @property
    def logical(self) -> Optional[StructureNode]:
        return self._nodes.get(self.logical_id) if self.logical_id else None

    @property
    def physical(self) -> Optional[StructureNode]:
        return self._nodes.get(self.physical_id) if self.physical_id else None

    def set_logical_root(self, node: StructureNode) -> None:
        self.logical_id = node.id

    def set_physical_root(self, node: StructureNode) -> None:
        self.physical_id = node.id

    def nodes(self) -> list[StructureNode]:
        return list(self._nodes.values())

    # ------------------------------------------------------------------
    # children

    def children(self, node_id: str) -> list[StructureNode]:
        return [self._nodes[child] for child in self._children.get(node_id, [])]

    def parent(self, node_id: str) -> Optional[StructureNode]:
        parent_id = self._parent.get(node_id)
        return self._nodes[parent_id] if parent_id else None

    def add_child(self, parent_id: str, child_id: str) -> None:
        if child_id in self._parent:
            raise ValueError(f"Node {child_id} already has a parent")
        self._children[parent_id].append(child_id)
        self._parent[child_id] = parent_id

    def remove_child(self, parent_id: str, child_id: str) -> bool:
        siblings = self._children.get(parent_id, [])
        if child_id not in siblings:
            return False
        siblings.remove(child_id)
        self._parent.pop(child_id, None)
        return True

    # ------------------------------------------------------------------
    # references

    def add_reference(self, source_id: str, target_id: str, ref_type: str = LOGICAL_PHYSICAL) -> Reference:
        reference = Reference(source=source_id, target=target_id, type=ref_type)
        self._refs_to[source_id].append(reference)
        self._refs_from[target_id].append(reference)
        return reference

    def references_to(self, source_id: str) -> list[Reference]:
        """Outgoing references kept by the source."""
        return list(self._refs_to.get(source_id, []))

    def references_from(self, target_id: str) -> list[Reference]:
        """Incoming references kept by the target."""
        return list(self._refs_from.get(target_id, []))

    def references(self) -> list[Reference]:
        return [ref for refs in self._refs_to.values() for ref in refs]

    def remove_reference(self, source_id: str, target_id: str) -> int:
        """Remove every reference from source to target on both sides; returns the count."""
        outgoing = self._refs_to.get(source_id, [])
        removed = [ref for ref in outgoing if ref.target == target_id]
        if not removed:
            return 0
        self._refs_to[source_id] = [ref for ref in outgoing if ref.target != target_id]
        self._refs_from[target_id] = [ref for ref in self._refs_from[target_id] if ref.source != source_id]
        return len(removed)

    def detach_node(self, node_id: str) -> None:
        """
        Detach a node from its parent after dropping all of its references.

        Inbound references are removed from their sources first, then the
        node's own outgoing references, then the child link.
        """
        for ref in self.references_from(node_id):
            self.remove_reference(ref.source, node_id)
        for ref in self.references_to(node_id):
            self.remove_reference(node_id, ref.target)
        parent_id = self._parent.get(node_id)
        if parent_id:
            self.remove_child(parent_id, node_id)

    # ------------------------------------------------------------------
    # content files

    def add_content_file(self, page: StructureNode, content_file: ContentFile) -> None:
        if not content_file.id:
            content_file.id = self._new_id("FILE_")
        self.file_set.add(content_file)
        page.content_file = content_file.id

    def new_content_file(self, location: str, mimetype: Optional[str] = None) -> ContentFile:
        return ContentFile(id=self._new_id("FILE_"), location=location, mimetype=mimetype)

    def content_file_of(self, page: StructureNode) -> Optional[ContentFile]:
        return self.file_set.get(page.content_file) if page.content_file else None

    def remove_content_file(self, content_file: ContentFile) -> None:
        self.file_set.remove(content_file.id)
        for node in self._nodes.values():
            if node.content_file == content_file.id:
                node.content_file = None

    def image_name(self, page: StructureNode) -> Optional[str]:
        """Final path segment of the page's content file location."""
        content_file = self.content_file_of(page)
        if content_file is None or not content_file.location:
            return None
        return content_file.location.rstrip("/").rsplit("/", 1)[-1]

    # ------------------------------------------------------------------
    # metadata

    def add_metadata(self, container: MetadataContainer, metadata: Metadata) -> AttachResult:
        """Attach metadata if the ruleset permits it; never raises."""
        reason = self.ruleset.check(container, metadata.type)
        if reason:
            logger.debug(f"Rejected metadata {metadata.type} on {container.type}: {reason}")
            return AttachResult(metadata.type, container.type, attached=False, reason=reason)
        container.metadata.append(metadata)
        return AttachResult(metadata.type, container.type)

    def add_metadata_group(self, node: StructureNode, group: MetadataGroup) -> MetadataGroup:
        """Attach a deep copy of the group to the node."""
        clone = copy.deepcopy(group)
        node.groups.append(clone)
        return clone
