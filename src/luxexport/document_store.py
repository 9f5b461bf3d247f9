"""
Document descriptor persistence.

The exporter reads and writes documents through the DocumentStore protocol.
JsonDocumentStore keeps one JSON descriptor per document identifier under a
root folder ({root}/{identifier}/meta.json); explicit file paths are accepted
as identifiers as well.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from .document import ContentFile, Document, Metadata, MetadataGroup, Ruleset, StructureNode
from .types import DocumentReadError, DocumentWriteError, StorageAccessError

logger = logging.getLogger(__name__)

DESCRIPTOR_NAME = "meta.json"


class DocumentStore(Protocol):
    """Reads and writes document descriptors."""

    def read(self, identifier: str) -> Document: ...
    def write(self, document: Document, identifier: str) -> Path: ...


class JsonDocumentStore:
    """DocumentStore keeping JSON descriptors on the local filesystem."""

    def __init__(self, root: Optional[Path] = None, ruleset: Optional[Ruleset] = None):
        """
        Args:
            root: Folder holding one sub folder per document identifier
            ruleset: Ruleset attached to every document read from this store
        """
        self.root = Path(root) if root else None
        self.ruleset = ruleset

    def resolve(self, identifier: str) -> Path:
        """Map an identifier to a descriptor path."""
        candidate = Path(identifier)
        if candidate.suffix == ".json" or self.root is None:
            return candidate
        return self.root / identifier / DESCRIPTOR_NAME

    def read(self, identifier: str) -> Document:
        path = self.resolve(identifier)
        try:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
        except PermissionError as e:
            raise StorageAccessError(str(path)) from e
        except FileNotFoundError as e:
            raise DocumentReadError(identifier, f"{path} not found") from e
        except (OSError, json.JSONDecodeError) as e:
            raise DocumentReadError(identifier, str(e)) from e
        if not isinstance(payload, dict):
            raise DocumentReadError(identifier, "invalid descriptor: not an object")

        try:
            document = document_from_dict(payload, self.ruleset)
        except (KeyError, TypeError, ValueError) as e:
            raise DocumentReadError(identifier, f"invalid descriptor: {e}") from e
        logger.debug(f"Read document {identifier} from {path}")
        return document

    def write(self, document: Document, identifier: str) -> Path:
        path = self.resolve(identifier)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(document_to_dict(document), f, ensure_ascii=False, indent=2)
        except PermissionError as e:
            raise StorageAccessError(str(path)) from e
        except OSError as e:
            raise DocumentWriteError(identifier, str(e)) from e
        logger.debug(f"Wrote document {identifier} to {path}")
        return path


# ---------------------------------------------------------------------------
# serialization helpers


def _metadata_to_dict(md: Metadata) -> dict[str, Any]:
    data: dict[str, Any] = {"type": md.type, "value": md.value}
    if md.authority_id or md.authority_uri or md.authority_value:
        data["authorityId"] = md.authority_id
        data["authorityUri"] = md.authority_uri
        data["authorityValue"] = md.authority_value
    return data


def _metadata_from_dict(data: dict[str, Any]) -> Metadata:
    return Metadata(
        type=data["type"],
        value=data.get("value"),
        authority_id=data.get("authorityId"),
        authority_uri=data.get("authorityUri"),
        authority_value=data.get("authorityValue"),
    )


def _group_to_dict(group: MetadataGroup) -> dict[str, Any]:
    return {
        "type": group.type,
        "metadata": [_metadata_to_dict(md) for md in group.metadata],
        "groups": [_group_to_dict(sub) for sub in group.groups],
    }


def _group_from_dict(data: dict[str, Any]) -> MetadataGroup:
    return MetadataGroup(
        type=data["type"],
        metadata=[_metadata_from_dict(md) for md in data.get("metadata", [])],
        groups=[_group_from_dict(sub) for sub in data.get("groups", [])],
    )


def _node_to_dict(document: Document, node: StructureNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "type": node.type,
        "metadata": [_metadata_to_dict(md) for md in node.metadata],
        "groups": [_group_to_dict(grp) for grp in node.groups],
        "children": [_node_to_dict(document, child) for child in document.children(node.id)],
        "contentFile": node.content_file,
    }


def _node_from_dict(document: Document, data: dict[str, Any]) -> StructureNode:
    node = document.create_node(data["type"], data.get("id"))
    node.metadata = [_metadata_from_dict(md) for md in data.get("metadata", [])]
    node.groups = [_group_from_dict(grp) for grp in data.get("groups", [])]
    node.content_file = data.get("contentFile")
    for child_data in data.get("children", []):
        child = _node_from_dict(document, child_data)
        document.add_child(node.id, child.id)
    return node


def document_to_dict(document: Document) -> dict[str, Any]:
    """Serialize a document to the JSON descriptor layout."""
    return {
        "logical": _node_to_dict(document, document.logical) if document.logical else None,
        "physical": _node_to_dict(document, document.physical) if document.physical else None,
        "files": [
            {
                "id": cf.id,
                "mimetype": cf.mimetype,
                "location": cf.location,
                "representative": cf.representative,
            }
            for cf in document.file_set
        ],
        "references": [
            {"source": ref.source, "target": ref.target, "type": ref.type}
            for ref in document.references()
        ],
    }


def document_from_dict(payload: dict[str, Any], ruleset: Optional[Ruleset] = None) -> Document:
    """Build a document from the JSON descriptor layout."""
    document = Document(ruleset)
    if payload.get("logical"):
        document.set_logical_root(_node_from_dict(document, payload["logical"]))
    if payload.get("physical"):
        document.set_physical_root(_node_from_dict(document, payload["physical"]))
    for file_data in payload.get("files", []):
        document.file_set.add(ContentFile(
            id=file_data["id"],
            location=file_data.get("location"),
            mimetype=file_data.get("mimetype"),
            representative=bool(file_data.get("representative", False)),
        ))
    for ref in payload.get("references", []):
        if not (document.has_node(ref["source"]) and document.has_node(ref["target"])):
            raise ValueError(f"Reference to unknown node: {ref['source']} -> {ref['target']}")
        document.add_reference(ref["source"], ref["target"], ref.get("type", "logical_physical"))
    return document
