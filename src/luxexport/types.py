"""
Type definitions for the luxexport export pipeline.

This module provides the exception hierarchy used across the pipeline stages
and the immutable result objects the stages hand back to the exporter.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class AttachResult:
    """Outcome of attaching one metadata to a container.

    Attach failures are not raised; callers collect failed results and
    report them in the export's problem list.
    """
    metadata_type: str
    container_type: str
    attached: bool = True
    reason: Optional[str] = None

    def describe(self) -> str:
        if self.attached:
            return f"Metadata '{self.metadata_type}' attached to '{self.container_type}'"
        return f"Metadata '{self.metadata_type}' not attached to '{self.container_type}': {self.reason}"


@dataclass(frozen=True)
class ReconcileResult:
    """Pages removed by structure reconciliation and the surviving page count."""
    removed_pages: tuple[str, ...] = ()
    page_count: int = 0


@dataclass(frozen=True)
class RebuildResult:
    """Outcome of a pagination rebuild.

    persist_required is set when the rebuild replaced existing pages and the
    document has to be written back to its store.
    """
    page_count: int = 0
    replaced_pages: int = 0
    persist_required: bool = False


# Pipeline exception hierarchy
class ExportError(Exception):
    """Fatal error: the whole export is aborted."""
    pass


class NotExportableError(Exception):
    """The document is not eligible for export; the export is skipped, not failed."""
    pass


class DocumentReadError(ExportError):
    """The document descriptor could not be read."""
    def __init__(self, identifier: str, message: str):
        self.identifier = identifier
        super().__init__(f"Cannot read metadata file {identifier}: {message}")


class DocumentWriteError(ExportError):
    """The document descriptor could not be written."""
    def __init__(self, identifier: str, message: str):
        self.identifier = identifier
        super().__init__(f"Cannot write metadata file {identifier}: {message}")


class StorageAccessError(ExportError):
    """Access to a folder or file was denied."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Access to {path} was denied.")


class VocabularyError(Exception):
    """Base exception for vocabulary lookups; scoped to one metadata or group."""
    pass


class VocabularyRecordNotFound(VocabularyError):
    """A vocabulary record could not be resolved by id or title."""
    def __init__(self, vocabulary_id: str | int, record_key: str | int):
        self.vocabulary_id = vocabulary_id
        self.record_key = record_key
        super().__init__(f"Vocabulary record '{record_key}' not found in vocabulary {vocabulary_id}")


class VocabularyServiceError(VocabularyError):
    """The vocabulary service could not be reached or answered with an error."""
    pass


@dataclass
class ProblemLog:
    """Ordered, human-readable list of problems collected during one export."""
    entries: list[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.entries.append(message)

    def extend(self, messages) -> None:
        self.entries.extend(messages)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
