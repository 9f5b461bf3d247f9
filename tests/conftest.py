from pathlib import Path
from typing import Optional

import pytest

from luxexport.document import LOGICAL_PHYSICAL, ContentFile, Document, Metadata, MetadataGroup, Ruleset
from luxexport.domain.models import FieldDefinition, RecordField, Vocabulary, VocabularyRecord
from luxexport.types import VocabularyServiceError

METADATA_TYPES = {
    "Published", "TitleDocMain", "CatalogIDDigital", "physPageNumber", "logicalPageNumber",
    "Subject", "File", "Type", "RelationEntityType", "RelationProcessID", "RelationshipType",
    "Location", "Name", "VocabularyId", "Description", "Bibliography", "PlaceOfBirth",
    "_relationship_type_ger", "_relationship_type_eng", "_relationship_type_fre",
    "_profession_eng", "_profession_ger", "_profession",
}


def record_field(label: str, value: Optional[str], language: Optional[str] = None,
                 definition_label: Optional[str] = None) -> RecordField:
    """Vocabulary field whose definition shares its label and language unless told otherwise."""
    return RecordField(
        label=label,
        language=language,
        value=value,
        definition=FieldDefinition(label=definition_label or label, language=language),
    )


def vocabulary_record(record_id: int, vocabulary_id: int, title: str = "", fields=()) -> VocabularyRecord:
    return VocabularyRecord(id=record_id, vocabularyId=vocabulary_id, title=title, fields=list(fields))


class FakeVocabularyService:
    """In-memory VocabularyService recording every call."""

    def __init__(self, records=(), vocabularies=(), fail: bool = False):
        self.records = {(record.vocabulary_id, record.id): record for record in records}
        self.vocabularies = {vocabulary.id: vocabulary for vocabulary in vocabularies}
        self.fail = fail
        self.calls = []

    def get_record(self, vocabulary_id, record_id):
        self.calls.append(("get_record", vocabulary_id, record_id))
        if self.fail:
            raise VocabularyServiceError("service unavailable")
        return self.records.get((vocabulary_id, record_id))

    def get_vocabulary_by_id(self, vocabulary_id):
        self.calls.append(("get_vocabulary_by_id", vocabulary_id))
        if self.fail:
            raise VocabularyServiceError("service unavailable")
        vocabulary = self.vocabularies.get(vocabulary_id)
        return Vocabulary(id=vocabulary.id, title=vocabulary.title) if vocabulary else None

    def get_all_records(self, vocabulary):
        self.calls.append(("get_all_records", vocabulary.id))
        vocabulary.records = [r for (vid, _), r in self.records.items() if vid == vocabulary.id]


class FakeStorage:
    """In-memory StorageInventory: folder name -> file names."""

    MIMETYPES = {".jpg": "image/jpeg", ".tif": "image/tiff", ".png": "image/png"}

    def __init__(self, folders: Optional[dict[str, list[str]]] = None):
        self.folders = folders or {}

    def list_names(self, folder):
        return list(self.folders.get(folder, []))

    def list_paths(self, folder):
        return [Path(folder) / name for name in self.folders.get(folder, [])]

    def exists(self, folder):
        return folder in self.folders

    def mime_type(self, path):
        return self.MIMETYPES.get(Path(path).suffix.lower(), "application/octet-stream")


def build_document(pages=(), published: Optional[str] = "Y", ruleset: Optional[Ruleset] = None,
                   folder: str = "/data/images") -> Document:
    """
    Document with a Person logical root and one page per image name.

    Every page carries physPageNumber and is referenced from the logical root.
    """
    document = Document(ruleset or Ruleset(METADATA_TYPES))
    logical = document.create_node("Person", "LOG_ROOT")
    physical = document.create_node("BoundBook", "PHYS_ROOT")
    document.set_logical_root(logical)
    document.set_physical_root(physical)
    if published is not None:
        logical.metadata.append(Metadata("Published", published))

    for index, image in enumerate(pages, start=1):
        page = document.create_node("page", f"PHYS_{index:04d}")
        document.add_child(physical.id, page.id)
        page.metadata.append(Metadata("physPageNumber", str(index)))
        page.metadata.append(Metadata("logicalPageNumber", "uncounted"))
        document.add_reference(logical.id, page.id, LOGICAL_PHYSICAL)
        document.add_content_file(page, ContentFile(id=f"FILE_{index:04d}", location=f"file://{folder}/{image}",
                                                    mimetype="image/jpeg"))
    return document


def group(group_type: str, *metadata: tuple[str, Optional[str]], groups=()) -> MetadataGroup:
    return MetadataGroup(
        type=group_type,
        metadata=[Metadata(md_type, value) for md_type, value in metadata],
        groups=list(groups),
    )


def page_numbers(document: Document) -> list[str]:
    return [page.first_value("physPageNumber") for page in document.children(document.physical_id)]


@pytest.fixture
def ruleset():
    return Ruleset(METADATA_TYPES)


@pytest.fixture
def document_factory():
    return build_document


@pytest.fixture
def storage():
    return FakeStorage()
