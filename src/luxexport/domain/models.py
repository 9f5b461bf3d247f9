"""
Export Domain Models

Pydantic models for vocabulary records, export settings and export jobs.
Aliases follow the camelCase keys used by the YAML configuration and the
vocabulary service so both can be validated directly.
"""

from typing import Optional

from pydantic import BaseModel, Field


class FieldDefinition(BaseModel):
    """Label/language pairing a vocabulary field is defined by."""
    label: str = Field(default="", description="Definition label")
    language: Optional[str] = Field(None, description="Language code (ger, eng, fre) or none")

    class Config:
        """Pydantic configuration."""
        frozen = True


class RecordField(BaseModel):
    """One labeled, language-tagged value of a vocabulary record."""
    label: str = Field(default="", description="Field label")
    language: Optional[str] = Field(None, description="Language code (ger, eng, fre) or none")
    value: Optional[str] = Field(None, description="Field value")
    definition: FieldDefinition = Field(default_factory=FieldDefinition, description="Field definition")

    class Config:
        """Pydantic configuration."""
        frozen = True


class VocabularyRecord(BaseModel):
    """Identifier-addressed record of a controlled vocabulary."""
    id: int = Field(..., description="Record identifier")
    vocabulary_id: int = Field(..., alias="vocabularyId", description="Owning vocabulary identifier")
    title: str = Field(default="", description="Record title")
    fields: list[RecordField] = Field(default_factory=list, description="Ordered record fields")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True

    def field_by_label(self, label: str) -> Optional[RecordField]:
        """Return the first field with the given label."""
        for record_field in self.fields:
            if record_field.label == label:
                return record_field
        return None


class Vocabulary(BaseModel):
    """Controlled vocabulary; records are loaded on demand by the service."""
    id: int = Field(..., description="Vocabulary identifier")
    title: str = Field(default="", description="Vocabulary name")
    records: list[VocabularyRecord] = Field(default_factory=list, description="Loaded records")


class VocabularyEnrichment(BaseModel):
    """Copy one vocabulary field into one metadata type of a group."""
    vocabulary_field_label: str = Field(..., alias="vocabularyField")
    target_metadata_type: str = Field(..., alias="metadataType")

    class Config:
        """Pydantic configuration."""
        frozen = True
        populate_by_name = True


class VocabularyRecordConfig(BaseModel):
    """Group enrichment rule: which groups, which vocabulary, which fields."""
    group_type: str = Field(..., alias="metadataGroupType")
    vocabulary_id: int = Field(..., alias="vocabularyId")
    identifier_metadata_type: str = Field(..., alias="recordIdentifierMetadata")
    enrichments: list[VocabularyEnrichment] = Field(default_factory=list, alias="enrich")

    class Config:
        """Pydantic configuration."""
        frozen = True
        populate_by_name = True


class MetadataRule(BaseModel):
    """Rule generating an additional metadata on the logical root."""
    metadata_type: str = Field(..., alias="type")
    force_creation: bool = Field(default=False, alias="force")
    rule_expression: str = Field(..., alias="rule")
    number_format: Optional[str] = Field(None, alias="numberFormat")

    class Config:
        """Pydantic configuration."""
        frozen = True
        populate_by_name = True


class ProjectFileGroup(BaseModel):
    """Project-level file group definition used to plan output file groups."""
    name: str = Field(..., description="File group name (PRESENTATION is the main group)")
    path: str = Field(default="", description="Path to files, may contain variables")
    mimetype: Optional[str] = Field(None, description="Mimetype of the group's files")
    suffix: Optional[str] = Field(None, description="File suffix")
    folder: Optional[str] = Field(None, description="Job folder key the files come from")
    ignore_mimetypes: Optional[str] = Field(None, alias="ignoreMimetypes")
    use_original_files: bool = Field(default=False, alias="useOriginalFiles")

    class Config:
        """Pydantic configuration."""
        frozen = True
        populate_by_name = True


class VirtualFileGroup(BaseModel):
    """Planned output file group."""
    name: str
    path_to_files: str = ""
    mimetype: Optional[str] = None
    file_suffix: Optional[str] = None
    file_extensions_to_ignore: Optional[str] = None
    ignore_configured_mimetype_and_suffix: bool = False
    main_group: bool = False


class ExportSettings(BaseModel):
    """Parsed export configuration."""
    cleanup_pagination: bool = Field(default=False, alias="cleanupPagination")
    export_unpublished_records: bool = Field(default=False, alias="exportUnpublishedRecords")
    add_event_location_from_agent: bool = Field(default=False, alias="addEventLocationFromAgent")
    vocabulary_base_url: Optional[str] = Field(None, alias="vocabularyBaseUrl")
    metadata_rules: list[MetadataRule] = Field(default_factory=list, alias="metadata")
    vocabulary_configs: list[VocabularyRecordConfig] = Field(default_factory=list, alias="vocabulary")
    file_groups: list[ProjectFileGroup] = Field(default_factory=list, alias="fileGroups")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class ExportJob(BaseModel):
    """One export call: which document, where its files live, where it goes."""
    identifier: str = Field(..., description="Document identifier in the document store")
    title: str = Field(..., description="Process title, used for the descriptor file name")
    process_id: Optional[str] = Field(None, description="Process identifier")
    destination: str = Field(..., description="Destination folder of the descriptor")
    media_folder: Optional[str] = Field(None, description="Folder listing used for pagination rebuild")
    image_folder: Optional[str] = Field(None, description="Folder listing used for reconciliation")
    folders: dict[str, str] = Field(default_factory=dict, description="Named job folders for file groups")
