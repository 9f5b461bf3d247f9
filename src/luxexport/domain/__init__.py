"""
Domain Models and Types

This module contains the core domain models and enumerations used throughout the pipeline.

Models:
- VocabularyRecord, RecordField, FieldDefinition, Vocabulary: controlled vocabulary data
- ExportSettings: parsed export configuration (rules, flags, file groups)
- ExportJob: one export call and the folders it works on

Enums:
- Language: vocabulary languages that yield normalized metadata
- RelationDirection: forward/reverse side of relationship vocabularies
- ContainerKind: structure nodes vs. metadata groups
"""

from .enums import ContainerKind, Language, RelationDirection
from .models import (
    ExportJob,
    ExportSettings,
    FieldDefinition,
    MetadataRule,
    ProjectFileGroup,
    RecordField,
    VirtualFileGroup,
    Vocabulary,
    VocabularyEnrichment,
    VocabularyRecord,
    VocabularyRecordConfig,
)

__all__ = [
    "ExportJob", "ExportSettings", "FieldDefinition", "MetadataRule", "ProjectFileGroup",
    "RecordField", "VirtualFileGroup", "Vocabulary", "VocabularyEnrichment",
    "VocabularyRecord", "VocabularyRecordConfig",
    "ContainerKind", "Language", "RelationDirection"
]
