"""
luxexport Pipeline Components

This module provides the export stages and their orchestration.

Components:
- admission: AdmissionFilter for export eligibility
- groups: GroupPruner removing unpublished groups
- structure: StructureReconciler and PaginationRebuilder for the page sequence
- representative: RepresentativeImageSelector
- enrichment: MetadataEnricher with the vocabulary strategy registry
- group_enrichment: GroupVocabularyEnricher
- location: AgentLocationImporter
- generation: VariableReplacer and MetadataGenerator
- filegroups: FileGroupPlanner
- export: DocumentExporter running one export
"""

from .admission import AdmissionFilter
from .enrichment import MetadataEnricher, StrategyRegistry, default_registry
from .export import DocumentExporter, ExportResult
from .filegroups import FileGroupPlanner
from .generation import MetadataGenerator, VariableReplacer
from .group_enrichment import GroupVocabularyEnricher
from .groups import GroupPruner, PrunedGroups
from .location import AgentLocationImporter
from .representative import RepresentativeImageSelector
from .structure import PaginationRebuilder, StructureReconciler

__all__ = [
    "AdmissionFilter", "GroupPruner", "PrunedGroups", "StructureReconciler", "PaginationRebuilder",
    "RepresentativeImageSelector", "MetadataEnricher", "StrategyRegistry", "default_registry",
    "GroupVocabularyEnricher", "AgentLocationImporter", "MetadataGenerator", "VariableReplacer",
    "FileGroupPlanner", "DocumentExporter", "ExportResult"
]
