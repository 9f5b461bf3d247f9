"""
Document Exporter - Orchestration of one export call

Runs the pipeline stages over one document in a fixed order:

    read -> admission -> group pruning -> pagination rebuild -> agent location
         -> reconciliation -> representative image -> vocabulary enrichment
         -> metadata generation -> file group planning -> write descriptor

Fatal errors (ExportError) abort the export with a single problem entry; a
document that is not eligible is skipped without writing anything.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..document import Document, MetadataGroup
from ..document_store import DocumentStore, JsonDocumentStore
from ..domain.models import ExportJob, ExportSettings, VirtualFileGroup
from ..storage import StorageInventory
from ..types import ExportError, NotExportableError, ProblemLog
from ..utils import clean_filename, timer
from ..vocabulary import VocabularyService
from .admission import AdmissionFilter
from .enrichment import MetadataEnricher, StrategyRegistry
from .filegroups import FileGroupPlanner
from .generation import MetadataGenerator, VariableReplacer
from .group_enrichment import GroupVocabularyEnricher
from .groups import GroupPruner
from .location import AgentLocationImporter
from .representative import RepresentativeImageSelector
from .structure import PaginationRebuilder, StructureReconciler

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Outcome of one export call."""
    success: bool = True
    skipped: bool = False
    problems: ProblemLog = field(default_factory=ProblemLog)
    document: Optional[Document] = None
    output_path: Optional[Path] = None
    file_groups: list[VirtualFileGroup] = field(default_factory=list)
    sources: list[MetadataGroup] = field(default_factory=list)
    bibliographies: list[MetadataGroup] = field(default_factory=list)


class DocumentExporter:
    """
    Exports documents according to one set of export settings.

    Collaborators are injected; the exporter keeps no state between exports,
    so one instance may run several exports in sequence.
    """

    def __init__(self,
                 settings: ExportSettings,
                 store: DocumentStore,
                 storage: StorageInventory,
                 vocabulary_service: Optional[VocabularyService] = None,
                 agent_store: Optional[DocumentStore] = None,
                 output_store: Optional[DocumentStore] = None,
                 registry: Optional[StrategyRegistry] = None):
        """
        Initialize the exporter.

        Args:
            settings: Parsed export configuration
            store: Store the documents are read from (and written back to after a rebuild)
            storage: Folder inventory for reconciliation, rebuild and file groups
            vocabulary_service: Vocabulary lookups; enrichment is skipped when None
            agent_store: Store of related agent documents (defaults to store)
            output_store: Store the exported descriptor is written to
            registry: Strategy registry for metadata enrichment
        """
        self.settings = settings
        self.store = store
        self.storage = storage
        self.vocabulary_service = vocabulary_service
        self.agent_store = agent_store or store
        self.output_store = output_store or JsonDocumentStore()
        self.registry = registry

    @timer
    def export(self, job: ExportJob) -> ExportResult:
        """
        Run one export.

        Args:
            job: Document identifier, folders and destination of this export

        Returns:
            ExportResult; success is False only after a fatal error
        """
        result = ExportResult()
        try:
            document = self.store.read(job.identifier)
            result.document = document
            self._run(document, job, result)
        except NotExportableError as e:
            logger.debug(f"Export of {job.identifier} not applicable: {e}")
            result.skipped = True
        except ExportError as e:
            logger.error(f"Export of {job.identifier} failed: {e}")
            result.problems.add(str(e))
            result.success = False
        return result

    def _run(self, document: Document, job: ExportJob, result: ExportResult) -> None:
        settings = self.settings

        AdmissionFilter(settings.export_unpublished_records).check(document)

        if settings.cleanup_pagination:
            if job.media_folder:
                rebuild = PaginationRebuilder(self.storage).rebuild(document, job.media_folder)
                if rebuild.persist_required:
                    self.store.write(document, job.identifier)
            else:
                logger.warning("cleanupPagination is enabled but the job has no media folder")

        pruned = GroupPruner().prune(document)
        result.sources = pruned.sources
        result.bibliographies = pruned.bibliographies

        if settings.add_event_location_from_agent:
            AgentLocationImporter(self.agent_store).import_location(document)

        if job.image_folder:
            StructureReconciler(self.storage).reconcile(document, job.image_folder)

        RepresentativeImageSelector().select(document)

        if self.vocabulary_service is not None:
            result.problems.extend(self._enrich_from_vocabulary(document))
        else:
            logger.debug("No vocabulary service configured, skipping enrichment")

        replacer = VariableReplacer(document, job.process_id, job.title)
        result.problems.extend(MetadataGenerator(settings.metadata_rules).generate(document, replacer))

        result.file_groups = FileGroupPlanner(self.storage).plan(document, job, settings.file_groups, replacer)

        destination = Path(job.destination) / f"{clean_filename(job.title)}.json"
        result.output_path = self.output_store.write(document, str(destination))
        logger.info(f"Exported {job.identifier} to {result.output_path}")

    def _enrich_from_vocabulary(self, document: Document) -> list[str]:
        """Metadata and group enrichment over the logical root, its groups and their subgroups."""
        enricher = MetadataEnricher(self.vocabulary_service, self.settings.vocabulary_base_url, self.registry)
        group_enricher = GroupVocabularyEnricher(self.vocabulary_service, self.settings.vocabulary_configs)

        logical = document.logical
        problems = enricher.enrich_container(document, logical)
        for group in list(logical.groups):
            problems.extend(group_enricher.enrich_group(group))
            problems.extend(enricher.enrich_container(document, group))
            for subgroup in list(group.groups):
                problems.extend(group_enricher.enrich_group(subgroup))
                problems.extend(enricher.enrich_container(document, subgroup))
        return problems
