"""
Vocabulary Enrichment - Authority-linked Metadata

Resolves metadata that points at a controlled-vocabulary record and derives
additional metadata from the record's fields.

Dispatch on the vocabulary name (the metadata's authority id) goes through a
StrategyRegistry:
- Location: geonames place names
- R01 ... R12: bidirectional relationship vocabularies (one strategy)
- everything else: generic per-field, per-language metadata
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..document import Document, Metadata, MetadataContainer
from ..domain.enums import Language, RelationDirection
from ..domain.models import VocabularyRecord
from ..types import AttachResult, VocabularyError, VocabularyRecordNotFound
from ..utils import is_blank, is_numeric
from ..vocabulary import VocabularyService

logger = logging.getLogger(__name__)

GEONAMES_AUTHORITY = "geonames"
GEONAMES_URI = "http://www.geonames.org/"

RELATIONSHIP_VOCABULARIES = (
    "R01 Relationship Person - Person",
    "R02 Relationship Collective agent - Collective agent",
    "R03a Relationship Person - Collective agent",
    "R03b Relationship Collective agent - Person",
    "R04 Relationship Person - Event",
    "R05 Relationship Collective agent - Event",
    "R06 Relationship Person - Work",
    "R07 Relationship Collective agent - Work",
    "R08 Relationship Event - Work",
    "R09 Relationship Person - Award",
    "R10 Relationship Collective agent - Award",
    "R11 Relationship Work - Award",
    "R12 Relationship Event - Award",
)


@dataclass(frozen=True)
class DerivedField:
    """Metadata to attach next to the enriched metadata.

    Optional fields are dropped silently when the ruleset does not know their
    type; failures of the others are reported.
    """
    metadata_type: str
    value: Optional[str]
    optional: bool = False


class EnrichmentStrategy(Protocol):
    """Derives metadata from a resolved vocabulary record."""

    def derive_metadata(self, record: VocabularyRecord, metadata: Metadata) -> list[DerivedField]: ...


class LocationStrategy:
    """Takes the place name from the record and links it to geonames."""

    def derive_metadata(self, record: VocabularyRecord, metadata: Metadata) -> list[DerivedField]:
        value = None
        authority = None
        for record_field in record.fields:
            if record_field.definition.label == "Location":
                value = record_field.value
            elif record_field.definition.label == "Authority Value":
                authority = record_field.value
        metadata.value = value
        metadata.set_authority_file(GEONAMES_AUTHORITY, GEONAMES_URI, f"{GEONAMES_URI}{authority}")
        return []


class RelationshipStrategy:
    """Normalized relationship type per language, for either relation direction."""

    def direction(self, record: VocabularyRecord, metadata: Metadata) -> RelationDirection:
        """Direction of the field whose value equals the metadata value (forward if none)."""
        for record_field in record.fields:
            if record_field.value is not None and record_field.value == metadata.value:
                if record_field.definition.label.startswith(RelationDirection.REVERSE.value):
                    return RelationDirection.REVERSE
                return RelationDirection.FORWARD
        return RelationDirection.FORWARD

    def derive_metadata(self, record: VocabularyRecord, metadata: Metadata) -> list[DerivedField]:
        side = self.direction(record, metadata)
        values: dict[str, Optional[str]] = {language.value: None for language in Language}
        for record_field in record.fields:
            definition = record_field.definition
            if definition.label.startswith(side.value) and definition.language in values:
                values[definition.language] = record_field.value

        return [
            DerivedField(f"_relationship_type_{language.value}", values[language.value])
            for language in (Language.GERMAN, Language.ENGLISH, Language.FRENCH)
        ]


class DefaultStrategy:
    """One metadata per non-blank field, named after the record's English label."""

    def derive_metadata(self, record: VocabularyRecord, metadata: Metadata) -> list[DerivedField]:
        english_label = next(
            (f.label for f in record.fields if f.language == Language.ENGLISH.value), None
        )
        derived = []
        for record_field in record.fields:
            if is_blank(record_field.value):
                continue
            record_label = english_label if not is_blank(english_label) else record_field.label
            language = record_field.definition.language
            name = f"_{record_label}_{language}" if not is_blank(language) else f"_{record_label}"
            derived.append(DerivedField(name.replace(" ", "").lower(), record_field.value, optional=True))
        return derived


class StrategyRegistry:
    """Maps vocabulary names to enrichment strategies."""

    def __init__(self, default: EnrichmentStrategy):
        self.default = default
        self._strategies: dict[str, EnrichmentStrategy] = {}

    def register(self, vocabulary_name: str, strategy: EnrichmentStrategy) -> None:
        self._strategies[vocabulary_name] = strategy

    def get(self, vocabulary_name: Optional[str]) -> EnrichmentStrategy:
        return self._strategies.get(vocabulary_name, self.default)

    def __contains__(self, vocabulary_name: str) -> bool:
        return vocabulary_name in self._strategies


def default_registry() -> StrategyRegistry:
    """Registry with the Location, relationship and default strategies."""
    registry = StrategyRegistry(DefaultStrategy())
    registry.register("Location", LocationStrategy())
    relationship = RelationshipStrategy()
    for name in RELATIONSHIP_VOCABULARIES:
        registry.register(name, relationship)
    return registry


def split_authority_value(authority_value: str) -> tuple[str, str]:
    """
    Split '{prefix}/{vocabularyId}/{recordId}' into (vocabulary_id, record_id).

    Missing segments come back as empty strings.
    """
    record_id = authority_value[authority_value.rfind("/") + 1:]
    prefix = authority_value[:authority_value.rfind("/")] if "/" in authority_value else ""
    vocabulary_id = prefix[prefix.rfind("/") + 1:]
    return vocabulary_id, record_id


class MetadataEnricher:
    """
    Authority-linked metadata enrichment.

    The vocabulary service is injected; lookups are not cached. Failures are
    scoped to one metadata and reported as problem strings.
    """

    def __init__(self,
                 service: VocabularyService,
                 base_url: Optional[str] = None,
                 registry: Optional[StrategyRegistry] = None):
        """
        Args:
            service: Vocabulary lookup service
            base_url: Base URL for rewritten authority values (falls back to the authority URI)
            registry: Strategy registry, defaults to default_registry()
        """
        self.service = service
        self.base_url = base_url
        self.registry = registry or default_registry()

    @staticmethod
    def is_vocabulary_linked(metadata: Metadata) -> bool:
        return not is_blank(metadata.authority_value) and "vocabulary" in (metadata.authority_uri or "")

    def enrich_container(self, document: Document, container: MetadataContainer) -> list[str]:
        """
        Enrich every vocabulary-linked metadata held directly by the container.

        Metadata derived during this call are not enriched themselves.

        Returns:
            Problem strings for failed lookups and rejected derived metadata
        """
        problems = []
        for metadata in list(container.metadata):
            if not self.is_vocabulary_linked(metadata):
                continue
            try:
                results = self.enrich_metadata(document, container, metadata)
            except VocabularyError as e:
                logger.warning(f"Vocabulary enrichment of {metadata.type} failed: {e}")
                problems.append(f"Vocabulary enrichment of {metadata.type} failed: {e}")
                continue
            problems.extend(result.describe() for result in results if not result.attached)
        return problems

    def enrich_metadata(self,
                        document: Document,
                        container: MetadataContainer,
                        metadata: Metadata) -> list[AttachResult]:
        """
        Resolve one metadata against the vocabulary service.

        Args:
            document: Document owning the container (its ruleset decides attachment)
            container: Parent of the metadata; derived metadata are attached here
            metadata: Vocabulary-linked metadata, updated in place

        Returns:
            Attach results of the derived metadata

        Raises:
            VocabularyRecordNotFound: If the record cannot be resolved
            VocabularyServiceError: If the service fails
        """
        base_url = self.base_url if not is_blank(self.base_url) else metadata.authority_uri
        vocabulary_id, record_id = split_authority_value(metadata.authority_value)
        if not is_numeric(vocabulary_id):
            logger.debug(f"Skipping {metadata.type}: malformed authority value {metadata.authority_value}")
            return []

        record = self.resolve_record(int(vocabulary_id), record_id)
        metadata.authority_value = f"{base_url}/{record.vocabulary_id}/{record.id}"

        strategy = self.registry.get(metadata.authority_id)
        results = []
        for derived in strategy.derive_metadata(record, metadata):
            if derived.optional and not document.ruleset.has_metadata_type(derived.metadata_type):
                continue
            results.append(document.add_metadata(container, Metadata(derived.metadata_type, derived.value)))
        return results

    def resolve_record(self, vocabulary_id: int, record_key: str) -> VocabularyRecord:
        """Look a record up by numeric id, or by title otherwise."""
        record = None
        if is_numeric(record_key):
            record = self.service.get_record(vocabulary_id, int(record_key))
        else:
            vocabulary = self.service.get_vocabulary_by_id(vocabulary_id)
            if vocabulary is not None:
                self.service.get_all_records(vocabulary)
                record = next((r for r in vocabulary.records if r.title == record_key), None)
        if record is None:
            raise VocabularyRecordNotFound(vocabulary_id, record_key)
        return record
