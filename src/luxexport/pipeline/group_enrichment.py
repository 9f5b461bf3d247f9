"""Group enrichment: fill blank group fields from configured vocabulary records."""

import logging

from ..document import MetadataGroup
from ..domain.models import VocabularyRecordConfig
from ..types import VocabularyError
from ..utils import is_null_like, is_numeric
from ..vocabulary import VocabularyService

logger = logging.getLogger(__name__)

UNRESOLVED_RECORD_ID = -1


def parse_record_id(value) -> int:
    """Integer record id of an identifier metadata value, -1 when blank or not numeric."""
    return int(value) if is_numeric(value) else UNRESOLVED_RECORD_ID


class GroupVocabularyEnricher:
    """Copies vocabulary field values into blank or 'null' metadata of matching groups."""

    def __init__(self, service: VocabularyService, configs: list[VocabularyRecordConfig]):
        self.service = service
        self.configs = list(configs)

    def enrich_group(self, group: MetadataGroup) -> list[str]:
        """
        Apply every rule configured for the group's type.

        Returns:
            Problem strings; service errors stop the group, not the export
        """
        problems = []
        for config in self.configs:
            if config.group_type != group.type:
                continue
            try:
                self._apply(group, config)
            except VocabularyError as e:
                logger.warning(f"Vocabulary enrichment of group {group.type} failed: {e}")
                problems.append(f"Vocabulary enrichment of group {group.type} failed: {e}")
        return problems

    def _apply(self, group: MetadataGroup, config: VocabularyRecordConfig) -> None:
        for identifier in group.metadata_by_type(config.identifier_metadata_type):
            record_id = parse_record_id(identifier.value)
            if record_id == UNRESOLVED_RECORD_ID:
                logger.debug(f"Group {group.type}: no record id in {identifier.type}")
                continue
            record = self.service.get_record(config.vocabulary_id, record_id)
            if record is None:
                logger.debug(f"Record {record_id} not found in vocabulary {config.vocabulary_id}")
                continue

            for enrichment in config.enrichments:
                record_field = record.field_by_label(enrichment.vocabulary_field_label)
                value = record_field.value if record_field else None
                if is_null_like(value):
                    continue
                for target in group.metadata_by_type(enrichment.target_metadata_type):
                    if is_null_like(target.value):
                        target.value = value
