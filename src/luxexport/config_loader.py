"""
Configuration loading interface for the luxexport pipeline.

This module loads the two YAML files an export needs:
- the export configuration (flags, metadata rules, vocabulary rules, file groups)
- the ruleset (known metadata types and where they may be attached)

Incomplete metadata and vocabulary rules are dropped with a warning rather
than failing the whole configuration.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config.settings import ConfigurationError
from .document import Ruleset
from .domain.models import (
    ExportSettings,
    MetadataRule,
    ProjectFileGroup,
    VocabularyEnrichment,
    VocabularyRecordConfig,
)
from .utils import is_blank, load_yaml_file

logger = logging.getLogger(__name__)


def load_export_settings(config_path: str | Path) -> ExportSettings:
    """
    Load the export configuration YAML file.

    Args:
        config_path: Path to the export configuration

    Returns:
        Validated ExportSettings

    Raises:
        ConfigurationError: If the file is missing, is not valid YAML or has invalid flags
    """
    try:
        raw = load_yaml_file(Path(config_path))
    except (FileNotFoundError, ValueError) as e:
        raise ConfigurationError(str(e)) from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Export configuration must be a mapping: {config_path}")
    return parse_export_settings(raw)


def parse_export_settings(raw: dict[str, Any]) -> ExportSettings:
    """Build ExportSettings from an already parsed configuration mapping."""
    try:
        settings = ExportSettings(
            cleanupPagination=raw.get('cleanupPagination', False),
            exportUnpublishedRecords=raw.get('exportUnpublishedRecords', False),
            addEventLocationFromAgent=raw.get('addEventLocationFromAgent', False),
            vocabularyBaseUrl=raw.get('vocabularyBaseUrl'),
            metadata=_read_metadata_rules(raw.get('metadata') or []),
            vocabulary=_read_vocabulary_configs(raw.get('vocabulary') or []),
            fileGroups=_read_file_groups(raw.get('fileGroups') or []),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid export configuration: {e}") from e

    logger.debug(
        f"Export settings: {len(settings.metadata_rules)} metadata rules, "
        f"{len(settings.vocabulary_configs)} vocabulary rules, "
        f"{len(settings.file_groups)} file groups"
    )
    return settings


def _read_metadata_rules(entries: list[dict[str, Any]]) -> list[MetadataRule]:
    rules = []
    for entry in entries:
        metadata_type = entry.get('type')
        expression = entry.get('rule')
        if is_blank(metadata_type) or is_blank(expression):
            logger.warning(f"Skipping incomplete metadata rule: {entry}")
            continue
        rules.append(MetadataRule(
            type=metadata_type,
            force=bool(entry.get('force', False)),
            rule=expression,
            numberFormat=entry.get('numberFormat'),
        ))
    return rules


def _read_vocabulary_configs(entries: list[dict[str, Any]]) -> list[VocabularyRecordConfig]:
    configs = []
    for entry in entries:
        group_type = entry.get('metadataGroupType')
        identifier = entry.get('recordIdentifierMetadata')
        vocabulary_id = entry.get('vocabularyId')
        if is_blank(group_type) or is_blank(identifier) or vocabulary_id is None:
            logger.warning(f"Skipping incomplete vocabulary rule: {entry}")
            continue
        enrichments = [
            VocabularyEnrichment(
                vocabularyField=enrich.get('vocabularyField', ''),
                metadataType=enrich.get('metadataType', ''),
            )
            for enrich in entry.get('enrich') or []
        ]
        configs.append(VocabularyRecordConfig(
            metadataGroupType=group_type,
            vocabularyId=vocabulary_id,
            recordIdentifierMetadata=identifier,
            enrich=enrichments,
        ))
    return configs


def _read_file_groups(entries: list[dict[str, Any]]) -> list[ProjectFileGroup]:
    return [ProjectFileGroup.model_validate(entry) for entry in entries]


def load_ruleset(ruleset_path: str | Path) -> Ruleset:
    """
    Load the ruleset YAML file.

    Expected layout:
        metadataTypes: [Published, physPageNumber, ...]
        structureTypes: {Person: [Published, ...]}
        groupTypes: {Relationship: [Type, ...]}

    Raises:
        ConfigurationError: If the file is missing or not valid YAML
    """
    try:
        raw = load_yaml_file(Path(ruleset_path))
    except (FileNotFoundError, ValueError) as e:
        raise ConfigurationError(str(e)) from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Ruleset must be a mapping: {ruleset_path}")

    metadata_types = set(raw.get('metadataTypes') or [])
    structure_types = {name: set(allowed or []) for name, allowed in (raw.get('structureTypes') or {}).items()}
    group_types = {name: set(allowed or []) for name, allowed in (raw.get('groupTypes') or {}).items()}

    logger.debug(f"Loaded ruleset {ruleset_path}: {len(metadata_types)} metadata types")
    return Ruleset(metadata_types, structure_types, group_types)
