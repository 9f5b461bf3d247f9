"""
Rule-based Metadata Generation

VariableReplacer expands placeholders in rule expressions and file group
paths:
    {process.id}      process identifier
    {process.title}   process title
    {meta.<Type>}     first value of <Type> on the logical root (empty if absent)

MetadataGenerator adds the expanded rules as metadata to the logical root.
"""

import logging
import re
from typing import Optional

from ..document import Document, Metadata
from ..domain.models import MetadataRule
from ..utils import is_blank

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(process\.id|process\.title|meta\.[^{}]+)\}")
_INTEGER = re.compile(r"-?\d+")


class VariableReplacer:
    """Placeholder expansion against one document and process."""

    def __init__(self, document: Document, process_id: Optional[str] = None, process_title: Optional[str] = None):
        self.document = document
        self.process_id = process_id
        self.process_title = process_title

    def lookup(self, name: str) -> str:
        if name == "process.id":
            return self.process_id or ""
        if name == "process.title":
            return self.process_title or ""
        logical = self.document.logical
        if logical is None:
            return ""
        return logical.first_value(name[len("meta."):]) or ""

    def replace(self, expression: Optional[str], number_format: Optional[str] = None) -> str:
        """
        Expand every placeholder of the expression.

        Args:
            expression: Text with placeholders
            number_format: Python format spec applied to integer substitutions (e.g. '05d')

        Raises:
            ValueError: If number_format is not a valid integer format spec
        """
        if not expression:
            return ""

        def substitute(match: re.Match) -> str:
            value = self.lookup(match.group(1))
            if number_format and _INTEGER.fullmatch(value):
                return format(int(value), number_format)
            return value

        return _PLACEHOLDER.sub(substitute, expression)


class MetadataGenerator:
    """Adds configured, rule-generated metadata to the logical root."""

    def __init__(self, rules: list[MetadataRule]):
        self.rules = list(rules)

    def generate(self, document: Document, replacer: VariableReplacer) -> list[str]:
        """
        Apply every rule whose metadata type exists in the ruleset.

        A rule is applied when it forces creation or the logical root has no
        metadata of its type yet; blank expansions are not added.

        Returns:
            Problem strings for metadata that could not be added
        """
        logical = document.logical
        if logical is None:
            return []

        problems = []
        for rule in self.rules:
            if not document.ruleset.has_metadata_type(rule.metadata_type):
                logger.debug(f"Skipping rule for unknown metadata type {rule.metadata_type}")
                continue
            if not rule.force_creation and logical.metadata_by_type(rule.metadata_type):
                continue
            try:
                value = replacer.replace(rule.rule_expression, rule.number_format)
            except ValueError as e:
                logger.error(f"Invalid number format for {rule.metadata_type}: {e}")
                problems.append(f"Error adding metadata of type {rule.metadata_type}")
                continue
            if is_blank(value):
                continue
            result = document.add_metadata(logical, Metadata(rule.metadata_type, value))
            if not result.attached:
                logger.error(result.describe())
                problems.append(f"Error adding metadata of type {rule.metadata_type}")
        return problems
