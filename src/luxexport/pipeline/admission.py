"""
Admission - Export Eligibility

Decides whether a document may be published at all. Rejection is a soft
skip (NotExportableError), not a failure.
"""

import logging
import re

from ..document import Document
from ..types import ExportError, NotExportableError

logger = logging.getLogger(__name__)

PUBLISHED = "Published"
_PUBLISHED_VALUE = re.compile(r"[YyJj]")


class AdmissionFilter:
    """Export eligibility check on the logical root's Published metadata."""

    def __init__(self, export_unpublished_records: bool = False):
        self.export_unpublished_records = export_unpublished_records

    def check(self, document: Document) -> None:
        """
        Verify that the document may be exported.

        Args:
            document: Document to check

        Raises:
            ExportError: If the document has no logical structure
            NotExportableError: If the record is not flagged as published
        """
        logical = document.logical
        if logical is None:
            raise ExportError("No logical structure defined")
        if self.export_unpublished_records:
            return

        published = logical.metadata_by_type(PUBLISHED)
        if not published:
            raise NotExportableError("Record has no Published metadata")
        if not any(md.value and _PUBLISHED_VALUE.fullmatch(md.value) for md in published):
            raise NotExportableError("Record is not flagged as published")
        logger.debug(f"Document {logical.id} admitted for export")
