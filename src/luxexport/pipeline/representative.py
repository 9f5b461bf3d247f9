"""Representative image selection from the logical root's Media groups."""

import logging
from typing import Optional

from ..document import Document
from ..utils import final_segment, normalize_whitespace

logger = logging.getLogger(__name__)

MEDIA_GROUP = "Media"
REPRESENTATIVE_SUBJECTS = frozenset({"Portrait", "Event visual", "Award visual "})


class RepresentativeImageSelector:
    """Flags the content file(s) named by the first portrait-like Media group."""

    def select(self, document: Document) -> list[str]:
        """
        Mark matching content files as representative.

        Returns:
            Ids of the content files that were flagged (empty if nothing matched
            or a representative was already set)
        """
        files = document.file_set.files
        if not files or any(cf.representative for cf in files):
            return []
        logical = document.logical
        if logical is None:
            return []

        filename = self._representative_filename(logical.groups_by_type(MEDIA_GROUP))
        if filename is None:
            logger.debug("No Media group qualifies for the representative image")
            return []

        flagged = []
        for content_file in files:
            if content_file.location and normalize_whitespace(content_file.location).endswith(filename):
                content_file.representative = True
                flagged.append(content_file.id)
        logger.debug(f"Representative image {filename}: flagged {flagged}")
        return flagged

    @staticmethod
    def _representative_filename(media_groups) -> Optional[str]:
        for group in media_groups:
            if any(md.value in REPRESENTATIVE_SUBJECTS for md in group.metadata_by_type("Subject")):
                for md in group.metadata_by_type("File"):
                    name = normalize_whitespace(final_segment(md.value or ""))
                    if name.strip():
                        return name
                return None
        return None
