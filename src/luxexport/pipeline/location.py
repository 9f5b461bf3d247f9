"""
Event location import.

Events organized by an agent inherit the agent's LocationGroup when they do
not carry one themselves. The agent document is read through the injected
DocumentStore.
"""

import logging
from typing import Optional

from ..document import Document, MetadataGroup
from ..document_store import DocumentStore
from ..types import ExportError

logger = logging.getLogger(__name__)

LOCATION_GROUP = "LocationGroup"
RELATIONSHIP_GROUP = "Relationship"
ORGANIZER_RELATIONS = frozenset({"was organized by", "organized"})


class AgentLocationImporter:
    """Copies the first LocationGroup of organizing agents onto the logical root."""

    def __init__(self, document_store: DocumentStore):
        self.document_store = document_store

    def import_location(self, document: Document) -> list[MetadataGroup]:
        """
        Add the organizing agents' location groups to the document.

        Agent documents that cannot be read are logged and skipped.

        Returns:
            Groups added to the logical root
        """
        logical = document.logical
        if logical is None or logical.groups_by_type(LOCATION_GROUP):
            return []

        added = []
        for relationship in logical.groups_by_type(RELATIONSHIP_GROUP):
            if relationship.first_value("RelationEntityType") != "Agent":
                continue
            if relationship.first_value("Type") not in ORGANIZER_RELATIONS:
                continue
            agent_id = relationship.first_value("RelationProcessID")
            if not agent_id:
                logger.warning(f"Relationship to organizing agent without RelationProcessID in {logical.id}")
                continue
            try:
                location = self._agent_location(agent_id)
            except ExportError as e:
                logger.error(f"Unable to add location metadata group to event from agent: {e}")
                continue
            if location is not None:
                added.append(document.add_metadata_group(logical, location))
                logger.debug(f"Added LocationGroup of agent {agent_id}")
        return added

    def _agent_location(self, agent_id: str) -> Optional[MetadataGroup]:
        agent = self.document_store.read(agent_id)
        if agent.logical is None:
            return None
        locations = agent.logical.groups_by_type(LOCATION_GROUP)
        return locations[0] if locations else None
