"""
Export Enumerations

Core enums for type safety and clear interface definitions across the pipeline.
"""

from enum import Enum


class Language(str, Enum):
    """Vocabulary field languages that produce normalized metadata."""
    GERMAN = "ger"
    ENGLISH = "eng"
    FRENCH = "fre"


class RelationDirection(str, Enum):
    """Direction of a bidirectional relationship vocabulary entry."""
    FORWARD = "Relationship"  # Field labels start with "Relationship"
    REVERSE = "Reverse"       # Field labels start with "Reverse"


class ContainerKind(str, Enum):
    """Kinds of metadata containers known to the ruleset."""
    STRUCTURE = "structure" # Logical sections and physical pages
    GROUP = "group"         # Metadata groups
