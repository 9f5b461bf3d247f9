"""luxexport: prepares artist dictionary records for publication."""

__version__ = "1.0.0"
