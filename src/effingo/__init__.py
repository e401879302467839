"""effingo - find and remove duplicate files by content hash."""

__version__ = "0.3.0"
