"""Cursor-based paginated traversal of remote indexes."""

__version__ = "0.1.0"
