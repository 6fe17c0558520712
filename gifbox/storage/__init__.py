"""Storage layers - content files and SQLite metadata."""

from .database import MetadataDatabase
from .store import Store

__all__ = ["MetadataDatabase", "Store"]
