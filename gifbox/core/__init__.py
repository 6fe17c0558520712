"""Core business logic - models, content addressing and filters."""

from .models import ImageEntry, ExportedMetadata
from .filters import NullFilter, RemoteFilter, TypeFilter, OrderAndLimit
from .outcome import OutcomeSink

__all__ = [
    "ImageEntry",
    "ExportedMetadata",
    "NullFilter",
    "RemoteFilter",
    "TypeFilter",
    "OrderAndLimit",
    "OutcomeSink",
]
