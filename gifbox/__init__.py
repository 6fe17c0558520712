"""gifbox - Content-addressed local store for image assets.

Package structure:
    gifbox/
    ├── cli.py              # Command-line interface
    ├── config.py           # Store path resolution
    ├── core/               # Core business logic
    │   ├── models.py       # Data models (ImageEntry, ExportedMetadata)
    │   ├── addressing.py   # Content ids and type sniffing
    │   ├── filters.py      # Composable listing filters
    │   └── outcome.py      # Per-entry outcome reporting
    ├── storage/            # Data persistence
    │   ├── database.py     # SQLite metadata storage
    │   └── store.py        # Content files + metadata
    └── transfer/           # Bundle import/export
        ├── exporter.py     # Bundle and manifest writer
        └── importer.py     # Bundle, manifest and directory import
"""

from .core.models import ImageEntry, ExportedMetadata, parse_metadata
from .core.addressing import FetchError, classify, digest, from_bytes, from_file, from_url
from .core.filters import NullFilter, RemoteFilter, TypeFilter, OrderAndLimit, build_filter
from .core.outcome import OutcomeSink
from .storage.store import Store
from .transfer.exporter import write_bundle, write_metadata
from .transfer.importer import (
    BundleError,
    ImportFormatError,
    import_bundle,
    import_directory,
    import_from_reader,
    import_location,
    import_urls,
)

__all__ = [
    # Core
    "ImageEntry",
    "ExportedMetadata",
    "parse_metadata",
    "FetchError",
    "classify",
    "digest",
    "from_bytes",
    "from_file",
    "from_url",
    "NullFilter",
    "RemoteFilter",
    "TypeFilter",
    "OrderAndLimit",
    "build_filter",
    "OutcomeSink",
    # Storage
    "Store",
    # Transfer
    "write_bundle",
    "write_metadata",
    "BundleError",
    "ImportFormatError",
    "import_bundle",
    "import_directory",
    "import_from_reader",
    "import_location",
    "import_urls",
]
