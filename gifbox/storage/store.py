"""On-disk content-addressed image store."""

import logging
import shutil
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from ..core.filters import Filter, NullFilter
from ..core.models import ImageEntry
from ..core.outcome import ADDED, ERROR, SKIPPED, OutcomeSink, short_id
from ..transfer.exporter import write_bundle, write_metadata
from .database import MetadataDatabase

logger = logging.getLogger(__name__)

DB_NAME = "metadata.db"


class Store:
    """Maps entry ids to content files plus a SQLite metadata table.

    Content lives at ``{root}/{id}.gif``; the store is the only writer of
    its root directory.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.db = MetadataDatabase(self.root / DB_NAME)

    def path_for(self, entry: ImageEntry) -> Path:
        return self.root / f"{entry.id}.gif"

    def contains(self, entry: ImageEntry) -> bool:
        return self.path_for(entry).exists()

    def save(self, entry: ImageEntry) -> None:
        """Write the entry's content. Rewriting the same id is harmless."""
        self.path_for(entry).write_bytes(entry.data)

    def read_data(self, entry: ImageEntry) -> bytes:
        return self.path_for(entry).read_bytes()

    def add(self, entry: ImageEntry, sink: OutcomeSink) -> str:
        """Persist an entry and report the outcome.

        Returns:
            The reported status: 'added', 'skipped' or 'error'
        """
        label = short_id(entry.id)

        if not entry.is_hydrated():
            sink.error(label, "no content")
            return ERROR

        if self.contains(entry):
            sink.skipped(entry.id, "already in store")
            return SKIPPED

        if entry.added_at is None:
            entry.added_at = datetime.now(timezone.utc)

        try:
            self.save(entry)
            self.db.put(entry)
        except (OSError, sqlite3.Error) as e:
            self.path_for(entry).unlink(missing_ok=True)
            sink.error(label, str(e))
            return ERROR

        logger.debug("Stored %s (%d bytes) at %s", entry.id, entry.size, self.path_for(entry))
        sink.added(entry.id, entry.url or "local file")
        return ADDED

    def list(self, filter: Filter | None = None, with_data: bool = False) -> list[ImageEntry]:
        """List stored entries passing `filter`, optionally with content."""
        entries = (filter or NullFilter()).apply(self.db.list_all())
        if with_data:
            for entry in entries:
                entry.data = self.read_data(entry)
        return entries

    def export(self, stream: BinaryIO, filter: Filter | None = None, include_content: bool = False) -> None:
        """Write the filtered listing to `stream` as a bundle or a bare manifest."""
        entries = self.list(filter)
        logger.debug("Exporting %d entries (content=%s)", len(entries), include_content)
        if include_content:
            write_bundle(stream, entries, self.read_data)
        else:
            write_metadata(stream, entries)

    def count(self) -> int:
        return self.db.count()

    def purge(self) -> None:
        """Delete the whole store root, database included."""
        shutil.rmtree(self.root)
