"""SQLite database layer for entry metadata."""

import json
import sqlite3
from pathlib import Path
from typing import Optional

from ..core.models import ImageEntry, format_timestamp, parse_timestamp

_COLUMNS = "id, url, tags, added_at, size, type"


class MetadataDatabase:
    """Manages entry metadata storage in SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create the images table if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS images (
                    id TEXT PRIMARY KEY,
                    url TEXT NOT NULL DEFAULT '',
                    tags TEXT NOT NULL DEFAULT '[]',
                    added_at TEXT,
                    size INTEGER NOT NULL,
                    type TEXT NOT NULL DEFAULT ''
                )
            """)
            conn.commit()

    def put(self, entry: ImageEntry) -> None:
        """Insert or replace the metadata row for an entry."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(f"""
                INSERT OR REPLACE INTO images ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?)
            """, (
                entry.id,
                entry.url,
                json.dumps(entry.tags),
                format_timestamp(entry.added_at) if entry.added_at else None,
                entry.size,
                entry.type,
            ))
            conn.commit()

    def _row_to_entry(self, row) -> ImageEntry:
        """Convert a database row to a dehydrated ImageEntry."""
        return ImageEntry(
            id=row[0],
            url=row[1],
            tags=json.loads(row[2]),
            added_at=parse_timestamp(row[3]) if row[3] else None,
            size=row[4],
            type=row[5],
        )

    def get(self, image_id: str) -> Optional[ImageEntry]:
        """Retrieve an entry's metadata by its id."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"SELECT {_COLUMNS} FROM images WHERE id = ?",
                (image_id,)
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_entry(row)
            return None

    def list_all(self) -> list[ImageEntry]:
        """List every row, in no particular order."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(f"SELECT {_COLUMNS} FROM images")
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    def count(self) -> int:
        """Return the number of rows in the database."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("SELECT COUNT(*) FROM images")
            return cursor.fetchone()[0]
