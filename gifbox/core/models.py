"""Data models for stored images and their exported metadata."""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import IO, Optional


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 (naive values are taken as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


_RFC3339 = re.compile(
    r"\A\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})\Z"
)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp. Raises ValueError on bad input."""
    if not _RFC3339.match(value):
        raise ValueError(f"Not an RFC 3339 timestamp: {value!r}")
    value = value[:10] + "T" + value[11:]
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass
class ImageEntry:
    """A stored image. `data` is empty when only metadata is loaded."""

    id: str
    url: str = ""
    tags: list[str] = field(default_factory=list)
    added_at: Optional[datetime] = None
    size: int = 0  # bytes
    type: str = ""  # sniffed from content, "" when unknown
    data: bytes = b""

    def is_hydrated(self) -> bool:
        return len(self.data) > 0

    def set_added_at_from_string(self, value: str) -> None:
        """Set `added_at` from an RFC 3339 string. On ValueError it is left untouched."""
        self.added_at = parse_timestamp(value)

    def to_metadata(self) -> "ExportedMetadata":
        return ExportedMetadata(
            id=self.id,
            url=self.url,
            tags=list(self.tags),
            added_at=format_timestamp(self.added_at) if self.added_at else None,
        )


@dataclass
class ExportedMetadata:
    """Externally visible shape of an entry, as found in `gif.json`."""

    id: str
    url: str = ""
    tags: list[str] = field(default_factory=list)
    added_at: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"id": self.id, "url": self.url, "tags": self.tags}
        if self.added_at:
            data["addedAt"] = self.added_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ExportedMetadata":
        if not isinstance(data, dict):
            raise ValueError(f"Metadata record must be an object, got {type(data).__name__}")

        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ValueError("Metadata 'tags' must be a list of strings")

        added_at = data.get("addedAt")
        if added_at is not None and not isinstance(added_at, str):
            raise ValueError("Metadata 'addedAt' must be a string")

        return cls(
            id=str(data.get("id") or "").lower(),
            url=str(data.get("url") or ""),
            tags=tags,
            added_at=added_at or None,
        )


def parse_metadata(source: str | bytes | IO) -> list[ExportedMetadata]:
    """Parse a JSON metadata array (a `gif.json` document or a bare manifest).

    Args:
        source: JSON text, UTF-8 bytes or a readable stream

    Returns:
        List of metadata records in document order

    Raises:
        ValueError: If the input is not a JSON array of metadata objects
    """
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, bytes):
        source = source.decode("utf-8")

    # json.JSONDecodeError is a ValueError subclass
    document = json.loads(source)
    if not isinstance(document, list):
        raise ValueError("Metadata must be a JSON array")

    return [ExportedMetadata.from_dict(item) for item in document]
