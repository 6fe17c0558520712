"""Bundle and manifest export.

A bundle is a gzip-compressed tar stream holding ``gif.json`` (the JSON
metadata array) and one ``{id}.gif`` member per entry. A manifest is the
same JSON array on its own.
"""

import io
import json
import re
import tarfile
import time
from typing import BinaryIO, Callable, Iterable

from ..core.models import ImageEntry

METADATA_NAME = "gif.json"

_BUNDLE_SUFFIX = re.compile(r"(?:\.tar\.gz|\.gifb)\Z")


def wants_bundle(output: str, bundle: bool = False) -> bool:
    """Whether an export to `output` should include content."""
    return bundle or bool(_BUNDLE_SUFFIX.search(output))


def content_name(image_id: str) -> str:
    return f"{image_id}.gif"


def metadata_json(entries: Iterable[ImageEntry]) -> bytes:
    """Serialize entries as the UTF-8 JSON metadata array."""
    records = [entry.to_metadata().to_dict() for entry in entries]
    return json.dumps(records, indent=2).encode("utf-8")


def write_metadata(stream: BinaryIO, entries: Iterable[ImageEntry]) -> None:
    """Write a bare metadata manifest."""
    stream.write(metadata_json(entries))


def _add_member(tar: tarfile.TarFile, name: str, data: bytes, mtime: float) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mtime = int(mtime)
    info.mode = 0o644
    tar.addfile(info, io.BytesIO(data))


def write_bundle(
    stream: BinaryIO,
    entries: list[ImageEntry],
    read_data: Callable[[ImageEntry], bytes],
    metadata_first: bool = True,
) -> None:
    """Write a gzip+tar bundle.

    Args:
        stream: Binary output stream
        entries: Entries to bundle (content may be loaded lazily)
        read_data: Loads the content of an entry that is not hydrated
        metadata_first: Write ``gif.json`` before the content members
            (True) or after them (False)
    """
    now = time.time()
    metadata = metadata_json(entries)

    with tarfile.open(fileobj=stream, mode="w|gz") as tar:
        if metadata_first:
            _add_member(tar, METADATA_NAME, metadata, now)

        for entry in entries:
            data = entry.data if entry.is_hydrated() else read_data(entry)
            mtime = entry.added_at.timestamp() if entry.added_at else now
            _add_member(tar, content_name(entry.id), data, mtime)

        if not metadata_first:
            _add_member(tar, METADATA_NAME, metadata, now)
