"""Import of bundles, URL manifests, loose files and locations into a store.

Bundle members may arrive in any order. Content read before ``gif.json``
is staged in a temporary directory and merged once the metadata shows up;
content read after it is merged immediately.
"""

import enum
import gzip
import io
import logging
import re
import sys
import tarfile
import tempfile
import zlib
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Optional

import requests
import urllib3
from tqdm import tqdm

from ..core.addressing import FetchError, from_bytes, from_file, from_url, http_timeout
from ..core.models import ExportedMetadata, ImageEntry, parse_metadata
from ..core.outcome import OutcomeSink, short_id
from .exporter import METADATA_NAME, content_name

if TYPE_CHECKING:
    from ..storage.store import Store
logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

# Loose files considered by directory import
IMAGE_EXTENSIONS = frozenset({"gif", "jpeg", "jpg", "png", "webp"})

_CONTENT_MEMBER = re.compile(r"\A([0-9a-fA-F]{40})\.gif\Z")


class ImportFormatError(Exception):
    """Raised when the input is neither a bundle nor a metadata manifest."""
    pass


class BundleError(ImportFormatError):
    """Raised when a bundle archive is malformed."""
    pass


def reconcile(
    store: "Store",
    sink: OutcomeSink,
    entry: ImageEntry,
    claimed_id: str,
    metadata: Optional[ExportedMetadata],
) -> str:
    """Merge a metadata record into freshly addressed content and add it.

    The id computed from the content wins over `claimed_id`; a mismatch is
    reported as a warning and the entry is stored under the computed id.

    Returns:
        The status reported by `Store.add`
    """
    if claimed_id and entry.id != claimed_id:
        sink.warning(claimed_id, f"ID mismatch, claimed {claimed_id}, new ID: {entry.id}")

    if metadata is None:
        sink.warning(claimed_id, "no metadata for this entry")
    else:
        entry.url = metadata.url
        entry.tags = list(metadata.tags)
        if metadata.added_at:
            try:
                entry.set_added_at_from_string(metadata.added_at)
            except ValueError:
                sink.warning(claimed_id, f"could not set addition date: {metadata.added_at}")

    return store.add(entry, sink)


class _Phase(enum.Enum):
    AWAITING_METADATA = "awaiting metadata"
    METADATA_SEEN = "metadata seen"


class BundleImporter:
    """Reads a gzip+tar bundle and adds its entries to a store.

    Two phases: while AWAITING_METADATA, content members are staged to a
    temporary directory and their claimed ids queued. Reading ``gif.json``
    switches to METADATA_SEEN, drains the queue in archive order, and every
    later content member is merged as soon as it is read.
    """

    def __init__(self, store: "Store", sink: OutcomeSink):
        self.store = store
        self.sink = sink
        self.phase = _Phase.AWAITING_METADATA
        self.metadata: dict[str, ExportedMetadata] = {}
        self.queue: list[str] = []
        self.staging: Optional[Path] = None

    def run(self, stream: BinaryIO) -> None:
        """Consume the whole bundle.

        Raises:
            BundleError: If the archive is unreadable or has no ``gif.json``
        """
        with tempfile.TemporaryDirectory(prefix="gifbox-import-") as staging:
            self.staging = Path(staging)
            try:
                with gzip.GzipFile(fileobj=stream, mode="rb") as archive, \
                        tarfile.open(fileobj=archive, mode="r|") as tar:
                    for member in tar:
                        self._handle_member(tar, member)
            except (tarfile.TarError, EOFError, zlib.error, gzip.BadGzipFile) as e:
                raise BundleError(f"Could not read archive: {e}")
            finally:
                self.staging = None

        if self.phase is _Phase.AWAITING_METADATA:
            raise BundleError(f"Archive does not contain metadata ({METADATA_NAME})")

    def _handle_member(self, tar: tarfile.TarFile, member: tarfile.TarInfo) -> None:
        if not member.isfile():
            return

        name = member.name.removeprefix("./")
        if name == METADATA_NAME:
            self._read_metadata(tar.extractfile(member))
            return

        match = _CONTENT_MEMBER.match(name)
        if not match:
            logger.debug("Skipping unknown archive member %s", name)
            return
        claimed_id = match.group(1).lower()

        try:
            data = tar.extractfile(member).read()
        except tarfile.TarError as e:
            self.sink.error(short_id(claimed_id), str(e))
            return

        if self.phase is _Phase.METADATA_SEEN:
            self._merge(from_bytes(data), claimed_id)
        else:
            self._stage(data, claimed_id)

    def _stage(self, data: bytes, claimed_id: str) -> None:
        path = self.staging / content_name(claimed_id)
        try:
            path.write_bytes(data)
        except OSError as e:
            self.sink.error(short_id(claimed_id), str(e))
            return
        logger.debug("Staged %s until metadata is read", claimed_id)
        self.queue.append(claimed_id)

    def _read_metadata(self, fileobj: BinaryIO) -> None:
        try:
            records = parse_metadata(fileobj)
        except ValueError as e:
            raise BundleError(f"Invalid {METADATA_NAME}: {e}")

        for record in records:
            self.metadata[record.id] = record
        self.phase = _Phase.METADATA_SEEN

        if self.queue:
            logger.debug("Merging %d staged entries", len(self.queue))
        for claimed_id in self.queue:
            path = self.staging / content_name(claimed_id)
            try:
                entry = from_file(path)
            except OSError as e:
                self.sink.error(short_id(claimed_id), str(e))
                continue
            self._merge(entry, claimed_id)
        self.queue = []

    def _merge(self, entry: ImageEntry, claimed_id: str) -> None:
        if not entry.is_hydrated():
            self.sink.error(short_id(claimed_id), "empty payload")
            return
        reconcile(self.store, self.sink, entry, claimed_id, self.metadata.get(claimed_id))


def import_bundle(store: "Store", stream: BinaryIO, sink: OutcomeSink) -> None:
    """Import a gzip+tar bundle. See `BundleImporter`."""
    BundleImporter(store, sink).run(stream)


def import_urls(store: "Store", records: list[ExportedMetadata], sink: OutcomeSink) -> None:
    """Fetch each record's URL in order and add the content."""
    for record in records:
        if not record.url:
            sink.error(short_id(record.id), "no URL to fetch")
            continue
        try:
            entry = from_url(record.url)
        except FetchError as e:
            sink.error(short_id(record.id), str(e))
            continue
        reconcile(store, sink, entry, record.id, record)


def import_from_reader(store: "Store", stream: BinaryIO, sink: OutcomeSink) -> None:
    """Detect the input format and import it.

    Gzip input is read as a bundle; anything else must be a JSON metadata
    manifest whose URLs are then fetched.

    Raises:
        ImportFormatError: If the input is empty or in neither format
        BundleError: If a bundle is malformed
    """
    if not hasattr(stream, "peek"):
        stream = io.BufferedReader(stream)

    head = stream.peek(len(GZIP_MAGIC))[:len(GZIP_MAGIC)]
    if not head:
        raise ImportFormatError("Empty import input")

    if head == GZIP_MAGIC:
        import_bundle(store, stream, sink)
        return

    try:
        records = parse_metadata(stream.read())
    except ValueError:
        raise ImportFormatError("Unrecognized import format")
    import_urls(store, records, sink)


def import_directory(
    store: "Store",
    path: str | Path,
    sink: OutcomeSink,
    recursive: bool = False,
    progress: bool = False,
) -> None:
    """Add loose image files from a directory, tagging each with its file name."""
    path = Path(path)
    candidates = path.rglob("*") if recursive else path.glob("*")
    files = sorted(
        f for f in candidates
        if f.is_file() and f.suffix[1:].lower() in IMAGE_EXTENSIONS
    )

    for filepath in tqdm(files, desc=str(path), disable=not progress, leave=False):
        try:
            entry = from_file(filepath)
        except OSError as e:
            sink.error(str(filepath), str(e))
            continue
        entry.tags = [filepath.name]
        store.add(entry, sink)


def import_location(
    store: "Store",
    location: str,
    sink: OutcomeSink,
    recursive: bool = False,
    progress: bool = False,
) -> None:
    """Import from a URL, a file, a directory, or ``-`` for stdin.

    Raises:
        FetchError: If a URL location cannot be fetched
        FileNotFoundError: If a local location does not exist
        ImportFormatError: If a file or URL body is in no known format
    """
    if location.startswith(("http://", "https://")):
        try:
            response = requests.get(location, stream=True, timeout=http_timeout())
        except requests.RequestException as e:
            raise FetchError(f"Request failed: {e}")
        with response:
            if response.status_code >= 300:
                raise FetchError(f"HTTP {response.status_code} {response.reason}")
            response.raw.decode_content = True
            try:
                import_from_reader(store, response.raw, sink)
            except urllib3.exceptions.HTTPError as e:
                raise FetchError(f"Connection failed while reading {location}: {e}")
        return

    if location == "-":
        import_from_reader(store, sys.stdin.buffer, sink)
        return

    path = Path(location)
    if path.is_dir():
        import_directory(store, path, sink, recursive=recursive, progress=progress)
    elif path.is_file():
        with open(path, "rb") as f:
            import_from_reader(store, f, sink)
    else:
        raise FileNotFoundError(f"No such file or directory: {location}")
