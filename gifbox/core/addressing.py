"""Content addressing: stable ids and type sniffing from raw bytes."""

import hashlib
import io
import logging
import os
from pathlib import Path

import requests
from PIL import Image

from .models import ImageEntry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Pillow format names mapped to the short tokens used in listings and filters
_TYPE_TOKENS = {
    "JPEG": "jpg",
    "TIFF": "tif",
}


class FetchError(Exception):
    """Raised when content cannot be fetched from a URL."""
    pass


def digest(data: bytes) -> str:
    """Compute the SHA-1 hex digest used as an entry's id."""
    return hashlib.sha1(data).hexdigest()


def classify(data: bytes) -> str:
    """Sniff a short type token ("gif", "png", ...) from content bytes.

    Returns an empty string when the content is not a recognized image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError):
        # UnidentifiedImageError is an OSError
        return ""

    if not image_format:
        return ""
    return _TYPE_TOKENS.get(image_format, image_format.lower())


def from_bytes(data: bytes) -> ImageEntry:
    """Build an entry for raw bytes, with no url, tags or addition date."""
    return ImageEntry(
        id=digest(data),
        size=len(data),
        type=classify(data),
        data=data,
    )


def http_timeout() -> float:
    """Per-request timeout in seconds, from GIFBOX_HTTP_TIMEOUT."""
    value = os.environ.get("GIFBOX_HTTP_TIMEOUT")
    if not value:
        return DEFAULT_TIMEOUT
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring invalid GIFBOX_HTTP_TIMEOUT=%r", value)
        return DEFAULT_TIMEOUT


def from_url(url: str, timeout: float | None = None) -> ImageEntry:
    """Fetch a URL and wrap the response body as an entry.

    Raises:
        FetchError: If the request fails or the status code is 300 or above
    """
    try:
        response = requests.get(url, timeout=timeout or http_timeout())
    except requests.RequestException as e:
        raise FetchError(f"Request failed: {e}")

    if response.status_code >= 300:
        raise FetchError(f"HTTP {response.status_code} {response.reason}")

    logger.debug("Fetched %d bytes from %s", len(response.content), url)
    entry = from_bytes(response.content)
    entry.url = url
    return entry


def from_file(path: str | Path) -> ImageEntry:
    """Read a file and wrap its bytes as an entry."""
    with open(path, "rb") as f:
        data = f.read()
    return from_bytes(data)
