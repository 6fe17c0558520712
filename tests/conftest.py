"""
Pytest configuration and fixtures for gifbox tests.
"""
import io
import json
import tarfile

import pytest
from PIL import Image

from gifbox.core.outcome import OutcomeSink
from gifbox.storage.store import Store


def image_bytes(color, format="GIF", size=(4, 4)) -> bytes:
    """Encode a small solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=format)
    return buffer.getvalue()


def bundle_bytes(members) -> bytes:
    """Build a gzip+tar archive from (name, payload) pairs, in order."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, payload in members:
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            tar.addfile(info, io.BytesIO(payload))
    return buffer.getvalue()


def manifest_bytes(records) -> bytes:
    return json.dumps(records).encode("utf-8")


@pytest.fixture
def store(tmp_path):
    """An empty store in a temporary directory."""
    return Store(tmp_path / "store")


@pytest.fixture
def sink():
    """A sink that only collects outcomes."""
    return OutcomeSink(write=lambda line: None)


@pytest.fixture
def gifs():
    """Five distinct GIF payloads."""
    colors = ["red", "green", "blue", "yellow", "purple"]
    return [image_bytes(c) for c in colors]


@pytest.fixture
def png():
    return image_bytes("orange", format="PNG")


def oversized_gif(data: bytes) -> bytes:
    """Rewrite a GIF's logical screen size to 65535x65535."""
    return data[:6] + b"\xff\xff\xff\xff" + data[10:]


class BrokenStream(io.RawIOBase):
    """Serves the first `limit` bytes of `data`, then fails like a dropped connection."""

    def __init__(self, data: bytes, error: Exception, limit: int = 64):
        self.data = data[:limit]
        self.error = error

    def readable(self):
        return True

    def readinto(self, buffer):
        if not self.data:
            raise self.error
        n = min(len(buffer), len(self.data))
        buffer[:n] = self.data[:n]
        self.data = self.data[n:]
        return n
