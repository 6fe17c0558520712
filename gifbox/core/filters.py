"""Composable filters over store listings.

Each filter wraps an inner filter and narrows its output further, so
``RemoteFilter(TypeFilter("png"))`` keeps remote PNG entries only.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from .models import ImageEntry

ORDERS = ("newest", "oldest", "random")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class Filter(Protocol):
    def apply(self, entries: list[ImageEntry]) -> list[ImageEntry]:
        ...


@dataclass
class NullFilter:
    """Passes entries through unchanged."""

    def apply(self, entries: list[ImageEntry]) -> list[ImageEntry]:
        return list(entries)


@dataclass
class RemoteFilter:
    """Keeps entries that have a source URL."""

    inner: Filter = field(default_factory=NullFilter)

    def apply(self, entries: list[ImageEntry]) -> list[ImageEntry]:
        return [e for e in self.inner.apply(entries) if e.url]


@dataclass
class TypeFilter:
    """Keeps entries of one type. An empty type means no restriction."""

    type: str = ""
    inner: Filter = field(default_factory=NullFilter)

    def apply(self, entries: list[ImageEntry]) -> list[ImageEntry]:
        entries = self.inner.apply(entries)
        if not self.type:
            return entries
        return [e for e in entries if e.type == self.type]


@dataclass
class OrderAndLimit:
    """Sorts by addition time (or shuffles) and keeps at most `limit` entries.

    A limit of zero or less means unlimited. Entries without an addition
    time sort as the oldest.
    """

    order: str = "newest"
    limit: int = 0
    inner: Filter = field(default_factory=NullFilter)

    def __post_init__(self):
        if self.order not in ORDERS:
            raise ValueError(f"Unknown order '{self.order}', expected one of {', '.join(ORDERS)}")

    def apply(self, entries: list[ImageEntry]) -> list[ImageEntry]:
        entries = self.inner.apply(entries)

        if self.order == "random":
            random.shuffle(entries)
        else:
            entries.sort(
                key=lambda e: e.added_at or _EPOCH,
                reverse=self.order == "newest",
            )

        if self.limit > 0:
            entries = entries[:self.limit]
        return entries


def build_filter(
    type: str = "",
    order: str | None = None,
    limit: int = 0,
    remote_only: bool = False,
) -> Filter:
    """Assemble the usual filter chain for listing commands."""
    result: Filter = TypeFilter(type)
    if remote_only:
        result = RemoteFilter(result)
    if order or limit > 0:
        result = OrderAndLimit(order or "newest", limit, result)
    return result
