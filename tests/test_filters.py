"""
Unit tests for listing filters
"""
import random
from datetime import datetime, timedelta, timezone

import pytest

from gifbox.core.filters import (
    NullFilter, OrderAndLimit, RemoteFilter, TypeFilter, build_filter,
)
from gifbox.core.models import ImageEntry

BASE = datetime(2020, 1, 1, tzinfo=timezone.utc)


def entry(n, url="", type="gif", days=None):
    added_at = BASE + timedelta(days=days) if days is not None else None
    return ImageEntry(id=f"{n:040x}", url=url, type=type, added_at=added_at)


@pytest.fixture
def mixed():
    return [
        entry(1, url="http://a/1.png", type="png", days=1),
        entry(2, url="", type="png", days=2),
        entry(3, url="http://a/3.gif", type="gif", days=3),
        entry(4, url="", type="gif", days=4),
        entry(5, url="http://a/5.png", type="png", days=5),
        entry(6, url="http://a/6", type="", days=6),
    ]


def ids(entries):
    return {e.id for e in entries}


def test_null_filter_passes_everything(mixed):
    assert NullFilter().apply(mixed) == mixed


def test_null_filter_returns_new_list(mixed):
    assert NullFilter().apply(mixed) is not mixed


def test_remote_filter(mixed):
    assert ids(RemoteFilter().apply(mixed)) == ids([mixed[0], mixed[2], mixed[4], mixed[5]])


def test_type_filter(mixed):
    assert ids(TypeFilter("gif").apply(mixed)) == ids([mixed[2], mixed[3]])


def test_type_filter_empty_means_no_restriction(mixed):
    assert TypeFilter("").apply(mixed) == mixed


def test_remote_and_type_composition_ignores_input_order(mixed):
    expected = ids([mixed[0], mixed[4]])
    for seed in range(5):
        shuffled = list(mixed)
        random.Random(seed).shuffle(shuffled)
        assert ids(RemoteFilter(TypeFilter("png")).apply(shuffled)) == expected


class TestOrderAndLimit:

    def test_newest_first(self, mixed):
        result = OrderAndLimit("newest").apply(list(reversed(mixed)))
        assert [e.id for e in result] == [e.id for e in reversed(mixed)]

    def test_oldest_first(self, mixed):
        result = OrderAndLimit("oldest").apply(list(reversed(mixed)))
        assert [e.id for e in result] == [e.id for e in mixed]

    def test_limit(self, mixed):
        result = OrderAndLimit("newest", limit=2).apply(mixed)
        assert [e.id for e in result] == [mixed[5].id, mixed[4].id]

    def test_zero_limit_is_unlimited(self, mixed):
        assert len(OrderAndLimit("oldest", limit=0).apply(mixed)) == len(mixed)

    def test_random_keeps_all_entries(self, mixed):
        assert ids(OrderAndLimit("random").apply(mixed)) == ids(mixed)

    def test_missing_added_at_sorts_oldest(self, mixed):
        undated = entry(99)
        result = OrderAndLimit("oldest").apply(mixed + [undated])
        assert result[0] is undated

    def test_unknown_order(self):
        with pytest.raises(ValueError):
            OrderAndLimit("alphabetical")

    def test_wraps_inner_filter(self, mixed):
        result = OrderAndLimit("newest", limit=1, inner=TypeFilter("png")).apply(mixed)
        assert [e.id for e in result] == [mixed[4].id]


class TestBuildFilter:

    def test_remote_typed_and_limited(self, mixed):
        result = build_filter(type="png", order="oldest", limit=1, remote_only=True).apply(mixed)
        assert [e.id for e in result] == [mixed[0].id]

    def test_defaults_pass_everything(self, mixed):
        assert ids(build_filter().apply(mixed)) == ids(mixed)
