"""
Unit tests for entry models and metadata parsing
"""
import io
from datetime import datetime, timedelta, timezone

import pytest

from gifbox.core.models import (
    ExportedMetadata, ImageEntry, format_timestamp, parse_metadata, parse_timestamp,
)

ID = "a" * 40


class TestTimestamps:

    def test_parse_utc_designator(self):
        parsed = parse_timestamp("2021-03-04T05:06:07Z")
        assert parsed == datetime(2021, 3, 4, 5, 6, 7, tzinfo=timezone.utc)

    def test_parse_offset(self):
        parsed = parse_timestamp("2021-03-04T05:06:07+02:00")
        assert parsed.utcoffset() == timedelta(hours=2)

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_timestamp("last tuesday")

    @pytest.mark.parametrize("value", [
        "2020-01-01",
        "20200101T100000",
        "2020-01-01T10:00:00",
        "2020-01-01 10:00:00Z",
        "2020-01-01T10:00Z",
    ])
    def test_parse_rejects_non_rfc3339(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)

    def test_parse_lowercase_designators(self):
        assert parse_timestamp("2021-03-04t05:06:07.250z") == datetime(2021, 3, 4, 5, 6, 7, 250000, tzinfo=timezone.utc)

    def test_format_round_trip(self):
        value = datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert parse_timestamp(format_timestamp(value)) == value

    def test_format_naive_is_utc(self):
        assert format_timestamp(datetime(2020, 1, 1)) == "2020-01-01T00:00:00+00:00"


class TestImageEntry:

    def test_dehydrated(self):
        assert not ImageEntry(id=ID).is_hydrated()

    def test_set_added_at_invalid_leaves_value(self):
        entry = ImageEntry(id=ID)
        with pytest.raises(ValueError):
            entry.set_added_at_from_string("not a date")
        assert entry.added_at is None

    def test_to_metadata(self):
        entry = ImageEntry(
            id=ID, url="http://example.com/x.gif", tags=["b", "a", "b"],
            added_at=datetime(2020, 5, 6, tzinfo=timezone.utc), data=b"x",
        )

        assert entry.to_metadata().to_dict() == {
            "id": ID,
            "url": "http://example.com/x.gif",
            "tags": ["b", "a", "b"],
            "addedAt": "2020-05-06T00:00:00+00:00",
        }


class TestExportedMetadata:

    def test_added_at_omitted_when_unset(self):
        assert "addedAt" not in ExportedMetadata(id=ID).to_dict()

    def test_from_dict_defaults(self):
        record = ExportedMetadata.from_dict({"id": ID.upper()})

        assert record.id == ID
        assert record.url == ""
        assert record.tags == []
        assert record.added_at is None

    def test_from_dict_rejects_bad_tags(self):
        with pytest.raises(ValueError):
            ExportedMetadata.from_dict({"id": ID, "tags": "funny"})

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(ValueError):
            ExportedMetadata.from_dict(["not", "an", "object"])


class TestParseMetadata:

    def test_parses_array(self):
        records = parse_metadata(f'[{{"id": "{ID}", "url": "http://x", "tags": ["t"]}}]')

        assert len(records) == 1
        assert records[0].url == "http://x"
        assert records[0].tags == ["t"]

    def test_accepts_stream(self):
        assert parse_metadata(io.BytesIO(b"[]")) == []

    def test_rejects_object(self):
        with pytest.raises(ValueError):
            parse_metadata('{"id": "x"}')

    def test_rejects_invalid_json(self):
        with pytest.raises(ValueError):
            parse_metadata(b"\x00\x01 nope")
