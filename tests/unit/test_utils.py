"""Tests for identifier, time and sorting helpers."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from neo_tenancy.config.constants import SortOrder
from neo_tenancy.features.directory.utils.sorting import sort_by_field
from neo_tenancy.utils.timezone import ensure_utc, hours_from_now, utc_now
from neo_tenancy.utils.uuid import generate_uuid_v7, is_valid_uuid


@dataclass
class _Row:
    name: Optional[str]


class TestUuid:
    def test_generates_version_7(self):
        """Test generated ids are RFC 4122 version 7 UUIDs."""
        value = uuid.UUID(generate_uuid_v7())
        assert value.version == 7
        assert value.variant == uuid.RFC_4122

    def test_is_valid_uuid(self):
        assert is_valid_uuid(generate_uuid_v7())
        assert not is_valid_uuid("not-a-uuid")


class TestTimezone:
    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None

    def test_ensure_utc(self):
        """Test naive datetimes are treated as UTC and aware ones converted."""
        naive = datetime(2024, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        plus_two = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert ensure_utc(plus_two) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_hours_from_now(self):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert hours_from_now(48, base) == datetime(2024, 1, 3, tzinfo=timezone.utc)


class TestSorting:
    def test_ascending_and_descending(self):
        rows = [_Row("b"), _Row("a"), _Row("c")]
        assert [r.name for r in sort_by_field(rows, "name")] == ["a", "b", "c"]
        assert [r.name for r in sort_by_field(rows, "name", SortOrder.DESC)] == ["c", "b", "a"]

    def test_none_values_go_last(self):
        """Test missing values sort last in both directions."""
        rows = [_Row(None), _Row("b"), _Row("a")]
        assert [r.name for r in sort_by_field(rows, "name", "desc")] == ["b", "a", None]
        assert [r.name for r in sort_by_field(rows, "name", "asc")] == ["a", "b", None]
