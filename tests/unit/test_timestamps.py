"""Tests for ISO-8601 timestamp helpers."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from cdmgate.timestamps import format_iso, iso_now, parse_iso


class TestParseIso:
    """Test exact round-trip parsing."""

    def test_canonical_form(self):
        assert parse_iso("2024-01-01T12:00:00.000Z") == datetime(2024, 1, 1, 12, tzinfo=UTC)

    @pytest.mark.parametrize("value", [
        "2024-01-01T12:00:00Z",
        "2024-01-01T12:00:00.000+00:00",
        "2024-01-01T12:00:00.0000Z",
        "2024-01-01T12:00:00.5Z",
        "2024-13-01T12:00:00.000Z",
        "2024-01-01",
        "invalid-date",
        "",
        None,
        1704110400000,
    ])
    def test_rejected(self, value):
        assert parse_iso(value) is None

    def test_format_converts_to_utc(self):
        value = datetime(2024, 1, 1, 14, 0, 0, 123456, tzinfo=timezone(timedelta(hours=2)))
        assert format_iso(value) == "2024-01-01T12:00:00.123Z"

    def test_iso_now_round_trips(self):
        assert parse_iso(iso_now()) is not None


class TestLenientParse:
    """Test reading non-canonical timestamps."""

    def test_offset_is_converted(self):
        parsed = parse_iso("2024-01-01T14:00:00+02:00", strict=False)
        assert parsed == datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_missing_offset_is_utc(self):
        parsed = parse_iso("2024-01-01T12:00:00", strict=False)
        assert parsed == datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_z_suffix_without_millis(self):
        assert parse_iso("2024-01-01T12:00:00Z", strict=False) == datetime(2024, 1, 1, 12, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["invalid-date", "", None, 12])
    def test_garbage_is_none(self, value):
        assert parse_iso(value, strict=False) is None
