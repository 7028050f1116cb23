"""
Tests for USGS response parsing and validation.
"""

import json
from datetime import datetime, timezone

import pytest

from lakelevel.exceptions import ParseError
from lakelevel.parser import (
    USGS_LOCAL_TIMEZONE,
    parse_date_time,
    parse_response,
    parse_value,
)

from conftest import make_empty_usgs_json, make_usgs_json


class TestParseValue:
    """Sentinel, numeric and range filtering of raw value strings."""

    @pytest.mark.parametrize("raw", ["-999999", "-999999.00"])
    def test_sentinels_rejected(self, raw):
        assert parse_value(raw) == (None, "sentinel")

    @pytest.mark.parametrize("raw", ["", "N/A", "Ice", "Eqp", "nan", "inf"])
    def test_non_numeric_and_empty_rejected(self, raw):
        value, reason = parse_value(raw)
        assert value is None
        assert reason in ("empty", "non_numeric")

    @pytest.mark.parametrize("raw", ["-100", "-100.0", "15000", "15000.00", "0", "438.50"])
    def test_boundaries_and_normal_values_accepted(self, raw):
        value, reason = parse_value(raw)
        assert reason is None
        assert value == float(raw)

    @pytest.mark.parametrize("raw", ["-100.01", "15000.01", "-999998", "99999"])
    def test_out_of_range_rejected(self, raw):
        assert parse_value(raw) == (None, "out_of_range")

    def test_custom_range(self):
        assert parse_value("50", valid_range=(0.0, 10.0)) == (None, "out_of_range")
        assert parse_value("5", valid_range=(0.0, 10.0)) == (5.0, None)


class TestParseDateTime:
    """Timestamp formats, tried in order."""

    def test_iso_with_fractional_seconds_and_offset(self):
        result = parse_date_time("2024-01-15T10:30:00.000-05:00")
        assert result is not None
        assert result.astimezone(timezone.utc) == datetime(
            2024, 1, 15, 15, 30, tzinfo=timezone.utc
        )

    def test_iso_without_fractional_seconds(self):
        result = parse_date_time("2024-01-15T10:30:00-05:00")
        assert result.astimezone(timezone.utc) == datetime(
            2024, 1, 15, 15, 30, tzinfo=timezone.utc
        )

    def test_iso_with_zulu(self):
        result = parse_date_time("2024-01-15T10:30:00Z")
        assert result == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_local_datetime_without_offset(self):
        result = parse_date_time("2024-01-15T00:00:00.000")
        assert result.tzinfo is USGS_LOCAL_TIMEZONE
        assert (result.year, result.month, result.day, result.hour) == (2024, 1, 15, 0)

    def test_bare_date(self):
        result = parse_date_time("2024-01-15")
        assert result.tzinfo is USGS_LOCAL_TIMEZONE
        assert (result.year, result.month, result.day) == (2024, 1, 15)

    @pytest.mark.parametrize("raw", ["", "not-a-date", "01/15/2024", "2024-13-45"])
    def test_invalid(self, raw):
        assert parse_date_time(raw) is None


class TestParseResponse:
    """Whole-payload parsing."""

    def test_valid_response(self):
        body = make_usgs_json(
            [
                ("438.50", "2024-01-15T10:30:00.000-05:00"),
                ("438.45", "2024-01-15T10:15:00.000-05:00"),
            ],
            site_name="Lake Greenwood",
        )

        parsed = parse_response(body)

        assert parsed is not None
        assert len(parsed.readings) == 2
        assert parsed.level.value == 438.50
        assert parsed.level.unit == "ft"
        assert parsed.level.site_name == "Lake Greenwood"

    def test_sentinels_never_appear_regardless_of_position(self):
        body = make_usgs_json(
            [
                ("-999999", "2024-01-15T10:00:00.000-05:00"),
                ("438.40", "2024-01-15T10:15:00.000-05:00"),
                ("-999999.00", "2024-01-15T10:30:00.000-05:00"),
                ("438.50", "2024-01-15T10:45:00.000-05:00"),
                ("-999999", "2024-01-15T11:00:00.000-05:00"),
            ]
        )

        parsed = parse_response(body)

        assert [r.value for r in parsed.readings] == [438.40, 438.50]
        assert parsed.rejected == {"sentinel": 3}
        assert parsed.level.value == 438.50

    def test_mixed_invalid_values_dropped(self):
        body = make_usgs_json(
            [
                ("", "2024-01-15T10:00:00.000-05:00"),
                ("N/A", "2024-01-15T10:05:00.000-05:00"),
                ("Ice", "2024-01-15T10:10:00.000-05:00"),
                ("20000", "2024-01-15T10:15:00.000-05:00"),
                ("100", "garbage"),
                ("200", "2024-01-15T10:20:00.000-05:00"),
            ]
        )

        parsed = parse_response(body)

        assert [r.value for r in parsed.readings] == [200.0]
        assert parsed.rejected == {
            "empty": 1,
            "non_numeric": 2,
            "out_of_range": 1,
            "bad_timestamp": 1,
        }

    def test_out_of_order_readings_sorted_and_latest_is_current(self):
        body = make_usgs_json(
            [
                ("300", "2024-01-15T12:00:00.000-05:00"),
                ("100", "2024-01-15T10:00:00.000-05:00"),
                ("400", "2024-01-15T13:00:00.000-05:00"),
                ("200", "2024-01-15T11:00:00.000-05:00"),
            ]
        )

        parsed = parse_response(body)

        times = [r.date_time for r in parsed.readings]
        assert times == sorted(times)
        assert [r.value for r in parsed.readings] == [100.0, 200.0, 300.0, 400.0]
        assert parsed.level.value == 400.0
        assert parsed.level.date_time == max(times)

    def test_mixed_timestamp_formats_sorted_by_instant(self):
        body = make_usgs_json(
            [
                ("2", "2024-01-16"),
                ("1", "2024-01-15T23:00:00.000-05:00"),
                ("3", "2024-01-16T12:00:00.000"),
            ]
        )

        parsed = parse_response(body)

        assert [r.value for r in parsed.readings] == [1.0, 2.0, 3.0]

    def test_empty_time_series_is_no_data(self):
        assert parse_response(make_empty_usgs_json()) is None

    def test_missing_time_series_is_no_data(self):
        assert parse_response(b'{"value": {}}') is None

    def test_empty_value_list_is_no_data(self):
        assert parse_response(make_usgs_json([])) is None

    def test_empty_values_groups_is_no_data(self):
        payload = json.loads(make_usgs_json([("1", "2024-01-15")]))
        payload["value"]["timeSeries"][0]["values"] = []
        assert parse_response(payload) is None

    def test_all_readings_filtered_is_no_data(self):
        body = make_usgs_json(
            [("-999999", "2024-01-15T10:00:00.000-05:00"), ("Ice", "2024-01-15")]
        )
        assert parse_response(body) is None

    def test_invalid_json_raises(self):
        with pytest.raises(ParseError):
            parse_response(b"not json {")

    def test_deeply_nested_json_raises_parse_error(self):
        with pytest.raises(ParseError):
            parse_response(b"[" * 200000)

        with pytest.raises(ParseError):
            parse_response(b'{"value": ' + b"[" * 200000)

    def test_missing_top_level_value_raises(self):
        with pytest.raises(ParseError):
            parse_response(b'{"other": 1}')

    def test_missing_site_name_raises(self):
        payload = json.loads(make_usgs_json([("1", "2024-01-15")]))
        del payload["value"]["timeSeries"][0]["sourceInfo"]["siteName"]
        with pytest.raises(ParseError):
            parse_response(payload)

    def test_missing_unit_raises(self):
        payload = json.loads(make_usgs_json([("1", "2024-01-15")]))
        del payload["value"]["timeSeries"][0]["variable"]["unit"]
        with pytest.raises(ParseError):
            parse_response(payload)

    def test_reading_missing_date_time_raises(self):
        payload = json.loads(make_usgs_json([("1", "2024-01-15")]))
        del payload["value"]["timeSeries"][0]["values"][0]["value"][0]["dateTime"]
        with pytest.raises(ParseError):
            parse_response(payload)

    def test_only_first_series_used(self):
        payload = json.loads(
            make_usgs_json([("1", "2024-01-15")], site_name="First")
        )
        second = json.loads(
            make_usgs_json([("2", "2024-01-16")], site_name="Second")
        )["value"]["timeSeries"][0]
        payload["value"]["timeSeries"].append(second)

        parsed = parse_response(payload)

        assert parsed.level.site_name == "First"
        assert [r.value for r in parsed.readings] == [1.0]
