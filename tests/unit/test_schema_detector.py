"""
Unit tests for hike log column detection.
"""

import pytest
from pydantic import ValidationError

from scripts.collectors.sheet_schemas import RawTable
from scripts.processors.schema_detector import (
    COLUMN_RULES,
    NO_HEADER_ROW,
    POSITIONAL_FALLBACKS,
    classify_label,
    detect_columns,
)


def _rows(*values_per_row):
    return [{"c": [{"v": v} for v in values]} for values in values_per_row]


class TestClassifyLabel:
    """Test cases for the keyword rule table."""

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("Date", "date"),
            ("HOURS", "hours"),
            ("minutes hiked", "minutes"),
            ("Distance (mi)", "distance"),
            ("lat,lng", "lat_lng"),
            ("Lat / Lng", "lat_lng"),
            ("Park", "park"),
            ("Trail Name", "trail"),
            ("Region", "region"),
            ("Elevation Gain (ft)", "elevation"),
            ("Avg Pace", "pace"),
            ("Notes", None),
            ("", None),
        ],
    )
    def test_single_keyword(self, label, expected):
        assert classify_label(label) == expected

    def test_first_rule_wins(self):
        """A label naming several fields resolves to the earliest rule."""
        assert classify_label("Date and hours") == "date"
        assert classify_label("Park region") == "park"
        assert classify_label("Trail distance") == "distance"

    def test_rule_table_order(self):
        assert [rule.field for rule in COLUMN_RULES] == [
            "date",
            "hours",
            "minutes",
            "distance",
            "lat_lng",
            "park",
            "trail",
            "region",
            "elevation",
            "pace",
        ]

    def test_lat_without_lng_does_not_match(self):
        assert classify_label("Latitude") is None


class TestDetectColumns:
    """Test cases for detect_columns."""

    def test_detects_from_column_labels(self, labelled_table):
        mapping = detect_columns(labelled_table)

        assert mapping.park == 0
        assert mapping.date == 1
        assert mapping.lat_lng == 2
        assert mapping.hours == 3
        assert mapping.minutes == 4
        assert mapping.distance == 5
        assert mapping.trail == 6
        assert mapping.region == 7
        assert mapping.elevation == 8
        assert mapping.pace == 9
        assert mapping.header_row_index == NO_HEADER_ROW

    def test_detects_header_row_in_data(self, header_row_table):
        mapping = detect_columns(header_row_table)

        assert mapping.header_row_index == 1
        assert mapping.park == 0
        assert mapping.date == 1
        assert mapping.hours == 2
        assert mapping.minutes == 3
        assert mapping.distance == 4
        assert mapping.lat_lng == 5
        assert mapping.trail is None
        assert mapping.region is None

    def test_header_row_beyond_scan_window_is_ignored(self):
        filler = [("x", "y")] * 5
        table = RawTable.from_payload(
            {"rows": _rows(*filler, ("Date", "Lat,Lng"), ("1/1/2024", "1,2"))}
        )

        mapping = detect_columns(table)

        assert mapping.header_row_index == NO_HEADER_ROW
        assert mapping.date == POSITIONAL_FALLBACKS["date"]
        assert mapping.lat_lng == POSITIONAL_FALLBACKS["lat_lng"]

    def test_blank_rows_are_skipped_while_scanning(self):
        table = RawTable.from_payload(
            {"rows": [None, {"c": None}] + _rows(("Lat,Lng", "Date"))}
        )

        mapping = detect_columns(table)

        assert mapping.header_row_index == 2
        assert mapping.lat_lng == 0
        assert mapping.date == 1

    def test_labels_sufficient_skip_row_scan(self):
        """Row values are not consulted when labels resolve date and lat_lng."""
        table = RawTable.from_payload(
            {
                "cols": [{"label": "Date"}, {"label": "lat,lng"}, {"label": ""}],
                "rows": _rows(("x", "y", "Park")),
            }
        )

        mapping = detect_columns(table)

        assert mapping.header_row_index == NO_HEADER_ROW
        assert mapping.park is None

    def test_unlabelled_value_shaped_columns_use_fallbacks(self):
        table = RawTable.from_payload(
            {"rows": _rows(("2/6/2026", 2, 30, 5.2, "37.5,-122.1"))}
        )

        mapping = detect_columns(table)

        assert mapping.mapped_fields() == POSITIONAL_FALLBACKS
        assert mapping.header_row_index == NO_HEADER_ROW

    def test_optional_fields_get_no_fallback(self):
        mapping = detect_columns(RawTable.from_payload({"rows": _rows(("a",))}))

        for field in ("park", "trail", "region", "elevation", "pace"):
            assert getattr(mapping, field) is None

    def test_partial_labels_keep_detected_positions(self):
        table = RawTable.from_payload(
            {
                "cols": [
                    {"label": "Notes"},
                    {"label": "Hours"},
                    {"label": "Region"},
                ],
                "rows": _rows(("a", 1, "Bay")),
            }
        )

        mapping = detect_columns(table)

        assert mapping.hours == 1
        assert mapping.region == 2
        assert mapping.date == 0
        assert mapping.minutes == 2

    def test_mapping_is_immutable(self, labelled_table):
        mapping = detect_columns(labelled_table)

        with pytest.raises(ValidationError):
            mapping.date = 5
