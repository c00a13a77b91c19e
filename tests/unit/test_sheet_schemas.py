"""
Unit tests for the sheet table schemas.
"""

from scripts.collectors.sheet_schemas import RawCell, RawTable
from scripts.processors.hike_pipeline import process_table


def _hike_row(park, lat_lng, hours=1, date=None):
    return {
        "c": [
            {"v": park},
            date or {"v": 20240101, "f": "1/1/2024"},
            {"v": lat_lng},
            {"v": hours},
        ]
    }


COLS = [
    {"id": "A", "label": "Park"},
    {"id": "B", "label": "Date"},
    {"id": "C", "label": "Lat,Lng"},
    {"id": "D", "label": "Hours"},
]


class TestRawCell:
    """Test cases for RawCell."""

    def test_numeric_formatted_value_becomes_text(self):
        cell = RawCell.model_validate({"v": 2, "f": 2})

        assert cell.f == "2"
        assert cell.display() == "2"

    def test_float_formatted_value_drops_trailing_zero(self):
        assert RawCell.model_validate({"v": 2.0, "f": 2.0}).f == "2"


class TestRawTableFromPayload:
    """Test cases for RawTable.from_payload."""

    def test_numeric_formatted_cell_keeps_table(self):
        payload = {
            "cols": COLS,
            "rows": [
                _hike_row("Sunol", "37.5,-121.8"),
                _hike_row("Rancho", "37.3,-122.1", date={"v": 2, "f": 2}),
            ],
        }

        dataset = process_table(RawTable.from_payload(payload))

        assert [r.park for r in dataset.records] == ["Sunol", "Rancho"]
        assert dataset.records[1].date == "2"

    def test_invalid_row_is_skipped_alone(self):
        payload = {
            "cols": COLS,
            "rows": [
                _hike_row("Sunol", "37.5,-121.8"),
                {"c": "not a list"},
                ["also", "not", "a", "row"],
                _hike_row("Rancho", "37.3,-122.1"),
            ],
        }

        table = RawTable.from_payload(payload)

        assert table.row_count == 4
        assert table.rows[1] is None
        assert table.rows[2] is None
        dataset = process_table(table)
        assert [r.park for r in dataset.records] == ["Sunol", "Rancho"]

    def test_invalid_column_keeps_other_labels(self):
        payload = {
            "cols": [COLS[0], "bogus", COLS[2], COLS[3]],
            "rows": [_hike_row("Sunol", "37.5,-121.8")],
        }

        table = RawTable.from_payload(payload)

        assert table.labels == ["Park", None, "Lat,Lng", "Hours"]
        assert table.row_count == 1

    def test_rows_not_a_list(self):
        table = RawTable.from_payload({"cols": COLS, "rows": {"c": []}})

        assert table.rows is None
        assert table.labels[0] == "Park"

    def test_payload_not_a_mapping(self):
        assert RawTable.from_payload(["rows"]).rows is None
