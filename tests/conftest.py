"""
Shared test fixtures and configuration for the Hike Map test suite.

This file contains pytest fixtures that can be used across all test modules.
Fixtures defined here are automatically available to all test files.
"""

import os
import sys
from unittest.mock import Mock

import pytest

# Add project root to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from scripts.collectors.sheet_schemas import RawTable


def make_row(*cells):
    """Build a gviz row; plain values become {'v': value}, dicts pass through."""
    return {
        "c": [
            cell if cell is None or isinstance(cell, dict) else {"v": cell}
            for cell in cells
        ]
    }


@pytest.fixture
def labelled_table_payload():
    """
    Provide a sheet table whose columns carry explicit labels.

    Columns are deliberately not in the positional-fallback order.
    """
    return {
        "cols": [
            {"id": "A", "label": "Park", "type": "string"},
            {"id": "B", "label": "Date", "type": "date"},
            {"id": "C", "label": "Lat,Lng", "type": "string"},
            {"id": "D", "label": "Hours", "type": "number"},
            {"id": "E", "label": "Minutes", "type": "number"},
            {"id": "F", "label": "Distance (mi)", "type": "number"},
            {"id": "G", "label": "Trail", "type": "string"},
            {"id": "H", "label": "Region", "type": "string"},
            {"id": "I", "label": "Elevation Gain", "type": "number"},
            {"id": "J", "label": "Pace", "type": "number"},
        ],
        "rows": [
            make_row(
                "Sunol",
                {"v": 20240101, "f": "1/1/2024"},
                "37.5155, -121.8301",
                2,
                15,
                5.2,
                "Flag Hill",
                "East Bay",
                1250.5,
                2.31,
            ),
            make_row(
                "Mission Peak",
                {"v": 20240301, "f": "3/1/2024"},
                "37.5123, -121.9018",
                1,
                0,
                "6 mi",
                "Stanford Ave",
                None,
                2100,
                "steady",
            ),
            make_row(
                "Sunol",
                {"v": 20240201, "f": "2/1/2024"},
                "37.5155, -121.8301",
                0,
                45,
                3,
                "",
                "East Bay",
                None,
                None,
            ),
            make_row("Nowhere", {"v": 20240401}, "no coordinates", 1, 1, 1),
        ],
    }


@pytest.fixture
def header_row_table_payload():
    """
    Provide a sheet table without labels whose header sits in the second row.
    """
    return {
        "cols": [
            {"id": "A", "label": ""},
            {"id": "B"},
            {"id": "C"},
            {"id": "D"},
            {"id": "E"},
            {"id": "F"},
        ],
        "rows": [
            make_row("My hikes", None, None, None, None, None),
            make_row("Park", "Hike Date", "Hours", "Minutes", "Distance", "Lat/Lng"),
            make_row(
                "Rancho", {"v": 45000, "f": "3/15/2023"}, 1, 30, 4.3, "37.5,-122.1"
            ),
            None,
            {"c": None},
            make_row("Windy Hill", {"v": 45100}, 0, 0, "5.5 mi", "37.6,-122.2"),
        ],
    }


@pytest.fixture
def labelled_table(labelled_table_payload):
    return RawTable.from_payload(labelled_table_payload)


@pytest.fixture
def header_row_table(header_row_table_payload):
    return RawTable.from_payload(header_row_table_payload)


@pytest.fixture
def sample_gpx():
    """Provide a namespaced GPX 1.1 document with three track points."""
    return b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Flag Hill</name>
    <trkseg>
      <trkpt lat="37.5155" lon="-121.8301"><ele>120.0</ele></trkpt>
      <trkpt lat="37.5160" lon="-121.8290"><ele>135.5</ele></trkpt>
      <trkpt lat="37.5172" lon="-121.8275"><ele>150.2</ele></trkpt>
    </trkseg>
  </trk>
</gpx>"""


@pytest.fixture
def empty_gpx():
    """Provide a valid GPX document without any track points."""
    return b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <wpt lat="37.5" lon="-122.0"><name>Trailhead</name></wpt>
</gpx>"""


@pytest.fixture
def mock_session():
    """
    Provide a mock requests session.

    Tests set session.get.return_value / side_effect to control responses.
    """
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def make_response():
    """Provide a factory for mock requests.Response objects."""

    def _make(status_code=200, content=b"", text=""):
        response = Mock()
        response.status_code = status_code
        response.content = content
        response.text = text
        return response

    return _make
