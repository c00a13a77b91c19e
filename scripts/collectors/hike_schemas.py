"""Pandera schemas for validating processed hike records.

Raw sheet data is validated with Pydantic (see sheet_schemas.py) as it is
parsed. Once rows have been normalized and flattened into a DataFrame for the
CSV artifact, this tabular schema checks the result before it is written.
"""

import pandera.pandas as pa
from pandera.pandas import Check, Column, DataFrameSchema

HIKE_COLUMNS: list[str] = [
    "date",
    "raw_date",
    "title",
    "park",
    "trail",
    "duration",
    "distance",
    "pace",
    "elevation",
    "lat",
    "lng",
    "location_key",
]


def _text_column(description: str) -> Column:
    return Column(pa.String, nullable=False, description=description)


HikeRecordsSchema = DataFrameSchema(
    columns={
        "date": _text_column("Hike date as displayed in the sheet"),
        "raw_date": Column(
            nullable=True,
            description="Raw sortable date value (numeric serial or text)",
        ),
        "title": Column(
            pa.String,
            checks=[
                Check(
                    lambda s: s.str.len() > 0,
                    error="Title cannot be empty",
                )
            ],
            nullable=False,
            description="Marker title (park name or 'Location')",
        ),
        "park": _text_column("Park name with optional region"),
        "trail": _text_column("Trail name"),
        "duration": Column(
            pa.String,
            checks=[
                Check.str_matches(
                    r"^(\S+h)?( ?\S+m)?$",
                    error="Duration must look like '1h 30m', '2h' or '45m'",
                )
            ],
            nullable=False,
            description="Formatted duration",
        ),
        "distance": _text_column("Formatted distance"),
        "pace": _text_column("Formatted pace"),
        "elevation": _text_column("Formatted elevation gain"),
        "lat": Column(
            pa.Float64,
            nullable=False,
            description="Trailhead latitude (WGS84)",
        ),
        "lng": Column(
            pa.Float64,
            nullable=False,
            description="Trailhead longitude (WGS84)",
        ),
        "location_key": _text_column("Exact coordinate grouping key"),
    },
    strict=True,
    coerce=True,
    description="Schema for normalized hike records before writing the CSV artifact",
)
