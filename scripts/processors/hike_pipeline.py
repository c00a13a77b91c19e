"""
Hike Log Processing Pipeline

Runs the processing stages over a parsed hike log table:

1. Schema detection - infer which column holds which field
2. Row normalization - build display-ready HikeRecords
3. Location grouping - group hikes by trailhead, newest first

Each stage is a pure function of its inputs, so re-running the pipeline on an
unchanged table produces identical records and groups. Helpers at the bottom
flatten the results into pandas/GeoPandas frames for the output artifacts.
"""

import logging

import geopandas as gpd
import pandas as pd
from pydantic import BaseModel, Field
from shapely.geometry import Point

from config.settings import config
from scripts.collectors.hike_schemas import HIKE_COLUMNS, HikeRecordsSchema
from scripts.collectors.sheet_schemas import RawTable, format_scalar
from scripts.processors.location_grouper import LocationGroup, group_by_location
from scripts.processors.row_normalizer import HikeRecord, normalize_rows
from scripts.processors.schema_detector import ColumnMapping, detect_columns

logger = logging.getLogger("sheet_collector.pipeline")


class HikeDataset(BaseModel):
    """Output of the processing pipeline."""

    mapping: ColumnMapping | None = Field(
        default=None, description="Detected column mapping (None for an empty table)"
    )
    records: list[HikeRecord] = Field(default_factory=list)
    groups: dict[str, LocationGroup] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.records


def process_table(table: RawTable) -> HikeDataset:
    """
    Run schema detection, normalization and grouping over a table.

    Args:
        table: Parsed hike log table

    Returns:
        HikeDataset; empty when the table has no rows
    """
    if not table.rows:
        logger.warning("Hike table has no rows, nothing to process")
        return HikeDataset()

    mapping = detect_columns(table)
    records = normalize_rows(table, mapping)
    groups = group_by_location(records)

    logger.info(f"Processed {len(records)} hikes at {len(groups)} locations")
    return HikeDataset(mapping=mapping, records=records, groups=groups)


def records_to_dataframe(records: list[HikeRecord]) -> pd.DataFrame:
    """
    Flatten hikes into a validated DataFrame for the CSV artifact.

    Display fields that passed through unformatted are rendered as text.

    Args:
        records: Normalized hikes

    Returns:
        pd.DataFrame with HIKE_COLUMNS, validated by HikeRecordsSchema

    Raises:
        pandera.errors.SchemaError: If the flattened records fail validation
    """
    rows = [
        {
            "date": record.date,
            "raw_date": record.raw_date,
            "title": record.title,
            "park": record.park,
            "trail": record.trail,
            "duration": record.duration,
            "distance": format_scalar(record.distance),
            "pace": format_scalar(record.pace),
            "elevation": format_scalar(record.elevation),
            "lat": record.lat,
            "lng": record.lng,
            "location_key": record.location_key,
        }
        for record in records
    ]
    df = pd.DataFrame(rows, columns=HIKE_COLUMNS)
    return HikeRecordsSchema.validate(df)


def groups_to_geodataframe(groups: dict[str, LocationGroup]) -> gpd.GeoDataFrame:
    """
    Build one marker point per location group.

    Args:
        groups: Location groups keyed by coordinate key

    Returns:
        GeoDataFrame in config.DEFAULT_CRS with key, title, date, count
    """
    rows = [
        {
            "location_key": key,
            "title": group.primary.park or group.primary.title,
            "latest_date": group.primary.date,
            "hike_count": len(group.hikes),
            "geometry": Point(group.lng, group.lat),
        }
        for key, group in groups.items()
    ]
    return gpd.GeoDataFrame(
        rows,
        columns=["location_key", "title", "latest_date", "hike_count", "geometry"],
        geometry="geometry",
        crs=config.DEFAULT_CRS,
    )
