"""
Hike Row Normalization

Converts raw hike log rows into display-ready HikeRecord objects using a
detected ColumnMapping. Rows without usable coordinates are dropped; every
other field tolerates missing or oddly typed values.
"""

import logging
import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scripts.collectors.sheet_schemas import RawRow, RawTable, format_scalar
from scripts.processors.schema_detector import ColumnMapping

logger = logging.getLogger("sheet_collector.row_normalizer")

DEFAULT_TITLE = "Location"
_NUMBER_PATTERN = re.compile(r"\d*\.?\d+")
_LEADING_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class HikeRecord(BaseModel):
    """One normalized hike entry."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="Trailhead latitude")
    lng: float = Field(..., description="Trailhead longitude")
    title: str = Field(default=DEFAULT_TITLE, description="Marker title")
    park: str = Field(default="", description="Park name, with region if known")
    trail: str = Field(default="", description="Trail name")
    date: str = Field(default="", description="Hike date as displayed in the sheet")
    raw_date: Any = Field(default=0, description="Sortable raw date value")
    duration: str = Field(default="0m", description="Formatted duration")
    distance: Any = Field(default="", description="Formatted distance")
    pace: Any = Field(default="", description="Formatted pace")
    elevation: Any = Field(default="", description="Formatted elevation gain")

    @field_validator("lat", "lng")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        """Reject NaN and infinite coordinates."""
        if not math.isfinite(v):
            raise ValueError(f"Coordinate {v} is not a finite number")
        return v

    @property
    def location_key(self) -> str:
        """Exact coordinate key shared by hikes from the same trailhead."""
        return f"{format_scalar(self.lat)},{format_scalar(self.lng)}"


def is_number(value: Any) -> bool:
    """True for int/float values (booleans excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_number(value: Any) -> float | int:
    """Coerce a duration component to a number, treating junk as zero."""
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0
    return 0


def format_duration(hours: Any, minutes: Any) -> str:
    """Format hours and minutes as e.g. "1h 30m", omitting zero parts."""
    hours = _as_number(hours)
    minutes = _as_number(minutes)

    parts = []
    if hours > 0:
        parts.append(f"{format_scalar(hours)}h")
    if minutes > 0:
        parts.append(f"{format_scalar(minutes)}m")
    return " ".join(parts) or "0m"


def format_distance(value: Any) -> Any:
    """Format a distance in miles to one decimal place.

    A string mentioning "mi" is reduced to its leading number first; any other
    non-numeric value passes through unchanged.
    """
    if isinstance(value, str) and "mi" in value:
        match = _NUMBER_PATTERN.search(value)
        if match:
            value = float(match.group())

    if is_number(value) and not math.isnan(value):
        return f"{value:.1f} mi"
    return value


def format_pace(value: Any) -> Any:
    """Format a numeric pace in mph to one decimal place."""
    if is_number(value) and not math.isnan(value):
        return f"{value:.1f} mph"
    return value


def format_elevation(value: Any) -> Any:
    """Format a numeric elevation gain as whole feet (halves round up)."""
    if is_number(value) and math.isfinite(value):
        return f"{math.floor(value + 0.5)} ft"
    return value


def _leading_number(text: str) -> float | None:
    """Read the number at the start of ``text``, ignoring anything after it."""
    match = _LEADING_NUMBER.match(text.strip())
    if match is None:
        return None
    return float(match.group(0))


def parse_lat_lng(value: Any) -> tuple[float, float] | None:
    """
    Parse a "lat, lng" cell.

    Args:
        value: Raw cell value

    Returns:
        (lat, lng) tuple, or None if the value has no comma or either half
        does not start with a finite number. Trailing text after a number
        (units, degree signs, an altitude) is ignored.
    """
    text = format_scalar(value)
    if "," not in text:
        return None

    lat_str, lng_str = text.split(",", 1)
    lat = _leading_number(lat_str)
    lng = _leading_number(lng_str)
    if lat is None or lng is None:
        return None

    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return lat, lng


def compose_park(park: str, region: str) -> str:
    """Append the region in parentheses when present."""
    return f"{park} ({region})" if region else park


def normalize_row(row: RawRow, mapping: ColumnMapping) -> HikeRecord | None:
    """
    Convert one sheet row into a HikeRecord.

    Args:
        row: Raw sheet row
        mapping: Detected column mapping

    Returns:
        HikeRecord, or None if the row has no valid coordinates
    """
    coordinates = parse_lat_lng(row.cell(mapping.lat_lng).raw(""))
    if coordinates is None:
        return None
    lat, lng = coordinates

    date_cell = row.cell(mapping.date)
    park = compose_park(
        row.cell(mapping.park).text(),
        row.cell(mapping.region).text(),
    )

    return HikeRecord(
        lat=lat,
        lng=lng,
        title=park or DEFAULT_TITLE,
        park=park,
        trail=row.cell(mapping.trail).text(),
        date=date_cell.display(),
        raw_date=date_cell.raw(0),
        duration=format_duration(
            row.cell(mapping.hours).raw(0), row.cell(mapping.minutes).raw(0)
        ),
        distance=format_distance(row.cell(mapping.distance).raw(0)),
        pace=format_pace(row.cell(mapping.pace).raw(0)),
        elevation=format_elevation(row.cell(mapping.elevation).raw(0)),
    )


def normalize_rows(table: RawTable, mapping: ColumnMapping) -> list[HikeRecord]:
    """
    Convert every data row of a table into HikeRecords, in source order.

    Rows at or before the detected header row and blank rows are skipped;
    rows without valid coordinates are dropped.

    Args:
        table: Parsed sheet table
        mapping: Detected column mapping

    Returns:
        List of HikeRecord objects
    """
    records: list[HikeRecord] = []
    dropped = 0

    for index, row in enumerate(table.rows or []):
        if index <= mapping.header_row_index:
            continue
        if row is None or row.is_blank:
            continue

        record = normalize_row(row, mapping)
        if record is None:
            dropped += 1
            logger.debug(f"Dropped row {index}: missing or invalid coordinates")
            continue
        records.append(record)

    logger.info(f"Normalized {len(records)} hikes ({dropped} rows dropped)")
    return records
