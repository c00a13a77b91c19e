"""
Location grouping for hike records.

Hikes that start from the same trailhead share a single map marker. Grouping
uses the exact coordinate text, not geographic proximity: coordinates for a
trailhead are expected to be copied verbatim between rows, so hikes differing
by even the last decimal place form separate groups.
"""

from functools import cmp_to_key

from pydantic import BaseModel, Field

from scripts.processors.row_normalizer import HikeRecord, is_number


class LocationGroup(BaseModel):
    """Hikes sharing a trailhead, most recent first."""

    key: str = Field(..., description="Exact 'lat,lng' key")
    hikes: list[HikeRecord] = Field(..., min_length=1)

    @property
    def primary(self) -> HikeRecord:
        """The most recent hike, used for marker position and title."""
        return self.hikes[0]

    @property
    def lat(self) -> float:
        return self.primary.lat

    @property
    def lng(self) -> float:
        return self.primary.lng


def compare_recency(a: HikeRecord, b: HikeRecord) -> int:
    """Order newer raw dates first; no preference unless both are numeric."""
    if is_number(a.raw_date) and is_number(b.raw_date):
        if a.raw_date > b.raw_date:
            return -1
        if a.raw_date < b.raw_date:
            return 1
    return 0


def sort_by_recency(hikes: list[HikeRecord]) -> list[HikeRecord]:
    """Stable sort, newest first."""
    return sorted(hikes, key=cmp_to_key(compare_recency))


def group_by_location(records: list[HikeRecord]) -> dict[str, LocationGroup]:
    """
    Partition hikes by exact coordinates.

    Args:
        records: Normalized hikes in source order

    Returns:
        Dict mapping location key to its LocationGroup, in order of first
        appearance
    """
    buckets: dict[str, list[HikeRecord]] = {}
    for record in records:
        buckets.setdefault(record.location_key, []).append(record)

    return {
        key: LocationGroup(key=key, hikes=sort_by_recency(hikes))
        for key, hikes in buckets.items()
    }
