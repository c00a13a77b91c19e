"""
Hike Log Schema Detection

Infers which column of the hike log sheet holds which field. The sheet has no
fixed layout: columns may be labelled, unlabelled, reordered, or carry their
labels in a header row somewhere among the first few data rows.

Detection runs in three passes:
1. Classify each explicit column label.
2. If ``date`` and ``lat_lng`` are still unresolved, classify the cell values
   of the first rows and stop at the first row that resolves both. That row is
   treated as the header row.
3. Fill positional fallbacks for the core fields only.
"""

import logging
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from scripts.collectors.sheet_schemas import RawTable

logger = logging.getLogger("sheet_collector.schema_detector")

HEADER_SCAN_ROWS = 5
NO_HEADER_ROW = -1


class ColumnRule(NamedTuple):
    """A keyword rule: ``field`` matches when any keyword is a substring,
    or when every keyword in ``all_of`` is."""

    field: str
    keywords: tuple[str, ...]
    all_of: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if any(keyword in text for keyword in self.keywords):
            return True
        return bool(self.all_of) and all(keyword in text for keyword in self.all_of)


# Checked in order; the first matching rule wins for a given cell.
COLUMN_RULES: tuple[ColumnRule, ...] = (
    ColumnRule("date", ("date",)),
    ColumnRule("hours", ("hours",)),
    ColumnRule("minutes", ("minutes",)),
    ColumnRule("distance", ("distance",)),
    ColumnRule("lat_lng", ("lat,lng",), all_of=("lat", "lng")),
    ColumnRule("park", ("park",)),
    ColumnRule("trail", ("trail",)),
    ColumnRule("region", ("region",)),
    ColumnRule("elevation", ("elevation",)),
    ColumnRule("pace", ("pace",)),
)

# Only the core fields fall back to a fixed position.
POSITIONAL_FALLBACKS: dict[str, int] = {
    "date": 0,
    "hours": 1,
    "minutes": 2,
    "distance": 3,
    "lat_lng": 4,
}


class ColumnMapping(BaseModel):
    """Column index for each hike field; None means the field is unmapped."""

    model_config = ConfigDict(frozen=True)

    date: int | None = None
    hours: int | None = None
    minutes: int | None = None
    distance: int | None = None
    lat_lng: int | None = None
    park: int | None = None
    trail: int | None = None
    region: int | None = None
    elevation: int | None = None
    pace: int | None = None
    header_row_index: int = NO_HEADER_ROW

    def mapped_fields(self) -> dict[str, int]:
        return {
            name: index
            for name, index in self.model_dump(exclude={"header_row_index"}).items()
            if index is not None
        }


def classify_label(text: str) -> str | None:
    """Return the field a label text names, or None if no rule matches."""
    lowered = text.lower()
    for rule in COLUMN_RULES:
        if rule.matches(lowered):
            return rule.field
    return None


def _apply_labels(indices: dict[str, int], labels: list[str | None]) -> None:
    for index, label in enumerate(labels):
        if not label:
            continue
        field = classify_label(label)
        if field is not None:
            indices[field] = index


def _has_essentials(indices: dict[str, int]) -> bool:
    return "date" in indices and "lat_lng" in indices


def detect_columns(table: RawTable) -> ColumnMapping:
    """
    Infer a column mapping for a hike log table.

    Args:
        table: Parsed sheet table

    Returns:
        ColumnMapping with detected indices, positional fallbacks for the core
        fields, and the index of the header row found among the data rows
        (NO_HEADER_ROW when the labels were sufficient or no row qualified).
    """
    indices: dict[str, int] = {}
    header_row_index = NO_HEADER_ROW

    _apply_labels(indices, table.labels)

    if not _has_essentials(indices):
        rows = table.rows or []
        for row_index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
            if row is None or row.is_blank:
                continue

            _apply_labels(indices, row.texts())

            if _has_essentials(indices):
                header_row_index = row_index
                break

    logger.info(f"Detected column indices: {indices}")

    for field, position in POSITIONAL_FALLBACKS.items():
        if field not in indices:
            logger.debug(f"No column detected for '{field}', using position {position}")
            indices[field] = position

    return ColumnMapping(header_row_index=header_row_index, **indices)
