"""Pydantic schemas for the hike log sheet returned by the visualization query API.

The sheet arrives as a loosely structured table: optional column labels and
rows of cells, where each cell may carry a raw value (``v``), a formatted
display string (``f``), both, or neither. These models give that structure a
typed shape and a small accessor contract so downstream processors never have
to chain ad hoc fallbacks on possibly missing fields.
"""

import logging
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger("sheet_collector.schemas")


def format_scalar(value: Any) -> str:
    """Render a raw cell value as display text.

    Integral floats drop their trailing ``.0`` so that a sheet number such as
    ``2.0`` reads as ``2``, matching how the sheet itself displays it.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


class RawCell(BaseModel):
    """A single sheet cell with an optional raw value and formatted string."""

    model_config = ConfigDict(frozen=True)

    v: Any = Field(default=None, description="Raw typed value (number, string, ...)")
    f: str | None = Field(default=None, description="Formatted display string")

    @field_validator("f", mode="before")
    @classmethod
    def coerce_formatted(cls, v: Any) -> Any:
        """Accept a non-string formatted value (e.g. a bare number) as text."""
        if v is None or isinstance(v, str):
            return v
        return format_scalar(v)

    @property
    def has_value(self) -> bool:
        """True when the raw value is present and not an empty string."""
        return self.v is not None and not (isinstance(self.v, str) and self.v == "")

    def raw(self, default: Any = None) -> Any:
        """Return the raw value, or ``default`` when the cell is empty."""
        return self.v if self.has_value else default

    def display(self, default: str = "") -> str:
        """Return the formatted string, falling back to the raw value as text."""
        if self.f:
            return self.f
        if self.has_value:
            return format_scalar(self.v)
        return default

    def text(self) -> str:
        """Return the raw value coerced to text ("" when empty)."""
        return format_scalar(self.v) if self.has_value else ""


EMPTY_CELL = RawCell()


class RawColumn(BaseModel):
    """Column descriptor; only ``label`` is used for schema detection."""

    id: str | None = None
    label: str | None = None
    type: str | None = None


class RawRow(BaseModel):
    """A sheet row; ``c`` is absent for blank rows."""

    c: list[RawCell | None] | None = None

    @property
    def is_blank(self) -> bool:
        return self.c is None

    def cell(self, index: int | None) -> RawCell:
        """Return the cell at ``index``, or an empty cell if it does not exist."""
        if index is None or self.c is None or not 0 <= index < len(self.c):
            return EMPTY_CELL
        return self.c[index] or EMPTY_CELL

    def texts(self) -> list[str]:
        """Return every cell's raw value as text, in column order."""
        if self.c is None:
            return []
        return [cell.text() if cell is not None else "" for cell in self.c]


def _validate_item(model: type[BaseModel], item: Any, kind: str, index: int):
    """Validate one column or row, returning None when it is absent or invalid."""
    if item is None:
        return None
    try:
        return model.model_validate(item)
    except ValidationError as e:
        logger.warning(
            f"Skipping invalid {kind} {index}: {e.error_count()} validation errors"
        )
        logger.debug(str(e))
        return None


class RawTable(BaseModel):
    """Parsed hike log table: optional column labels and ordered rows."""

    cols: list[RawColumn | None] | None = None
    rows: list[RawRow | None] | None = None

    @property
    def labels(self) -> list[str | None]:
        """Column labels by position (None where a column has no label)."""
        if not self.cols:
            return []
        return [col.label if col is not None else None for col in self.cols]

    @property
    def row_count(self) -> int:
        return len(self.rows) if self.rows else 0

    @classmethod
    def from_payload(cls, payload: Any) -> "RawTable":
        """Build a table from decoded JSON without ever raising.

        A payload that is not a mapping, or whose ``rows`` is not a list,
        yields a table without rows. Columns and rows are validated one at a
        time; one that fails is kept as None (an unlabelled column or a blank
        row) so the rest of the table survives.
        """
        if not isinstance(payload, dict):
            logger.error(
                f"Invalid table payload: expected an object, got {type(payload).__name__}"
            )
            return cls()

        raw_cols = payload.get("cols")
        cols = None
        if isinstance(raw_cols, list):
            cols = [
                _validate_item(RawColumn, col, "column", i)
                for i, col in enumerate(raw_cols)
            ]
        elif raw_cols is not None:
            logger.warning(f"Ignoring column list of type {type(raw_cols).__name__}")

        raw_rows = payload.get("rows")
        if raw_rows is None:
            return cls(cols=cols)
        if not isinstance(raw_rows, list):
            logger.error(
                "Invalid table structure: rows must be a list, "
                f"got {type(raw_rows).__name__}"
            )
            return cls(cols=cols)

        rows = [
            _validate_item(RawRow, row, "row", i) for i, row in enumerate(raw_rows)
        ]
        return cls(cols=cols, rows=rows)


class GvizResponse(BaseModel):
    """Envelope returned by the visualization query endpoint."""

    version: str | None = None
    reqId: str | None = None
    status: str = Field(default="ok", description="'ok', 'warning' or 'error'")
    errors: list[dict] = Field(default_factory=list)
    table: dict | None = Field(default=None, description="Raw table object")
