"""Shared types: the Grid alias, the TableFormat tag, and pydantic models.

LayoutConfig carries the tunable rendering limits into formatter.py.
FormatRequest and ErrorBody describe the JSON shapes accepted and returned by
the HTTP service in web/app.py.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

from tabled.patterns import MAX_COLUMNS_BEFORE_SPLIT, MIN_COLUMN_WIDTH

# Ordered rows of string cells; rows may be ragged until normalised
Grid = list[list[str]]


class TableFormat(Enum):
    """Closed set of input shapes recognised by detect_format()."""

    MARKDOWN = "markdown"
    SQL = "sql"
    TSV = "tsv"
    CSV = "csv"
    UNKNOWN = "unknown"


class LayoutConfig(BaseModel):
    """Rendering limits used when a table does not fit the width budget."""

    model_config = ConfigDict(frozen=True)

    min_column_width: int = MIN_COLUMN_WIDTH
    max_columns_before_split: int = MAX_COLUMNS_BEFORE_SPLIT

    @model_validator(mode="after")
    def validate_limits(self) -> "LayoutConfig":
        """Reject limits that would make squeezing or splitting meaningless."""
        if self.min_column_width < 1:
            raise ValueError(f"min_column_width must be >= 1, got {self.min_column_width}")
        if self.max_columns_before_split < 1:
            raise ValueError(f"max_columns_before_split must be >= 1, got {self.max_columns_before_split}")
        return self


DEFAULT_LAYOUT = LayoutConfig()


class FormatRequest(BaseModel):
    """JSON body for POST /format.  ``data`` wins over ``text`` when both are set."""

    data: str | None = None
    text: str | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_non_string_fields(cls, values):
        """Ignore non-string ``data``/``text`` values so the other field can still apply."""
        if isinstance(values, dict):
            return {key: val for key, val in values.items() if key in ("data", "text") and isinstance(val, str)}
        return values

    def input_text(self) -> str | None:
        """Return whichever field carries the table text, or None."""
        if self.data is not None:
            return self.data
        return self.text


class ErrorBody(BaseModel):
    """Uniform JSON error payload returned by the HTTP service."""

    error: str
    message: str
