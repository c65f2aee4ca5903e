"""Width-constrained markdown rendering of a parsed Grid.

The first row of the grid is the header.  Vacuous columns are dropped, then
the table is rendered in one of three ways:

  1. as a single table, when it fits within ``max_width``;
  2. squeezed: column widths scaled down proportionally and cells cut to fit,
     when the table has few, reasonably wide columns;
  3. split: columns partitioned into several side-by-side tables, repeating
     the first column in each when its values are unique (a key column).

All functions take their inputs read-only and return fresh lists.
"""

import logging

from tabled.patterns import COLUMN_OVERHEAD, MAX_TABLE_WIDTH
from tabled.schema import DEFAULT_LAYOUT, Grid, LayoutConfig

logger = logging.getLogger(__name__)


# ─── Measurement ──────────────────────────────────────────────────────────────


def calculate_column_widths(grid: Grid) -> list[int]:
    """Return the longest cell length per column; missing cells count as empty."""
    if not grid:
        return []
    widths = [0] * max(len(row) for row in grid)
    for row in grid:
        for col_idx, cell in enumerate(row):
            widths[col_idx] = max(widths[col_idx], len(cell or ""))
    return widths


def calculate_table_width(col_widths: list[int]) -> int:
    """Return the rendered line length for these column widths.

    Each column renders as ``" " + value + " "`` after a pipe, plus one closing pipe.
    """
    return sum(col_widths) + len(col_widths) * COLUMN_OVERHEAD + 1


def identify_non_empty_columns(grid: Grid) -> list[int]:
    """Return indices of columns with at least one non-whitespace cell."""
    if not grid:
        return []
    num_cols = max(len(row) for row in grid)
    return [col_idx for col_idx in range(num_cols) if any(_cell(row, col_idx).strip() for row in grid)]


def has_unique_first_column(grid: Grid) -> bool:
    """Return True if the first column's non-empty values (header included) never repeat.

    A column with no non-empty values, or a grid with no rows, counts as unique.
    """
    seen: set[str] = set()
    for row in grid:
        value = _cell(row, 0).strip()
        if not value:
            continue
        if value in seen:
            return False
        seen.add(value)
    return True


def _cell(row: list[str], col_idx: int) -> str:
    """Return the cell at *col_idx*, or '' when the row is too short."""
    return (row[col_idx] or "") if col_idx < len(row) else ""


def _normalize(grid: Grid) -> Grid:
    """Pad every row with empty cells to the length of the longest row."""
    num_cols = max(len(row) for row in grid)
    return [list(row) + [""] * (num_cols - len(row)) for row in grid]


# ─── Rendering ────────────────────────────────────────────────────────────────


def format_row(row: list[str], col_widths: list[int]) -> str:
    """Render one row as ``| a   | bb |`` with each cell left-aligned to its width."""
    cells = [" " + (cell or "").ljust(col_widths[idx]) + " " for idx, cell in enumerate(row)]
    return "|" + "|".join(cells) + "|"


def format_separator(col_widths: list[int]) -> str:
    """Render the header separator, ``|-----|----|``.  No alignment colons."""
    return "|" + "|".join("-" * (width + 2) for width in col_widths) + "|"


def format_single_table(grid: Grid, col_indices: list[int]) -> str:
    """Render the selected columns of *grid* as one markdown table, widths sized to that subset."""
    if not grid:
        return ""

    table = [[_cell(row, idx) for idx in col_indices] for row in grid]
    col_widths = calculate_column_widths(table)

    lines = [format_row(table[0], col_widths), format_separator(col_widths)]
    lines.extend(format_row(row, col_widths) for row in table[1:])
    return "\n".join(lines)


# ─── Fitting Strategies ───────────────────────────────────────────────────────


def squeeze_column_widths(col_widths: list[int], available_width: int, min_column_width: int) -> list[int]:
    """Scale widths down to share *available_width* content characters.

    Each column keeps at least *min_column_width*.  Rounding and the minimum can
    leave the total over budget; the excess is then taken from the widest
    columns first (stable on ties) until it is gone or every column is at the
    minimum.
    """
    total_content_width = sum(col_widths)
    adjusted = [max(width * available_width // total_content_width, min_column_width) for width in col_widths]

    excess = sum(adjusted) - available_width
    if excess > 0:
        widest_first = sorted(range(len(adjusted)), key=lambda idx: -adjusted[idx])
        for idx in widest_first:
            if excess <= 0:
                break
            removable = min(excess, adjusted[idx] - min_column_width)
            adjusted[idx] -= removable
            excess -= removable
    return adjusted


def split_columns_into_groups(col_widths: list[int], max_width: int, repeat_first_col: bool) -> list[list[int]]:
    """Partition column indices into groups whose rendered width fits *max_width*.

    Column 0 always opens the first group.  With *repeat_first_col*, every later
    group starts with column 0 as well.  A single column wider than the budget
    still gets a group of its own.
    """
    groups: list[list[int]] = []
    current: list[int] = []

    for col_idx in range(len(col_widths)):
        if col_idx == 0:
            current.append(0)
            continue

        if repeat_first_col and len(current) > 1:
            candidate = [0, *current[1:], col_idx]
        else:
            candidate = [*current, col_idx]

        if calculate_table_width([col_widths[idx] for idx in candidate]) <= max_width:
            current.append(col_idx)
        else:
            if current:
                groups.append(current)
            current = [0, col_idx] if repeat_first_col else [col_idx]

    if current:
        groups.append(current)
    return groups


def _should_split(col_widths: list[int], layout: LayoutConfig) -> bool:
    """Return True when squeezing would be unreadable: too many or too narrow columns."""
    avg_col_width = sum(col_widths) / len(col_widths)
    return len(col_widths) > layout.max_columns_before_split or avg_col_width < layout.min_column_width * 2


def _try_squeeze(grid: Grid, col_widths: list[int], max_width: int, layout: LayoutConfig) -> str | None:
    """Render one table with cells cut to proportionally reduced widths, or None if there is no room."""
    num_cols = len(col_widths)
    available_width = max_width - (num_cols * COLUMN_OVERHEAD + 1)
    if available_width <= num_cols * layout.min_column_width:
        return None

    adjusted = squeeze_column_widths(col_widths, available_width, layout.min_column_width)
    truncated = [[cell[: adjusted[idx]] for idx, cell in enumerate(row)] for row in grid]
    logger.debug("Squeezed %d columns into %d content characters: %s", num_cols, available_width, adjusted)
    return format_single_table(truncated, list(range(num_cols)))


# ─── Entry Point ──────────────────────────────────────────────────────────────


def format_table(grid: Grid, max_width: int = MAX_TABLE_WIDTH, layout: LayoutConfig = DEFAULT_LAYOUT) -> str:
    """Render *grid* (first row is the header) as markdown table(s) no wider than *max_width* where possible.

    Returns '' for an empty grid or when every column is vacuous.  Split tables
    are joined by a blank line.  Never raises for ragged or empty rows.
    """
    if not grid:
        return ""

    normalized = _normalize(grid)
    kept_columns = identify_non_empty_columns(normalized)
    if not kept_columns:
        return ""

    filtered = [[row[idx] for idx in kept_columns] for row in normalized]
    col_widths = calculate_column_widths(filtered)
    all_columns = list(range(len(kept_columns)))

    if calculate_table_width(col_widths) <= max_width:
        return format_single_table(filtered, all_columns)

    has_key_column = has_unique_first_column(filtered)

    if not _should_split(col_widths, layout):
        squeezed = _try_squeeze(filtered, col_widths, max_width, layout)
        if squeezed is not None:
            return squeezed

    groups = split_columns_into_groups(col_widths, max_width, has_key_column)
    logger.debug("Split %d columns into %d tables (key column repeated: %s)", len(col_widths), len(groups), has_key_column)
    return "\n\n".join(format_single_table(filtered, group) for group in groups)
