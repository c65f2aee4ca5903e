"""Format detection and parsing of pasted tabular text into a Grid.

Recognises four loosely-structured shapes: markdown tables, ASCII-art tables
printed by SQL clients, tab-separated and comma-separated text.  Every parser
tolerates malformed input and returns an empty grid when no line matched, so
callers treat "empty" as "could not parse".

The CSV parser is deliberately minimal: it splits on every comma (quoted
commas are not protected) and strips one matching pair of surrounding quotes
per cell.
"""

import logging
from collections.abc import Callable

from tabled.patterns import (
    BYTE_ORDER_MARK,
    CSV_QUOTE_CHARS,
    MARKDOWN_LINE_RATIO,
    MARKDOWN_ROW_RE,
    MARKDOWN_SEPARATOR_RE,
    SQL_BORDER_RE,
    SQL_DATA_RE,
    TSV_LINE_RATIO,
)
from tabled.schema import Grid, TableFormat

logger = logging.getLogger(__name__)


# ─── Line Helpers ─────────────────────────────────────────────────────────────


def _non_blank_lines(text: str) -> list[str]:
    """Split trimmed text into lines, dropping whitespace-only ones (lines are not trimmed)."""
    return [line for line in text.strip().split("\n") if line.strip()]


def _split_piped_row(line: str) -> list[str]:
    """Split a trimmed '| a | b |' line into trimmed cells, discarding the outer pipes."""
    return [cell.strip() for cell in line.split("|")[1:-1]]


def _strip_quotes(cell: str) -> str:
    """Remove one matching pair of surrounding quote characters, if present."""
    if len(cell) >= 2 and cell[0] in CSV_QUOTE_CHARS and cell[-1] == cell[0]:
        return cell[1:-1]
    return cell


# ─── Detection ────────────────────────────────────────────────────────────────


def detect_format(text: str) -> TableFormat:
    """Classify *text* by line shape.  First match wins: markdown, sql, tsv, then csv.

    Returns TableFormat.UNKNOWN only for blank input.
    """
    lines = _non_blank_lines(text)
    if not lines:
        return TableFormat.UNKNOWN

    # More than half the lines look like "| ... |"
    markdown_lines = [line for line in lines if MARKDOWN_ROW_RE.match(line)]
    if len(markdown_lines) > len(lines) * MARKDOWN_LINE_RATIO:
        return TableFormat.MARKDOWN

    # ASCII borders, or any flush pipe row while the text contains a pipe
    has_sql_borders = any(SQL_BORDER_RE.match(line) for line in lines)
    has_sql_data = any(SQL_DATA_RE.match(line) for line in lines)
    if has_sql_borders or (has_sql_data and "|" in text):
        return TableFormat.SQL

    tsv_lines = [line for line in lines if "\t" in line]
    if len(tsv_lines) > len(lines) * TSV_LINE_RATIO:
        return TableFormat.TSV

    return TableFormat.CSV


# ─── Per-Format Parsers ───────────────────────────────────────────────────────


def parse_markdown(text: str) -> Grid:
    """Parse a markdown table, skipping '|---|---|' separator rows."""
    lines = [line.strip() for line in text.strip().split("\n")]
    lines = [line for line in lines if line.startswith("|") and line.endswith("|")]

    rows: Grid = []
    for line in lines:
        # A row of only pipes and spaces is data; it needs a hyphen to be a separator
        if MARKDOWN_SEPARATOR_RE.match(line) and "-" in line:
            continue
        cells = _split_piped_row(line)
        if cells:
            rows.append(cells)
    return rows


def parse_csv(text: str) -> Grid:
    """Parse comma-separated text.  Commas inside quotes still split the field."""
    return [[_strip_quotes(cell.strip()) for cell in line.split(",")] for line in _non_blank_lines(text)]


def parse_tsv(text: str) -> Grid:
    """Parse tab-separated text."""
    return [[cell.strip() for cell in line.split("\t")] for line in _non_blank_lines(text)]


def parse_sql(text: str) -> Grid:
    """Parse a SQL client dump ('+----+' borders around '| a | b |' rows)."""
    rows: Grid = []
    for raw_line in text.strip().split("\n"):
        line = raw_line.strip()
        if SQL_BORDER_RE.match(line):
            continue
        if line.startswith("|") and line.endswith("|"):
            cells = _split_piped_row(line)
            if cells:
                rows.append(cells)
    return rows


# ─── Entry Point ──────────────────────────────────────────────────────────────

PARSERS: dict[TableFormat, Callable[[str], Grid]] = {
    TableFormat.MARKDOWN: parse_markdown,
    TableFormat.SQL: parse_sql,
    TableFormat.TSV: parse_tsv,
    TableFormat.CSV: parse_csv,
}


def parse(text: str) -> Grid:
    """Detect the format of *text* and parse it into a Grid.

    Never raises for malformed input.  Returns an empty grid for blank input
    or when no line matched the detected format.  A format without a
    dedicated parser falls back to CSV.  A leading byte-order mark is ignored.
    """
    text = (text or "").removeprefix(BYTE_ORDER_MARK)
    if not text.strip():
        return []

    table_format = detect_format(text)
    parser = PARSERS.get(table_format)
    if parser is None:
        logger.debug("No parser for format %s, falling back to csv", table_format.value)
        return parse_csv(text)

    grid = parser(text)
    logger.debug("Detected %s input: %d rows", table_format.value, len(grid))
    return grid
