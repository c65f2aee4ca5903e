"""Compiled regex patterns and layout constants for table parsing and rendering.

These patterns classify lines of pasted tabular text (markdown rows, ASCII
borders from SQL clients, pipe-delimited data rows) and are shared by
parsers.py for both format detection and row extraction.
"""

import re

# ─── Line-Shape Patterns ──────────────────────────────────────────────────────

# Markdown table row, surrounding whitespace allowed: "  | a | b |  "
MARKDOWN_ROW_RE = re.compile(r"^\s*\|.*\|\s*$")

# Markdown separator row such as "|---|:--|" without colons: "|------|-----|"
MARKDOWN_SEPARATOR_RE = re.compile(r"^\|[\s\-|]+\|$")

# ASCII border from a SQL client dump: "+----+-------+"
SQL_BORDER_RE = re.compile(r"^\+[-+]+\+$")

# Pipe-delimited data row with no surrounding whitespace: "| 1 | foo |"
SQL_DATA_RE = re.compile(r"^\|.*\|$")


# ─── Detection Thresholds ─────────────────────────────────────────────────────

# Fraction of non-blank lines that must look like markdown rows
MARKDOWN_LINE_RATIO = 0.5

# Fraction of non-blank lines that must contain a tab
TSV_LINE_RATIO = 0.7

# Quote characters stripped from both ends of a CSV cell
CSV_QUOTE_CHARS = ('"', "'")

# Byte-order mark some editors and Windows tools prepend to UTF-8 text
BYTE_ORDER_MARK = "\ufeff"


# ─── Layout Constants ─────────────────────────────────────────────────────────

# Default maximum rendered width of a table line, in characters
MAX_TABLE_WIDTH = 100

# Narrowest a column may be squeezed to
MIN_COLUMN_WIDTH = 3

# Tables with more columns than this are always split, never squeezed
MAX_COLUMNS_BEFORE_SPLIT = 10

# Per-column overhead of " value " plus its leading pipe
COLUMN_OVERHEAD = 3
