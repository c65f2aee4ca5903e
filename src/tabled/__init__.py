"""Parse loosely-structured tabular text and re-render it as width-limited markdown tables.

Submodules:
  patterns   -- compiled regex patterns and layout constants
  schema     -- Grid alias, TableFormat enum, pydantic models
  parsers    -- format detection and per-format parsers
  formatter  -- column widths, squeeze and split strategies, markdown rendering
  pipeline   -- run() entry point used by the CLI and HTTP service
  config     -- environment-driven settings
  cli        -- stdin/stdout command-line interface
  web        -- FastAPI service
"""

from tabled.formatter import format_table
from tabled.parsers import parse

__all__ = ["format_table", "parse"]
