"""Parse-then-format entry point used by the CLI.

The core functions signal failure with empty results.  run() turns those into
exceptions that the CLI maps to an error message and exit status.  The HTTP
service makes the same checks inline so it can order them around the
maxWidth query parameter.
"""

import logging

from tabled.formatter import format_table
from tabled.parsers import parse
from tabled.patterns import BYTE_ORDER_MARK, MAX_TABLE_WIDTH
from tabled.schema import DEFAULT_LAYOUT, LayoutConfig

logger = logging.getLogger(__name__)


class TabledError(ValueError):
    """Base class for input problems reported back to the user."""


class EmptyInputError(TabledError):
    """The input was empty or whitespace only."""

    def __init__(self, message: str = "No input provided"):
        super().__init__(message)


class UnparsableInputError(TabledError):
    """No table rows could be extracted from the input."""

    def __init__(self, message: str = "Could not parse input data"):
        super().__init__(message)


def run(text: str | None, max_width: int = MAX_TABLE_WIDTH, layout: LayoutConfig = DEFAULT_LAYOUT) -> str:
    """Parse *text* and render it as markdown table(s) within *max_width*.

    Raises EmptyInputError for blank input and UnparsableInputError when the
    parser finds no rows.
    """
    if not text or not text.removeprefix(BYTE_ORDER_MARK).strip():
        raise EmptyInputError()

    grid = parse(text)
    if not grid:
        raise UnparsableInputError()

    output = format_table(grid, max_width=max_width, layout=layout)
    logger.debug("Rendered %d rows into %d characters (max_width=%d)", len(grid), len(output), max_width)
    return output
