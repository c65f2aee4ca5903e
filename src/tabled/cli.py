"""Command-line interface: read tabular text on stdin, print markdown tables on stdout.

Usage:
    pbpaste | tabled
    mysql -e "select * from users" | tabled --max-width 120
    python -m tabled.cli < data.csv
"""

import argparse
import logging
import sys
from typing import TextIO

from tabled.config import DEFAULT_MAX_WIDTH, MIN_REQUEST_WIDTH
from tabled.pipeline import run

logger = logging.getLogger(__name__)


def _positive_width(value: str) -> int:
    """argparse type for --max-width."""
    try:
        width = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid width: {value!r}") from exc
    if width < MIN_REQUEST_WIDTH:
        raise argparse.ArgumentTypeError(f"width must be >= {MIN_REQUEST_WIDTH}, got {width}")
    return width


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``tabled`` command."""
    parser = argparse.ArgumentParser(
        prog="tabled",
        description="Parse CSV, TSV, markdown or SQL-dump tables from stdin and print aligned markdown tables",
    )
    parser.add_argument(
        "--max-width",
        type=_positive_width,
        default=DEFAULT_MAX_WIDTH,
        help=f"Maximum table width in characters (default: {DEFAULT_MAX_WIDTH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parsing and layout decisions to stderr")
    return parser


def main(argv: list[str] | None = None, stdin: TextIO | None = None, stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    """Run the CLI and return the process exit status."""
    if stdin is None:
        sys.stdin.reconfigure(encoding="utf-8-sig")
        stdin = sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=stderr,
    )

    try:
        output = run(stdin.read(), max_width=args.max_width)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.debug("Formatting failed", exc_info=True)
        print(f"Error: {exc}", file=stderr)
        return 1

    print(output, file=stdout)
    return 0


def entrypoint() -> None:
    """Console-script wrapper around main()."""
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
