"""Process-level settings for the CLI and HTTP service, read from the environment.

Values come from environment variables, optionally supplied by a ``.env`` file
at the project root.  The parsing and formatting core never reads these; the
adapters pass them in explicitly.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from tabled.patterns import MAX_TABLE_WIDTH

logger = logging.getLogger(__name__)

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")


def env_int(name: str, default: int, minimum: int = 1) -> int:
    """Read an integer environment variable, falling back to *default* when unset or invalid."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%d: must be >= %d, using %d", name, value, minimum, default)
        return default
    return value


# Smallest maxWidth the HTTP service accepts
MIN_REQUEST_WIDTH = 20

# Default width budget for the CLI
DEFAULT_MAX_WIDTH = env_int("TABLED_MAX_WIDTH", MAX_TABLE_WIDTH, minimum=MIN_REQUEST_WIDTH)

# HTTP bind address
HOST = os.getenv("HOST", "0.0.0.0")
PORT = env_int("PORT", 3000)

# Requests allowed per client per window (100 per 15 minutes by default)
RATE_LIMIT_MAX = env_int("TABLED_RATE_LIMIT_MAX", 100)
RATE_LIMIT_WINDOW_SECONDS = env_int("TABLED_RATE_LIMIT_WINDOW_SECONDS", 15 * 60)

# Largest request body the HTTP service reads, in bytes (100 KiB by default)
MAX_BODY_BYTES = env_int("TABLED_MAX_BODY_BYTES", 100 * 1024)
