"""Shared test configuration and fixtures."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env from project root for all tests
root = Path(__file__).parent.parent.resolve()
load_dotenv(root / ".env")


@pytest.fixture
def scenario_a_input() -> str:
    """Two-column CSV whose rendered table fits comfortably within 100 characters."""
    return "Name,Age\nJohn Smith,32\nJane Doe,28"


@pytest.fixture
def scenario_a_output() -> str:
    """Expected markdown rendering of scenario_a_input."""
    return "\n".join(
        [
            "| Name       | Age |",
            "|------------|-----|",
            "| John Smith | 32  |",
            "| Jane Doe   | 28  |",
        ]
    )


@pytest.fixture
def contacts_csv() -> str:
    """Six-column contact list whose first column holds unique IDs."""
    return "\n".join(
        [
            "ID,Name,Email,Phone,City,State",
            "1,Alice,alice@example.com,555-0100,Springfield,IL",
            "2,Bob,bob@example.com,555-0101,Shelbyville,IL",
        ]
    )
