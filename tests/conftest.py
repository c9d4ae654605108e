"""Test configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from dnav.config import Config, reset_config
from dnav.extract.models import PageText

COMMITMENT_SENTENCE = (
    "The new battery line is scheduled to start by end of 2025 and will ramp production in Q1 2026."
)
BOILERPLATE_SENTENCE = (
    "This press release contains forward-looking statements that could cause actual results "
    "to differ materially."
)
TABLE_LINE = "CASH FLOWS (in millions of USD) 2024 2025 2026 2027 2028"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config() -> Config:
    """Default configuration, independent of any dnav.yaml on disk."""
    return Config()


@pytest.fixture
def report_pages() -> list[PageText]:
    """A small shareholder-letter style report with headers, tables and plans."""
    header = "ACME Corp Q4 Update"
    footer = "Acme Corp | Investor Relations"
    return [
        PageText(
            page=1,
            text=(
                f"{header}\n"
                "HIGHLIGHTS\n"
                "Revenue grew to a record level in the quarter, driven by strong demand.\n"
                "We plan to begin construction of the new cathode plant in Texas in the\n"
                "first half of 2026.\n"
                f"{footer}\n"
                "1"
            ),
        ),
        PageText(
            page=2,
            text=(
                f"{header}\n"
                "OUTLOOK\n"
                f"{COMMITMENT_SENTENCE}\n"
                f"{TABLE_LINE}\n"
                "Revenue 1,234 1,456 1,789 2,001\n"
                f"{footer}\n"
                "2"
            ),
        ),
        PageText(
            page=3,
            text=(
                f"{header}\n"
                f"{BOILERPLATE_SENTENCE}\n"
                "Our dashboard includes several views of regional performance data.\n"
                f"{footer}\n"
                "3"
            ),
        ),
    ]


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset global state between tests."""
    yield
    reset_config()
