"""
Pytest configuration and fixtures for dtms tests.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


REFERENCE_TEXT = '2015-08-08 10:10:10.123456'
REFERENCE_EPOCH = 1439028610


@pytest.fixture
def reference():
    """Saturday 2015-08-08 10:10:10.123456 UTC."""
    from dtms import Instant
    return Instant(REFERENCE_TEXT)


@pytest.fixture
def reference_datetime():
    """The reference instant as a whole-second aware datetime."""
    from datetime import datetime, timezone
    return datetime(2015, 8, 8, 10, 10, 10, tzinfo=timezone.utc)


@pytest.fixture
def config_file(tmp_path):
    """A TOML configuration file with non-default settings."""
    path = tmp_path / 'config.toml'
    path.write_text(
        'timezone = "UTC"\n'
        'format = "U.u"\n'
        'interval_format = "%RPT%sS"\n'
        '\n'
        '[logging]\n'
        'level = "warning"\n'
    )
    return path
