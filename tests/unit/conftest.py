"""Unit test configuration - fixed clock, no external services"""

import sys
from pathlib import Path

import pytest

# Make the shared fakes module importable from every unit test
sys.path.insert(0, str(Path(__file__).parent))

from fakes import NOW  # noqa: E402


@pytest.fixture
def now():
    """Fixed reference instant shared by articles, hydrator and scorer"""
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW
