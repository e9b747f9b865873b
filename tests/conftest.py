"""Pytest configuration shared by unit and integration tests"""

import os
import sys
from pathlib import Path

# Add project root to path for newsrank imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep test runs from writing session logs into the repository
os.environ.setdefault("LOG_FILE", str(Path(os.getenv("TMPDIR", "/tmp")) / "newsrank-tests" / "newsrank.log"))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with in-memory fakes")
    config.addinivalue_line("markers", "integration: tests against a real PostgreSQL + pgvector")
