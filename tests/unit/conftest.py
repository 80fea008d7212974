"""
Pytest configuration and fixtures for zuspec-be-smt tests.
"""
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def ctx():
    """A fresh context, closed after the test."""
    from zuspec.be.smt import Context
    context = Context()
    yield context
    context.close()
