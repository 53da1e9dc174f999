"""
Pytest configuration for test suite

Markers:
- unit: Fast unit tests (no external dependencies)
- integration: In-process pipeline tests (feed → engine → emitter)
"""

import pytest

from tests.factories import FakeClock


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Fast unit tests (no dependencies)")
    config.addinivalue_line(
        "markers", "integration: In-process pipeline tests (no external services)"
    )


@pytest.fixture
def clock():
    """Manually advanced epoch-ms clock starting at 0"""
    return FakeClock()
