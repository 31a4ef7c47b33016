"""Test configuration."""

from typing import List

from pytest import Config

from gitfolio.core.logging import configure_logging

pytest_plugins: List[str] = [
    "tests.fixtures.github",
    "tests.fixtures.repository",
]


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    # Configure logging for test environment
    configure_logging(testing=True)
