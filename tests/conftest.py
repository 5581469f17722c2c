"""Project-wide pytest configuration for the BudgetForge test suite."""

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register the custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that need PostgreSQL or Redis"
    )
