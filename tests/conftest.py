"""Pytest configuration for rtpng tests."""

from typing import Any


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "pngquant: mark test as requiring the pngquant executable",
    )
