"""
Pytest configuration and shared fixtures for the pfs_pde test suite.

This module provides common fixtures, test configuration, and utilities
used across the entire test suite.
"""

import warnings

import pytest

import numpy as np

from pfs_pde.config import PorousFisherStefanConfig
from pfs_pde.geometry import RectangularGrid

# =============================================================================
# Test Configuration
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (slower, cross-component)")
    config.addinivalue_line("markers", "slow: Slow tests (may take >10 seconds)")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test paths."""
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)

        if "slow" in item.name:
            item.add_marker(pytest.mark.slow)


# =============================================================================
# Configuration and Grid Fixtures
# =============================================================================


def make_config(**overrides) -> PorousFisherStefanConfig:
    """Small-grid configuration: dx = dy = 0.1, dt = 0.01."""
    values = {
        "Lx": 5.0,
        "Ly": 1.0,
        "Nx": 101,
        "Ny": 11,
        "T": 0.2,
        "Nt": 21,
        "interface_offset": 0.05,
        "snapshot_interval": 10,
    }
    values.update(overrides)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        return PorousFisherStefanConfig(**values)


@pytest.fixture
def config_factory():
    """Factory for small-grid configurations with overrides."""
    return make_config


@pytest.fixture
def small_config():
    """Small configuration for unit and integration tests."""
    return make_config()


@pytest.fixture
def small_grid(small_config):
    """Grid matching ``small_config``."""
    return RectangularGrid.from_config(small_config)


@pytest.fixture
def square_grid():
    """Square grid on (-1, 1) x (0, 2) with spacing 0.05 for geometry tests."""
    return RectangularGrid(x=np.linspace(-1.0, 1.0, 41), y=np.linspace(0.0, 2.0, 41))


@pytest.fixture
def planar_phi(small_grid):
    """Signed distance to the line x = 0.05."""
    X, _ = small_grid.meshgrid()
    return X - 0.05
