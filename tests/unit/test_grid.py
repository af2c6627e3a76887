"""
Unit tests for RectangularGrid.
"""

import pytest

import numpy as np

from pfs_pde.config import PorousFisherStefanConfig
from pfs_pde.geometry import RectangularGrid


class TestRectangularGrid:
    """Test grid construction and validation."""

    def test_from_config(self):
        config = PorousFisherStefanConfig(Lx=5.0, Ly=1.0, Nx=101, Ny=11, T=0.2, Nt=21)
        grid = RectangularGrid.from_config(config)

        assert grid.shape == (101, 11)
        assert grid.x[0] == -5.0 and grid.x[-1] == 5.0
        assert grid.y[0] == 0.0 and grid.y[-1] == 1.0
        assert grid.dx == pytest.approx(config.dx)
        assert grid.dy == pytest.approx(config.dy)
        assert grid.dt == pytest.approx(config.dt)
        assert grid.h_min == pytest.approx(0.1)

    def test_meshgrid_uses_matrix_indexing(self, small_grid):
        X, Y = small_grid.meshgrid()
        assert X.shape == small_grid.shape
        np.testing.assert_array_equal(X[:, 0], small_grid.x)
        np.testing.assert_array_equal(Y[0, :], small_grid.y)

    def test_time_levels_optional(self):
        grid = RectangularGrid(x=np.linspace(0, 1, 5), y=np.linspace(0, 1, 3))
        assert grid.t is None
        assert grid.dt is None

    def test_too_few_points(self):
        with pytest.raises(ValueError, match="at least 3 points"):
            RectangularGrid(x=np.array([0.0, 1.0]), y=np.linspace(0, 1, 3))

    def test_non_uniform_spacing(self):
        with pytest.raises(ValueError, match="uniform"):
            RectangularGrid(x=np.array([0.0, 0.1, 0.3, 0.4]), y=np.linspace(0, 1, 3))

    def test_non_increasing(self):
        with pytest.raises(ValueError, match="strictly increasing"):
            RectangularGrid(x=np.linspace(1, 0, 5), y=np.linspace(0, 1, 3))

    def test_repr(self, small_grid):
        assert "Nx=101" in repr(small_grid)
