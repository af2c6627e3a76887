"""
Unit tests for level-set reinitialisation.

Tests that the signed distance property is restored near the interface
while the zero contour stays in place.
"""

import pytest

import numpy as np

from pfs_pde.geometry.level_set import gradient_deviation, interface_adjacent, reinitialize
from pfs_pde.simulation import front_position


class TestInterfaceAdjacent:
    """Test detection of points next to a sign change."""

    def test_planar(self, planar_phi):
        adjacent = interface_adjacent(planar_phi)
        assert np.all(adjacent[50, :]) and np.all(adjacent[51, :])
        assert np.count_nonzero(adjacent) == 2 * planar_phi.shape[1]

    def test_single_sign(self):
        assert not np.any(interface_adjacent(np.ones((6, 6))))


class TestReinitialize:
    """Test restoration of |∇ϕ| = 1."""

    def test_signed_distance_is_fixed_point(self, small_grid, planar_phi):
        phi = reinitialize(planar_phi, small_grid, iterations=20)
        np.testing.assert_allclose(phi, planar_phi, atol=1e-10)

    def test_zero_iterations_returns_copy(self, small_grid, planar_phi):
        phi = reinitialize(planar_phi, small_grid, iterations=0)
        np.testing.assert_array_equal(phi, planar_phi)
        assert phi is not planar_phi

    def test_restores_unit_gradient(self, small_grid):
        X, _ = small_grid.meshgrid()
        phi0 = 2.0 * (X - 0.05)

        phi = reinitialize(phi0, small_grid, iterations=20)

        band = np.abs(phi) < 3.0 * small_grid.h_min
        deviation = gradient_deviation(phi, small_grid)[band]
        deviation = deviation[~np.isnan(deviation)]
        assert deviation.size > 0
        assert deviation.max() < 0.1

    def test_planar_contour_does_not_move(self, small_grid):
        X, _ = small_grid.meshgrid()
        phi0 = 2.0 * (X - 0.05)

        phi = reinitialize(phi0, small_grid, iterations=20)

        before = front_position(small_grid.x, phi0, column=5).position
        after = front_position(small_grid.x, phi, column=5).position
        assert after == pytest.approx(before, abs=1e-10)

    def test_circle_contour_stays_within_a_tenth_of_a_cell(self, square_grid):
        X, Y = square_grid.meshgrid()
        radius = 0.61
        phi0 = X**2 + (Y - 1.0) ** 2 - radius**2

        phi = reinitialize(phi0, square_grid, iterations=20)

        position = front_position(square_grid.x, phi, column=20).position
        assert position == pytest.approx(radius, abs=0.1 * square_grid.dx)

    def test_repeated_calls_do_not_drift(self, square_grid):
        X, Y = square_grid.meshgrid()
        radius = 0.61
        phi = np.sqrt(X**2 + (Y - 1.0) ** 2) - radius

        for _ in range(5):
            phi = reinitialize(phi, square_grid, iterations=20)

        position = front_position(square_grid.x, phi, column=20).position
        assert position == pytest.approx(radius, abs=0.1 * square_grid.dx)

    def test_second_pass_changes_little_near_interface(self, square_grid):
        X, Y = square_grid.meshgrid()
        phi0 = np.sqrt(X**2 + (Y - 1.0) ** 2) - 0.61

        once = reinitialize(phi0, square_grid, iterations=20)
        twice = reinitialize(once, square_grid, iterations=20)

        band = np.abs(once) < 2.0 * square_grid.h_min
        assert np.max(np.abs(twice[band] - once[band])) < 0.1 * square_grid.dx

    def test_input_not_modified(self, small_grid):
        X, _ = small_grid.meshgrid()
        phi0 = 2.0 * (X - 0.05)
        copy = phi0.copy()
        reinitialize(phi0, small_grid, iterations=5)
        np.testing.assert_array_equal(phi0, copy)


class TestGradientDeviation:
    def test_edges_are_nan(self, small_grid, planar_phi):
        deviation = gradient_deviation(planar_phi, small_grid)
        assert np.all(np.isnan(deviation[0, :])) and np.all(np.isnan(deviation[:, -1]))
        np.testing.assert_allclose(deviation[1:-1, 1:-1], 0.0, atol=1e-12)
