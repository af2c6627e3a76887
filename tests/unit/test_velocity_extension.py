"""
Unit tests for velocity extension off the interface.
"""

import pytest

import numpy as np

from pfs_pde.geometry.level_set import classify, extend_velocity


@pytest.fixture
def planar_interface(planar_phi):
    return classify(planar_phi).interface


class TestExtendVelocity:
    """Test propagation of interface speeds along normals."""

    def test_interface_values_fixed(self, small_grid, planar_phi, planar_interface):
        speeds = np.linspace(0.1, 0.2, planar_interface.shape[0])
        V = extend_velocity(planar_phi, planar_interface, speeds, small_grid, iterations=30)
        np.testing.assert_array_equal(V[planar_interface[:, 0], planar_interface[:, 1]], speeds)

    def test_constant_speed_spreads_to_both_sides(self, small_grid, planar_phi, planar_interface):
        speeds = np.full(planar_interface.shape[0], 0.3)
        V = extend_velocity(planar_phi, planar_interface, speeds, small_grid, iterations=20)

        np.testing.assert_allclose(V[49, 1:-1], 0.3, rtol=1e-2)
        np.testing.assert_allclose(V[51, 1:-1], 0.3, rtol=1e-2)
        # Constant along the normal direction means uniform in y for a planar front
        np.testing.assert_allclose(V[45, :], V[45, 5], atol=1e-12)

    def test_zero_iterations_keeps_seeds_only(self, small_grid, planar_phi, planar_interface):
        speeds = np.full(planar_interface.shape[0], 0.3)
        V = extend_velocity(planar_phi, planar_interface, speeds, small_grid, iterations=0)

        # Interface row and its outside neighbour row
        np.testing.assert_array_equal(V[50, :], 0.3)
        np.testing.assert_array_equal(V[51, :], 0.3)
        assert np.count_nonzero(V) == 2 * small_grid.shape[1]

    def test_outside_seed_takes_mean_of_neighbouring_speeds(self, small_grid):
        X, _ = small_grid.meshgrid()
        # Notch: the outside point (50, 5) touches interface points at (49, 5), (50, 4) and (50, 6)
        phi = X - 0.05
        phi[50, 5] = 0.02
        interface = classify(phi).interface
        neighbour_speeds = {(49, 5): 0.3, (50, 4): 0.6, (50, 6): 0.9}
        speeds = np.array([neighbour_speeds.get((int(i), int(j)), 0.0) for i, j in interface])

        V = extend_velocity(phi, interface, speeds, small_grid, iterations=0)

        assert V[50, 5] == pytest.approx(0.6)

    def test_information_travels_one_cell_per_sweep(self, small_grid, planar_phi, planar_interface):
        speeds = np.full(planar_interface.shape[0], 0.3)
        V = extend_velocity(planar_phi, planar_interface, speeds, small_grid, iterations=1)

        assert np.all(V[49, 1:-1] > 0)
        np.testing.assert_array_equal(V[51, :], 0.3)
        assert np.all(V[52, 1:-1] > 0)
        np.testing.assert_array_equal(V[:48, :], 0.0)
        np.testing.assert_array_equal(V[53:, :], 0.0)

    def test_y_edges_mirror_adjacent_rows(self, small_grid, planar_phi, planar_interface):
        speeds = np.linspace(0.1, 0.2, planar_interface.shape[0])
        V = extend_velocity(planar_phi, planar_interface, speeds, small_grid, iterations=10)

        np.testing.assert_array_equal(V[:, 0], V[:, 1])
        np.testing.assert_array_equal(V[:, -1], V[:, -2])

    def test_no_interface(self, small_grid):
        phi = np.ones(small_grid.shape)
        V = extend_velocity(phi, np.zeros((0, 2), dtype=int), np.zeros(0), small_grid, iterations=10)
        np.testing.assert_array_equal(V, 0.0)

    def test_contour_on_grid_node_spreads_outwards(self, small_grid):
        X, _ = small_grid.meshgrid()
        phi = X - X[50, 0]
        interface = classify(phi).interface
        assert np.all(interface[:, 0] == 49)

        speeds = np.full(interface.shape[0], 0.4)
        V = extend_velocity(phi, interface, speeds, small_grid, iterations=20)

        # The node on the contour carries the speed, and so does the ϕ > 0 side
        np.testing.assert_array_equal(V[50, :], 0.4)
        np.testing.assert_allclose(V[51, :], 0.4, rtol=1e-2)
        assert np.all(V[51:56, :] > 0.3)
