"""
Unit tests for the Stefan interface speed.
"""

import numpy as np

from pfs_pde.geometry.level_set import classify, compute_interface_geometry
from pfs_pde.solvers import interface_speed


def _linear_Phi_density(x_grid, x_front, Phi_I, slope, towards_positive=True):
    """Density whose transformed field Φ = u² is linear in x inside the region."""
    distance = (x_front - x_grid) if towards_positive else (x_grid - x_front)
    Phi = Phi_I + slope * np.maximum(distance, 0.0)
    return np.sqrt(Phi)


class TestInterfaceSpeed:
    """Test V = -κD/(m+1) ∇Φ·n at interface points."""

    def test_planar_front_moving_right(self, small_config, small_grid, planar_phi):
        domain = classify(planar_phi)
        geometry = compute_interface_geometry(planar_phi, domain, small_grid)
        uf = small_config.background_density
        u_I = np.full(geometry.n_points, uf)

        X, _ = small_grid.meshgrid()
        density = _linear_Phi_density(X, 0.05, uf**2, slope=0.1)

        speed = interface_speed(density, geometry, u_I, small_grid, small_config)

        expected = small_config.inverse_stefan * small_config.diffusion_coefficient / 2.0 * 0.1
        assert speed.shape == (geometry.n_points,)
        np.testing.assert_allclose(speed, expected, rtol=1e-10)

    def test_planar_front_facing_left(self, small_config, small_grid, planar_phi):
        """The region {x > 0.05} grows to the left with the same speed."""
        phi = -planar_phi
        domain = classify(phi)
        geometry = compute_interface_geometry(phi, domain, small_grid)
        np.testing.assert_array_equal(geometry.points[:, 0], 51)
        uf = small_config.background_density
        u_I = np.full(geometry.n_points, uf)

        X, _ = small_grid.meshgrid()
        density = _linear_Phi_density(X, 0.05, uf**2, slope=0.1, towards_positive=False)

        speed = interface_speed(density, geometry, u_I, small_grid, small_config)

        expected = small_config.inverse_stefan * small_config.diffusion_coefficient / 2.0 * 0.1
        np.testing.assert_allclose(speed, expected, rtol=1e-10)

    def test_crossing_below_threshold_skips_point(self, small_config, small_grid):
        """With θ < θb the difference spans from the previous point to the interface."""
        X, _ = small_grid.meshgrid()
        phi = X - 0.0005
        domain = classify(phi)
        geometry = compute_interface_geometry(phi, domain, small_grid)
        assert np.all(geometry.min_theta() < small_config.interface_threshold)

        uf = small_config.background_density
        u_I = np.full(geometry.n_points, uf)
        density = _linear_Phi_density(X, 0.0005, uf**2, slope=0.2)

        speed = interface_speed(density, geometry, u_I, small_grid, small_config)

        expected = small_config.inverse_stefan * small_config.diffusion_coefficient / 2.0 * 0.2
        np.testing.assert_allclose(speed, expected, rtol=1e-8)

    def test_zero_inverse_stefan_number(self, config_factory, small_grid, planar_phi):
        config = config_factory(inverse_stefan=0.0)
        domain = classify(planar_phi)
        geometry = compute_interface_geometry(planar_phi, domain, small_grid)
        density = np.linspace(1.0, 0.0, small_grid.shape[0])[:, None] * np.ones(small_grid.shape)

        speed = interface_speed(density, geometry, np.full(geometry.n_points, 0.01), small_grid, config)
        np.testing.assert_array_equal(speed, 0.0)

    def test_density_rising_towards_front_recedes(self, small_config, small_grid, planar_phi):
        domain = classify(planar_phi)
        geometry = compute_interface_geometry(planar_phi, domain, small_grid)
        X, _ = small_grid.meshgrid()
        density = np.clip(0.5 + 0.1 * X, 0.0, 1.0)

        speed = interface_speed(density, geometry, np.full(geometry.n_points, 0.9), small_grid, small_config)
        assert np.all(speed < 0)

    def test_no_interface_points(self, small_config, small_grid):
        phi = np.ones(small_grid.shape)
        domain = classify(phi)
        geometry = compute_interface_geometry(phi, domain, small_grid)

        speed = interface_speed(np.ones(small_grid.shape), geometry, np.zeros(0), small_grid, small_config)
        assert speed.shape == (0,)
