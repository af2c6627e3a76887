"""
Unit tests for the curvature-modified interface density.
"""

import numpy as np

from pfs_pde.geometry.level_set import InterfaceGeometry
from pfs_pde.solvers import interface_density


def _geometry(curvature):
    curvature = np.asarray(curvature, dtype=float)
    k = curvature.size
    return InterfaceGeometry(
        points=np.column_stack([np.full(k, 5), np.arange(1, k + 1)]),
        theta=np.full((k, 4), np.nan),
        normal=np.tile([1.0, 0.0], (k, 1)),
        curvature=curvature,
    )


class TestInterfaceDensity:
    """Test u_I = uf + γK with clamping to [uf, 1]."""

    def test_zero_surface_tension_gives_background(self, config_factory):
        config = config_factory(surface_tension=0.0, background_density=1e-3)
        density = interface_density(_geometry([-2.0, 0.0, 3.0]), config)
        np.testing.assert_array_equal(density, 1e-3)

    def test_convex_front_raises_density(self, config_factory):
        config = config_factory(surface_tension=0.05, background_density=1e-3)
        density = interface_density(_geometry([0.0, 1.0, 2.0]), config)
        np.testing.assert_allclose(density, [1e-3, 1e-3 + 0.05, 1e-3 + 0.1])

    def test_concave_front_clamped_to_background(self, config_factory):
        config = config_factory(surface_tension=0.05, background_density=1e-3)
        density = interface_density(_geometry([-1.0, -10.0]), config)
        np.testing.assert_array_equal(density, 1e-3)

    def test_surface_tension_only_acts_on_convex_points(self, config_factory):
        curvature = [-4.0, -0.5, 0.0, 0.5, 4.0]
        with_tension = interface_density(_geometry(curvature), config_factory(surface_tension=0.05))
        without = interface_density(_geometry(curvature), config_factory(surface_tension=0.0))

        np.testing.assert_array_equal(with_tension[:3], without[:3])
        assert np.all(with_tension[3:] > without[3:])

    def test_negative_surface_tension_acts_on_concave_points(self, config_factory):
        config = config_factory(surface_tension=-0.05, background_density=1e-3)
        density = interface_density(_geometry([-2.0, 2.0]), config)
        np.testing.assert_allclose(density, [1e-3 + 0.1, 1e-3])

    def test_clamped_to_one(self, config_factory):
        config = config_factory(surface_tension=1.0)
        density = interface_density(_geometry([5.0]), config)
        np.testing.assert_array_equal(density, 1.0)

    def test_inverse_stefan_number_does_not_enter(self, config_factory):
        geometry = _geometry([0.5, 1.5])
        a = interface_density(geometry, config_factory(surface_tension=0.1, inverse_stefan=0.1))
        b = interface_density(geometry, config_factory(surface_tension=0.1, inverse_stefan=2.0))
        np.testing.assert_array_equal(a, b)
