"""
Normal speed of the moving boundary from the Stefan condition.

    V = -κ D/(m+1) ∇Φ·n,     Φ = u^{m+1}

evaluated at every interface point, with n the outward unit normal. The
gradient of Φ is differenced towards the interface where the stencil arm
crosses it, using the interface value Φ_I = u_I^{m+1} at distance θh:

    ∂Φ/∂x ≈ (Φ_I - Φ_P) / (θ h)                  (crossing to the east)
    ∂Φ/∂x ≈ (Φ_I - Φ_W) / ((1 + θ) h)            (θ < θb, skip P)

and by centred differences along arms that stay inside the region.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pfs_pde.solvers.porous_fisher import transformed_density
from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pfs_pde.config.core import PorousFisherStefanConfig
    from pfs_pde.geometry.grid import RectangularGrid
    from pfs_pde.geometry.level_set.interface import InterfaceGeometry

logger = get_logger(__name__)


def _axis_derivative(
    Phi: NDArray[np.float64],
    Phi_I: NDArray[np.float64],
    pi: NDArray[np.intp],
    pj: NDArray[np.intp],
    theta_plus: NDArray[np.float64],
    theta_minus: NDArray[np.float64],
    normal_component: NDArray[np.float64],
    h: float,
    step: tuple[int, int],
    threshold: float,
) -> NDArray[np.float64]:
    """Derivative of Φ along one axis at the interface points."""
    di, dj = step
    Phi_P = Phi[pi, pj]
    Phi_plus = Phi[pi + di, pj + dj]
    Phi_minus = Phi[pi - di, pj - dj]

    cross_plus = ~np.isnan(theta_plus)
    cross_minus = ~np.isnan(theta_minus)
    t_plus = np.nan_to_num(theta_plus, nan=1.0)
    t_minus = np.nan_to_num(theta_minus, nan=1.0)

    # Towards a crossing on the positive side
    plus = np.where(
        t_plus < threshold,
        (Phi_I - Phi_minus) / ((1.0 + t_plus) * h),
        (Phi_I - Phi_P) / (np.maximum(t_plus, threshold) * h),
    )
    # Towards a crossing on the negative side
    minus = np.where(
        t_minus < threshold,
        (Phi_plus - Phi_I) / ((1.0 + t_minus) * h),
        (Phi_P - Phi_I) / (np.maximum(t_minus, threshold) * h),
    )
    central = (Phi_plus - Phi_minus) / (2.0 * h)

    # Both arms cross: difference towards the side the normal points to
    use_plus = cross_plus & (~cross_minus | (normal_component >= 0))
    use_minus = cross_minus & ~use_plus

    return np.where(use_plus, plus, np.where(use_minus, minus, central))


def interface_speed(
    density: NDArray[np.float64],
    geometry: InterfaceGeometry,
    u_interface: NDArray[np.float64],
    grid: RectangularGrid,
    config: PorousFisherStefanConfig,
) -> NDArray[np.float64]:
    """
    Stefan normal speed at each interface point.

    Args:
        density: Density u after the field step, shape (Nx, Ny)
        geometry: Interface geometry of the current step
        u_interface: Interface density per interface point, shape (k,)
        grid: Spatial grid
        config: Run configuration (κ, D, m, θb)

    Returns:
        Normal speed, shape (k,); positive values move the front outwards
        (the region grows)
    """
    if geometry.n_points == 0:
        return np.zeros(0)

    m = config.diffusion_exponent
    Phi = transformed_density(density, m)
    Phi_I = transformed_density(u_interface, m)

    pi, pj = geometry.points[:, 0], geometry.points[:, 1]
    theta = geometry.theta
    threshold = config.interface_threshold

    Phi_x = _axis_derivative(Phi, Phi_I, pi, pj, theta[:, 0], theta[:, 1], geometry.normal[:, 0], grid.dx, (1, 0), threshold)
    Phi_y = _axis_derivative(Phi, Phi_I, pi, pj, theta[:, 2], theta[:, 3], geometry.normal[:, 1], grid.dy, (0, 1), threshold)

    normal_flux = Phi_x * geometry.normal[:, 0] + Phi_y * geometry.normal[:, 1]
    speed = -config.inverse_stefan * config.diffusion_coefficient / (m + 1.0) * normal_flux

    logger.debug(f"Interface speed: min {speed.min():.4e}, max {speed.max():.4e} over {speed.size} points")
    return speed
