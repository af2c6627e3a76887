"""
Interface density from the curvature-modified Stefan boundary condition.

On the moving boundary the density satisfies

    u_I = u_f + γ K

where u_f is the background density, γ the surface-tension coefficient and K
the local mean curvature (positive where the region is convex). Surface
tension therefore raises the density at advanced, convex parts of the front,
which lowers the local flux and slows them down. With γ = 0 the boundary value
is simply u_f.

The value is clamped to [u_f, 1], the physical range of the density, so the
boundary data of the field solve never leave it. The clamp is one-sided in
effect: with γ > 0, concave (K < 0) parts of the front get u_I = u_f exactly,
the same value as with γ = 0, and surface tension only acts on convex crests.
With γ < 0 the roles swap.

The inverse Stefan number κ does not enter the boundary value; it scales the
interface speed (see ``pfs_pde.solvers.interface_speed``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pfs_pde.config.core import PorousFisherStefanConfig
    from pfs_pde.geometry.level_set.interface import InterfaceGeometry

logger = get_logger(__name__)


def interface_density(geometry: InterfaceGeometry, config: PorousFisherStefanConfig) -> NDArray[np.float64]:
    """
    Dirichlet value of the density at each interface point.

    Args:
        geometry: Interface geometry (curvature must already be computed)
        config: Run configuration (background_density, surface_tension)

    Returns:
        Interface density, shape (k,), aligned with ``geometry.points``
    """
    uf = config.background_density
    raw = uf + config.surface_tension * geometry.curvature

    density = np.clip(raw, uf, 1.0)

    n_clamped = int(np.count_nonzero(density != raw))
    if n_clamped:
        logger.debug(f"Interface density clamped to [uf, 1] at {n_clamped}/{raw.size} points")

    return density
