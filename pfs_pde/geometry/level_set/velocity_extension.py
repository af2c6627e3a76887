"""
Extension of the interface speed to the whole grid.

The speed known at interface points is propagated along the level-set
normals by marching the transport equation

    ∂V/∂τ + S(ϕ) n·∇V = 0,     S(ϕ) = ϕ / √(ϕ² + h²)

in pseudo-time. Information travels away from the zero contour on both
sides, so at steady state V is constant along normals. The equation is
discretised with first-order upwind differences and Jacobi sweeps (each
sweep reads the previous iterate only).

The march is seeded on both sides of the zero contour and the seeds are held
fixed: interface points carry their own speed, and each outside stencil
neighbour (ϕ ≥ 0) of an interface point carries the mean speed of the
interface points next to it. A node lying exactly on the contour (ϕ = 0,
where S vanishes) is therefore always a seed.

The number of sweeps is a fixed budget: points further from the interface
than the distance covered by the sweeps keep their last iterated value.

References:
- Zhao, Chan, Merriman & Osher (1996): A variational level set approach to multiphase motion
- Peng, Merriman, Osher, Zhao & Kang (1999): A PDE-based fast local level set method
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pfs_pde.geometry.level_set.domain import STENCIL_DIRECTIONS
from pfs_pde.geometry.level_set.interface import normal_field
from pfs_pde.operators.upwind import smoothed_sign
from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pfs_pde.geometry.grid import RectangularGrid

logger = get_logger(__name__)


def _upwind_transport(
    V: NDArray[np.float64], a_x: NDArray[np.float64], a_y: NDArray[np.float64], dx: float, dy: float
) -> NDArray[np.float64]:
    """First-order upwind approximation of a·∇V with zero-gradient edges."""
    p = np.pad(V, 1, mode="edge")
    c = p[1:-1, 1:-1]

    back_x = (c - p[:-2, 1:-1]) / dx
    fwd_x = (p[2:, 1:-1] - c) / dx
    back_y = (c - p[1:-1, :-2]) / dy
    fwd_y = (p[1:-1, 2:] - c) / dy

    return (
        np.maximum(a_x, 0.0) * back_x
        + np.minimum(a_x, 0.0) * fwd_x
        + np.maximum(a_y, 0.0) * back_y
        + np.minimum(a_y, 0.0) * fwd_y
    )


def _mirror_y_edges(V: NDArray[np.float64]) -> None:
    """Copy the rows next to the zero-flux y edges onto the edges, in place."""
    V[:, 0] = V[:, 1]
    V[:, -1] = V[:, -2]


def _outside_seeds(
    phi: NDArray[np.float64], pi: NDArray[np.intp], pj: NDArray[np.intp], speed: NDArray[np.float64]
) -> tuple[NDArray[np.bool_], NDArray[np.float64]]:
    """Mask of the outside neighbours of the interface points and their mean neighbouring speed."""
    total = np.zeros(phi.shape)
    count = np.zeros(phi.shape)
    for di, dj in STENCIL_DIRECTIONS:
        ni, nj = pi + di, pj + dj
        outside = phi[ni, nj] >= 0
        np.add.at(total, (ni[outside], nj[outside]), speed[outside])
        np.add.at(count, (ni[outside], nj[outside]), 1.0)

    seeded = count > 0
    mean = np.zeros(phi.shape)
    mean[seeded] = total[seeded] / count[seeded]
    return seeded, mean


def extend_velocity(
    phi: NDArray[np.float64],
    interface_points: NDArray[np.intp],
    interface_speed: NDArray[np.float64],
    grid: RectangularGrid,
    iterations: int,
    cfl: float = 0.5,
) -> NDArray[np.float64]:
    """
    Extend interface speeds to a velocity field on the whole grid.

    Args:
        phi: Level-set array, shape (Nx, Ny)
        interface_points: Interface indices (i, j), shape (k, 2)
        interface_speed: Speed at each interface point, shape (k,)
        grid: Spatial grid
        iterations: Number of pseudo-time sweeps (fixed, no convergence check)
        cfl: Pseudo-time step as a fraction of min(dx, dy)

    Returns:
        Velocity field V, shape (Nx, Ny). Equal to ``interface_speed`` at the
        interface points, to the mean speed of the adjacent interface points
        on their outside neighbours, and mirrored onto the y edges; zero where
        the sweeps have not reached.
    """
    V = np.zeros(grid.shape)
    pi, pj = interface_points[:, 0], interface_points[:, 1]

    fixed, V_seed = _outside_seeds(phi, pi, pj, interface_speed)
    V[fixed] = V_seed[fixed]
    V[pi, pj] = interface_speed
    fixed[pi, pj] = True
    _mirror_y_edges(V)

    if iterations == 0 or pi.size == 0:
        return V

    h = grid.h_min
    dtau = cfl * h

    n_x, n_y, _ = normal_field(phi, grid.dx, grid.dy)
    sign = smoothed_sign(phi, h)
    a_x = sign * n_x
    a_y = sign * n_y

    change = 0.0
    for _ in range(iterations):
        V_new = V - dtau * _upwind_transport(V, a_x, a_y, grid.dx, grid.dy)
        V_new[fixed] = V[fixed]
        _mirror_y_edges(V_new)
        change = float(np.max(np.abs(V_new - V)))
        V = V_new

    logger.debug(f"Velocity extension: {iterations} sweeps, last change {change:.3e}")
    return V
