"""
Reinitialisation of the level set to a signed distance function.

Advection by the extended velocity gradually distorts ϕ away from a signed
distance function (SDF). The SDF property |∇ϕ| = 1 keeps normals, curvature
and crossing fractions accurate, so it is restored by marching

    ∂ϕ/∂τ = S(ϕ₀)(1 - |∇ϕ|)

in pseudo-time τ from the advected field ϕ₀. The steady state satisfies
|∇ϕ| = 1 and, in the continuous setting, keeps the zero contour of ϕ₀.

Away from the interface the Hamiltonian S(ϕ₀)|∇ϕ| is discretised with the
Godunov upwind scheme on ENO2 differences and a smoothed sign function.
At interface-adjacent points (a sign change with one of the four stencil
neighbours) the sub-cell fix of Russo & Smereka replaces the upwind update:

    D_P = ϕ₀_P / |∇ϕ₀|_P
    ϕ_P ← ϕ_P - (Δτ/h)(sign(ϕ₀_P)|ϕ_P| - D_P)

which anchors ϕ at these points to their distance estimate from ϕ₀ and
prevents the zero contour from drifting over repeated invocations.

A fixed number of sweeps is performed; there is no convergence check.

References:
- Sussman, Smereka & Osher (1994): A level set approach for computing solutions
  to incompressible two-phase flow
- Russo & Smereka (2000): A remark on computing distance functions
- Osher & Fedkiw (2003): Level Set Methods, Chapter 7.4
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from pfs_pde.operators.upwind import godunov_gradient_norm, smoothed_sign
from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pfs_pde.geometry.grid import RectangularGrid

logger = get_logger(__name__)

_GRADIENT_FLOOR = 1e-12


def interface_adjacent(phi: NDArray[np.float64]) -> NDArray[np.bool_]:
    """Points whose sign differs from at least one of their four neighbours."""
    negative = phi < 0
    adjacent = np.zeros(phi.shape, dtype=bool)

    change_x = negative[1:, :] != negative[:-1, :]
    adjacent[1:, :] |= change_x
    adjacent[:-1, :] |= change_x

    change_y = negative[:, 1:] != negative[:, :-1]
    adjacent[:, 1:] |= change_y
    adjacent[:, :-1] |= change_y
    return adjacent


def _distance_estimate(phi0: NDArray[np.float64], dx: float, dy: float) -> NDArray[np.float64]:
    """
    Signed distance ϕ₀/|∇ϕ₀| with |∇ϕ₀| from the largest of the centred and one-sided differences.

    Array edges use one-sided differences only.
    """

    def largest_slope(axis: int, h: float) -> NDArray[np.float64]:
        v = np.moveaxis(phi0, axis, 0)
        one_sided = np.abs(np.diff(v, axis=0)) / h
        slope = np.zeros_like(v)
        slope[:-1] = one_sided
        slope[1:] = np.maximum(slope[1:], one_sided)
        slope[1:-1] = np.maximum(slope[1:-1], np.abs(v[2:] - v[:-2]) / (2.0 * h))
        return np.moveaxis(slope, 0, axis)

    gradient = np.sqrt(largest_slope(0, dx) ** 2 + largest_slope(1, dy) ** 2)
    return phi0 / np.maximum(gradient, _GRADIENT_FLOOR)


def gradient_deviation(phi: NDArray[np.float64], grid: RectangularGrid) -> NDArray[np.float64]:
    """Pointwise | |∇ϕ| - 1 | with centred differences in the interior, NaN on the edges."""
    deviation = np.full(phi.shape, np.nan)
    phi_x = (phi[2:, 1:-1] - phi[:-2, 1:-1]) / (2.0 * grid.dx)
    phi_y = (phi[1:-1, 2:] - phi[1:-1, :-2]) / (2.0 * grid.dy)
    deviation[1:-1, 1:-1] = np.abs(np.sqrt(phi_x**2 + phi_y**2) - 1.0)
    return deviation


def reinitialize(
    phi_initial: NDArray[np.float64],
    grid: RectangularGrid,
    iterations: int = 20,
    cfl: float = 0.5,
) -> NDArray[np.float64]:
    """
    Restore the signed distance property |∇ϕ| ≈ 1 near the interface.

    Args:
        phi_initial: Level set ϕ₀ after advection, shape (Nx, Ny)
        grid: Spatial grid
        iterations: Pseudo-time sweeps (fixed budget)
        cfl: Pseudo-time step Δτ as a fraction of min(dx, dy)

    Returns:
        Reinitialised level set, same shape as input (input is not modified)

    Examples:
        >>> phi = 2.0 * (X - 0.3)   # correct contour, wrong slope
        >>> phi = reinitialize(phi, grid, iterations=20)
        >>> # |∇ϕ| ≈ 1 near x = 0.3, contour unchanged
    """
    phi0 = np.asarray(phi_initial, dtype=float)
    phi = phi0.copy()
    if iterations == 0:
        return phi

    h = grid.h_min
    dtau = cfl * h

    sign0 = smoothed_sign(phi0, h)
    hard_sign0 = np.sign(phi0)
    near = interface_adjacent(phi0)
    distance0 = _distance_estimate(phi0, grid.dx, grid.dy)

    for _ in range(iterations):
        grad_norm = godunov_gradient_norm(phi, grid.dx, grid.dy, sign0)
        far_update = phi - dtau * sign0 * (grad_norm - 1.0)
        near_update = phi - (dtau / h) * (hard_sign0 * np.abs(phi) - distance0)
        phi = np.where(near, near_update, far_update)

    if logger.isEnabledFor(logging.DEBUG):
        band = np.abs(phi) < 3.0 * h
        deviation = gradient_deviation(phi, grid)[band]
        deviation = deviation[~np.isnan(deviation)]
        if deviation.size:
            logger.debug(
                f"Reinitialisation: {iterations} sweeps, max(||∇ϕ| - 1|) = {deviation.max():.4f} within 3h of interface"
            )

    return phi
