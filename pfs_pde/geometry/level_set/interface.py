"""
Interface geometry at the interface-adjacent grid points.

For every point of dΩ this module computes:

- crossing fractions θ along each stencil direction where the level set
  changes sign, by linear interpolation between the bracketing values:
      θ = ϕ_P / (ϕ_P - ϕ_Q),   θ ∈ [0, 1]
  so the interface lies at distance θ·h from P towards its neighbour Q;
- the unit normal n = ∇ϕ/|∇ϕ| from centred differences, pointing out of Ω;
- the mean curvature
      K = (ϕₓₓϕᵧ² - 2ϕₓϕᵧϕₓᵧ + ϕᵧᵧϕₓ²) / |∇ϕ|³
  positive where Ω is convex (K = 1/R for a disc of radius R).

Where |∇ϕ| is numerically zero the normal and curvature are taken from the
nearest neighbouring point with a valid gradient.

References:
- Osher & Fedkiw (2003): Level Set Methods, Chapter 1.4
- Gibou, Fedkiw, Cheng & Kang (2002): A second-order-accurate symmetric
  discretization of the Poisson equation on irregular domains
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from pfs_pde.geometry.level_set.domain import STENCIL_DIRECTIONS
from pfs_pde.operators.upwind import central_gradient, pad_level_set
from pfs_pde.utils.exceptions import InterfaceGeometryError
from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from pfs_pde.geometry.grid import RectangularGrid
    from pfs_pde.geometry.level_set.domain import DomainClassification

logger = get_logger(__name__)

# |∇ϕ| below this is treated as a degenerate gradient
GRADIENT_EPS = 1e-10

# Neighbour offsets searched for the degenerate-gradient fallback, nearest first
_FALLBACK_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1), (1, 1), (1, -1), (-1, 1), (-1, -1))


@dataclass(frozen=True)
class InterfaceGeometry:
    """
    Geometry of the interface set dΩ, aligned with ``DomainClassification.interface``.

    Attributes:
        points: Interface grid indices (i, j), shape (k, 2)
        theta: Crossing fractions per stencil direction (E, W, N, S), NaN where
            the stencil does not cross the interface, shape (k, 4)
        normal: Outward unit normals (nₓ, nᵧ), shape (k, 2)
        curvature: Mean curvature, shape (k,)
    """

    points: NDArray[np.intp]
    theta: NDArray[np.float64]
    normal: NDArray[np.float64]
    curvature: NDArray[np.float64]

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])

    def min_theta(self) -> NDArray[np.float64]:
        """Smallest crossing fraction of each interface point."""
        return np.nanmin(self.theta, axis=1)

    def to_grid(self, values: NDArray[np.float64], shape: tuple[int, int], fill: float = np.nan) -> NDArray:
        """
        Scatter per-point values onto a full grid array.

        Args:
            values: Values aligned with ``points``, shape (k,) or (k, c)
            shape: Grid shape (Nx, Ny)
            fill: Value for points outside the interface set

        Returns:
            Array of shape (Nx, Ny) or (Nx, Ny, c)
        """
        values = np.asarray(values, dtype=float)
        out = np.full(shape + values.shape[1:], fill, dtype=float)
        out[self.points[:, 0], self.points[:, 1]] = values
        return out


def crossing_fraction(phi_a: ArrayLike, phi_b: ArrayLike) -> NDArray[np.float64]:
    """
    Fraction of the way from a to b at which the linear interpolant of ϕ vanishes.

    Args:
        phi_a: Level-set values at the starting points
        phi_b: Level-set values at the neighbouring points

    Returns:
        θ = ϕ_a / (ϕ_a - ϕ_b) in [0, 1]

    Raises:
        InterfaceGeometryError: If a pair does not straddle zero (both values on
            the same side), which indicates a classification/geometry mismatch

    Example:
        >>> crossing_fraction(-0.25, 0.75)
        array(0.25)
    """
    phi_a, phi_b = np.broadcast_arrays(np.asarray(phi_a, dtype=float), np.asarray(phi_b, dtype=float))

    straddle = ((phi_a < 0) & (phi_b >= 0)) | ((phi_a >= 0) & (phi_b < 0))
    if not np.all(straddle):
        bad = int(np.flatnonzero(~straddle.ravel())[0])
        raise InterfaceGeometryError(
            (float(phi_a.ravel()[bad]), float(phi_b.ravel()[bad])), solver_name="InterfaceGeometry"
        )

    return np.clip(phi_a / (phi_a - phi_b), 0.0, 1.0)


def normal_field(phi: NDArray[np.float64], dx: float, dy: float) -> tuple[NDArray, NDArray, NDArray]:
    """
    Unit normal field n = ∇ϕ/|∇ϕ| on the whole grid.

    Returns:
        (nₓ, nᵧ, valid) where ``valid`` marks points with a non-degenerate
        gradient; nₓ = nᵧ = 0 elsewhere.
    """
    phi_x, phi_y = central_gradient(phi, dx, dy)
    magnitude = np.sqrt(phi_x**2 + phi_y**2)
    valid = magnitude > GRADIENT_EPS

    safe = np.where(valid, magnitude, 1.0)
    n_x = np.where(valid, phi_x / safe, 0.0)
    n_y = np.where(valid, phi_y / safe, 0.0)
    return n_x, n_y, valid


def curvature_field(phi: NDArray[np.float64], dx: float, dy: float) -> tuple[NDArray, NDArray]:
    """
    Mean curvature K = ∇·(∇ϕ/|∇ϕ|) from centred second differences.

    The estimate is clipped to |K| ≤ 1/min(dx, dy), the largest curvature the
    grid can represent.

    Returns:
        (K, valid) where ``valid`` marks points with a non-degenerate gradient;
        K = 0 elsewhere.
    """
    p = pad_level_set(phi, width=1)
    c = p[1:-1, 1:-1]

    phi_x = (p[2:, 1:-1] - p[:-2, 1:-1]) / (2.0 * dx)
    phi_y = (p[1:-1, 2:] - p[1:-1, :-2]) / (2.0 * dy)
    phi_xx = (p[2:, 1:-1] - 2.0 * c + p[:-2, 1:-1]) / dx**2
    phi_yy = (p[1:-1, 2:] - 2.0 * c + p[1:-1, :-2]) / dy**2
    phi_xy = (p[2:, 2:] - p[2:, :-2] - p[:-2, 2:] + p[:-2, :-2]) / (4.0 * dx * dy)

    magnitude = np.sqrt(phi_x**2 + phi_y**2)
    valid = magnitude > GRADIENT_EPS
    safe = np.where(valid, magnitude, 1.0)

    numerator = phi_xx * phi_y**2 - 2.0 * phi_x * phi_y * phi_xy + phi_yy * phi_x**2
    kappa = np.where(valid, numerator / safe**3, 0.0)

    k_max = 1.0 / min(dx, dy)
    return np.clip(kappa, -k_max, k_max), valid


def _nearest_valid(values: NDArray, valid: NDArray[np.bool_], i: int, j: int) -> NDArray | None:
    """Value at the nearest neighbour of (i, j) with a valid gradient, or None."""
    nx, ny = valid.shape
    for di, dj in _FALLBACK_OFFSETS:
        ii, jj = i + di, j + dj
        if 0 <= ii < nx and 0 <= jj < ny and valid[ii, jj]:
            return values[ii, jj]
    return None


def compute_interface_geometry(
    phi: NDArray[np.float64],
    domain: DomainClassification,
    grid: RectangularGrid,
) -> InterfaceGeometry:
    """
    Crossing fractions, normals and curvature at every interface point.

    Args:
        phi: Level-set array, shape (Nx, Ny)
        domain: Classification of the same level-set array
        grid: Grid providing dx, dy

    Returns:
        InterfaceGeometry aligned with ``domain.interface``

    Raises:
        InterfaceGeometryError: If a flagged stencil does not straddle zero
    """
    points = domain.interface
    pi, pj = points[:, 0], points[:, 1]
    k = points.shape[0]

    theta = np.full((k, len(STENCIL_DIRECTIONS)), np.nan)
    for d, (di, dj) in enumerate(STENCIL_DIRECTIONS):
        phi_p = phi[pi, pj]
        phi_q = phi[pi + di, pj + dj]
        crosses = phi_q >= 0
        if np.any(crosses):
            theta[crosses, d] = crossing_fraction(phi_p[crosses], phi_q[crosses])

    if k > 0 and np.any(np.all(np.isnan(theta), axis=1)):
        bad = int(np.flatnonzero(np.all(np.isnan(theta), axis=1))[0])
        i, j = int(pi[bad]), int(pj[bad])
        raise InterfaceGeometryError(
            (float(phi[i, j]), float(phi[i + 1, j])), location=(i, j), solver_name="InterfaceGeometry"
        )

    n_x, n_y, n_valid = normal_field(phi, grid.dx, grid.dy)
    kappa, k_valid = curvature_field(phi, grid.dx, grid.dy)

    normals = np.column_stack([n_x[pi, pj], n_y[pi, pj]])
    curvature = kappa[pi, pj].copy()

    normal_stack = np.stack([n_x, n_y], axis=-1)
    degenerate = np.flatnonzero(~n_valid[pi, pj])
    for row in degenerate:
        i, j = int(pi[row]), int(pj[row])
        fallback = _nearest_valid(normal_stack, n_valid, i, j)
        if fallback is None:
            # Point towards the crossing neighbours, i.e. out of the region
            crossing = ~np.isnan(theta[row])
            direction = np.sum(np.array(STENCIL_DIRECTIONS, dtype=float)[crossing], axis=0)
            norm = np.linalg.norm(direction)
            fallback = direction / norm if norm > 0 else np.array([1.0, 0.0])
        normals[row] = fallback

        k_fallback = _nearest_valid(kappa, k_valid, i, j)
        curvature[row] = k_fallback if k_fallback is not None else 0.0

    if degenerate.size:
        logger.debug(f"Degenerate level-set gradient at {degenerate.size} interface points, used neighbour normals")

    return InterfaceGeometry(points=points, theta=theta, normal=normals, curvature=curvature)
