"""
Initial density and level set.

The initial interface is the perturbed line

    x = β + ε cos(q y)

represented by the level set ϕ(x, y, 0) = x - β - ε cos(q y), negative in
the occupied region to its left. Two density profiles are provided:

- a step: u = 1 inside Ω(0), u = u_f outside;
- a travelling wave: u(x, y) = ũ(ϕ(x, y)) inside Ω(0) for a one-dimensional
  travelling-wave profile ũ(ξ) supplied on a grid of ξ ≤ 0 (ξ = 0 at the
  front), interpolated with a cubic spline.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from scipy.interpolate import InterpolatedUnivariateSpline

from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from pfs_pde.config.core import PorousFisherStefanConfig
    from pfs_pde.geometry.grid import RectangularGrid

logger = get_logger(__name__)


def initial_level_set(grid: RectangularGrid, config: PorousFisherStefanConfig) -> NDArray[np.float64]:
    """ϕ(x, y, 0) = x - β - ε cos(q y), shape (Nx, Ny)."""
    X, Y = grid.meshgrid()
    return X - config.interface_offset - config.perturbation_amplitude * np.cos(config.perturbation_wavenumber * Y)


def step_initial_condition(
    grid: RectangularGrid, config: PorousFisherStefanConfig
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Step density: fully occupied inside the initial region, background outside.

    Returns:
        (density, phi), each shape (Nx, Ny)
    """
    phi = initial_level_set(grid, config)
    density = np.where(phi < 0, 1.0, config.background_density)
    return density, phi


def travelling_wave_initial_condition(
    grid: RectangularGrid,
    config: PorousFisherStefanConfig,
    xi: ArrayLike,
    profile: ArrayLike,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Density from a one-dimensional travelling-wave profile evaluated at ξ = ϕ.

    Args:
        grid: Spatial grid
        config: Run configuration (β, ε, q, uf)
        xi: Travelling-wave coordinate, strictly increasing, front at ξ = 0
        profile: Density of the travelling wave at ``xi``

    Returns:
        (density, phi), each shape (Nx, Ny). Outside the profile's range the
        end values are held; densities are clipped to [uf, 1].

    Raises:
        ValueError: If xi and profile differ in length, have fewer than two
            points, or xi is not strictly increasing
    """
    xi = np.asarray(xi, dtype=float)
    profile = np.asarray(profile, dtype=float)

    if xi.ndim != 1 or xi.shape != profile.shape:
        raise ValueError(f"xi and profile must be 1D arrays of equal length, got {xi.shape} and {profile.shape}")
    if xi.size < 2:
        raise ValueError("Travelling-wave profile needs at least two points")
    if np.any(np.diff(xi) <= 0):
        raise ValueError("xi must be strictly increasing")

    degree = min(3, xi.size - 1)
    spline = InterpolatedUnivariateSpline(xi, profile, k=degree, ext="const")

    phi = initial_level_set(grid, config)
    inside = phi < 0

    uf = config.background_density
    density = np.full(grid.shape, uf)
    density[inside] = np.clip(spline(phi[inside]), uf, 1.0)

    logger.debug(f"Travelling-wave initial condition: {xi.size} profile points, spline degree {degree}")
    return density, phi


def load_travelling_wave_profile(path: str | Path) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Read a two-column (ξ, u) travelling-wave profile from a CSV file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not hold two columns
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Travelling-wave profile not found: {path}")

    data = np.loadtxt(path, delimiter=",", ndmin=2)
    if data.shape[1] != 2:
        raise ValueError(f"Expected two columns (xi, u) in {path}, got {data.shape[1]}")
    return data[:, 0], data[:, 1]
