"""
Rectangular grid for the Porous-Fisher-Stefan problem.

The computational domain is (-Lx, Lx) × (0, Ly) sampled at Nx × Ny uniformly
spaced points. Arrays over the grid use matrix ("ij") indexing: the first axis
is x, the second is y, so ``U[i, j]`` is the value at ``(x[i], y[j])``.

Boundary treatment shared by all components:
    x = -Lx : Dirichlet, far-field density 1
    x = +Lx : Dirichlet, background density uf
    y = 0, Ly : zero flux (mirror symmetry)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pfs_pde.config.core import PorousFisherStefanConfig


class RectangularGrid:
    """
    Fixed uniform 2D grid and time levels, shared read-only by all components.

    Attributes:
        x: x-coordinates, shape (Nx,), strictly increasing
        y: y-coordinates, shape (Ny,), strictly increasing
        t: time levels, shape (Nt,)
        dx, dy, dt: Uniform spacings

    Example:
        >>> grid = RectangularGrid(x=np.linspace(-5, 5, 101), y=np.linspace(0, 1, 11))
        >>> X, Y = grid.meshgrid()
        >>> X.shape
        (101, 11)
    """

    def __init__(
        self,
        x: NDArray[np.float64],
        y: NDArray[np.float64],
        t: NDArray[np.float64] | None = None,
        rtol: float = 1e-8,
    ):
        """
        Initialize grid from coordinate arrays.

        Args:
            x: x-coordinates (uniform, strictly increasing)
            y: y-coordinates (uniform, strictly increasing)
            t: Optional time levels (uniform, strictly increasing)
            rtol: Relative tolerance for the uniform-spacing check

        Raises:
            ValueError: If coordinates are too short, not increasing or not uniform
        """
        self.x = np.asarray(x, dtype=float)
        self.y = np.asarray(y, dtype=float)
        self.t = np.asarray(t, dtype=float) if t is not None else None

        self.dx = self._validate_axis(self.x, "x", rtol, min_points=3)
        self.dy = self._validate_axis(self.y, "y", rtol, min_points=3)
        self.dt = self._validate_axis(self.t, "t", rtol, min_points=2) if self.t is not None else None

    @classmethod
    def from_config(cls, config: PorousFisherStefanConfig) -> RectangularGrid:
        """Build the grid (-Lx, Lx) × (0, Ly) and time levels [0, T] from a configuration."""
        x = np.linspace(-config.Lx, config.Lx, config.Nx)
        y = np.linspace(0.0, config.Ly, config.Ny)
        t = np.linspace(0.0, config.T, config.Nt)
        return cls(x, y, t)

    @staticmethod
    def _validate_axis(coords: NDArray[np.float64], name: str, rtol: float, min_points: int) -> float:
        """Check monotonicity and uniform spacing; return the spacing."""
        if coords.ndim != 1 or coords.size < min_points:
            raise ValueError(f"{name} must be a 1D array with at least {min_points} points, got shape {coords.shape}")

        steps = np.diff(coords)
        if np.any(steps <= 0):
            raise ValueError(f"{name} coordinates must be strictly increasing")

        spacing = float(steps.mean())
        if not np.allclose(steps, spacing, rtol=rtol, atol=0.0):
            raise ValueError(
                f"{name} spacing must be uniform, got range [{steps.min():.6e}, {steps.max():.6e}]"
            )
        return spacing

    @property
    def shape(self) -> tuple[int, int]:
        """Field shape (Nx, Ny)."""
        return (self.x.size, self.y.size)

    @property
    def h_min(self) -> float:
        """Smallest spatial spacing."""
        return min(self.dx, self.dy)

    def meshgrid(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Coordinate matrices (X, Y) with matrix indexing."""
        return np.meshgrid(self.x, self.y, indexing="ij")

    def __repr__(self) -> str:
        nx, ny = self.shape
        return (
            f"RectangularGrid(\n"
            f"  x=[{self.x[0]:.3f}, {self.x[-1]:.3f}], Nx={nx}, dx={self.dx:.4e},\n"
            f"  y=[{self.y[0]:.3f}, {self.y[-1]:.3f}], Ny={ny}, dy={self.dy:.4e},\n"
            f"  dt={self.dt}\n"
            f")"
        )
