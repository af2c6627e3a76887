"""
Front diagnostics: position and perturbation amplitude.

For each column j of the level-set array, every crossing from ϕ[i, j] < 0 to
ϕ[i+1, j] ≥ 0 locates the front at

    L_j = x_i + θ dx,     θ = ϕ[i, j] / (ϕ[i, j] - ϕ[i+1, j])

The front position is L_j at the slice column (its last crossing in x); the
perturbation amplitude is half the spread (max L_j - min L_j) / 2 over all
columns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class FrontDiagnostics(NamedTuple):
    """Front position at the slice column and perturbation amplitude."""

    position: float
    amplitude: float


def column_front_positions(x: NDArray[np.float64], phi: NDArray[np.float64]) -> list[NDArray[np.float64]]:
    """
    Interface positions along x in every column.

    Args:
        x: x-coordinates, shape (Nx,)
        phi: Level-set array, shape (Nx, Ny)

    Returns:
        One array per column with the x-locations of its crossings, in increasing x
    """
    dx = x[1] - x[0]
    left, right = phi[:-1, :], phi[1:, :]
    crossing = (left < 0) & (right >= 0)

    positions = []
    for j in range(phi.shape[1]):
        i = np.flatnonzero(crossing[:, j])
        theta = left[i, j] / (left[i, j] - right[i, j])
        positions.append(x[i] + theta * dx)
    return positions


def front_position(x: NDArray[np.float64], phi: NDArray[np.float64], column: int) -> FrontDiagnostics:
    """
    Front position at ``column`` and amplitude of the front across all columns.

    Args:
        x: x-coordinates, shape (Nx,)
        phi: Level-set array, shape (Nx, Ny)
        column: Column index of the slice

    Returns:
        FrontDiagnostics; position is NaN if the slice column has no crossing,
        amplitude is 0 if no column has one

    Example:
        >>> phi = X - 0.25          # planar front
        >>> front_position(x, phi, column=5)
        FrontDiagnostics(position=0.25, amplitude=0.0)
    """
    positions = column_front_positions(x, phi)

    at_slice = positions[column]
    position = float(at_slice[-1]) if at_slice.size else float("nan")

    found = [p for p in positions if p.size]
    if not found:
        return FrontDiagnostics(position=position, amplitude=0.0)

    all_positions = np.concatenate(found)
    amplitude = 0.5 * float(all_positions.max() - all_positions.min())
    return FrontDiagnostics(position=position, amplitude=amplitude)
