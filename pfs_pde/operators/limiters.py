"""
Minmod-family flux limiters.

The generalised minmod limiter with parameter θ ∈ [1, 2] selects the limited
slope

    σ_i = minmod(θ (u_i - u_{i-1}), (u_{i+1} - u_{i-1}) / 2, θ (u_{i+1} - u_i))

θ = 1 is the most dissipative (classic minmod), θ = 2 the least (monotonised
central). Reconstructed face values never leave the range of the two adjacent
cell values, which keeps the nonlinear diffusivity D·uᵐ non-negative and
bounded by the data.

References:
- van Leer (1979): Towards the ultimate conservative difference scheme V
- Kurganov & Tadmor (2000): New high-resolution central schemes
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


def minmod(*args: ArrayLike) -> NDArray[np.float64]:
    """
    Elementwise minmod of any number of arguments.

    Returns the argument of smallest magnitude where all arguments share a sign,
    zero otherwise.

    Example:
        >>> minmod(1.0, 2.0, 0.5)
        array(0.5)
        >>> minmod(np.array([1.0, -1.0]), np.array([2.0, 3.0]))
        array([1., 0.])
    """
    stacked = np.stack(np.broadcast_arrays(*[np.asarray(a, dtype=float) for a in args]))
    all_positive = np.all(stacked > 0, axis=0)
    all_negative = np.all(stacked < 0, axis=0)
    smallest = np.min(np.abs(stacked), axis=0)
    return np.where(all_positive, smallest, np.where(all_negative, -smallest, 0.0))


def generalized_minmod(
    u_minus: ArrayLike,
    u_center: ArrayLike,
    u_plus: ArrayLike,
    theta: float = 1.99,
) -> NDArray[np.float64]:
    """
    Limited undivided slope of a three-point stencil.

    Args:
        u_minus: Values at i-1
        u_center: Values at i
        u_plus: Values at i+1
        theta: Limiter parameter in [1, 2]

    Returns:
        Limited slope σ_i (undivided, i.e. per cell)

    Raises:
        ValueError: If theta is outside [1, 2]
    """
    if not 1.0 <= theta <= 2.0:
        raise ValueError(f"theta must be in [1, 2], got {theta}")

    u_minus = np.asarray(u_minus, dtype=float)
    u_center = np.asarray(u_center, dtype=float)
    u_plus = np.asarray(u_plus, dtype=float)

    return minmod(theta * (u_center - u_minus), 0.5 * (u_plus - u_minus), theta * (u_plus - u_center))


def limited_face_values(u: NDArray[np.float64], theta: float = 1.99, axis: int = 0) -> NDArray[np.float64]:
    """
    Reconstruct values at the faces i+1/2 between consecutive points along an axis.

    Each face value is the mean of the limited reconstructions from its two
    neighbouring points. End points use a zero slope.

    Args:
        u: Point values
        theta: Limiter parameter in [1, 2]
        axis: Axis along which faces are taken

    Returns:
        Face values with one fewer entry than u along ``axis``
    """
    v = np.moveaxis(np.asarray(u, dtype=float), axis, 0)

    slope = np.zeros_like(v)
    slope[1:-1] = generalized_minmod(v[:-2], v[1:-1], v[2:], theta)

    from_left = v[:-1] + 0.5 * slope[:-1]
    from_right = v[1:] - 0.5 * slope[1:]

    return np.moveaxis(0.5 * (from_left + from_right), 0, axis)
