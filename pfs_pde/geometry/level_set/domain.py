"""
Domain classification from the level-set sign pattern.

Each time step the evolving region Ω = {ϕ < 0} is re-derived from the
level-set array:

- interior set D: grid points with ϕ < 0 that are not on the physical
  domain boundary, ordered row-major (by x index, then y index). Its order
  fixes the unknown numbering of the reduced linear system.
- interface set dΩ: points of D with at least one stencil neighbour
  (east, west, north, south) where ϕ ≥ 0. These are the irregular points
  whose finite-difference stencils cross the moving boundary.

Boundary points are excluded from D and carry fixed Dirichlet (x edges) or
mirrored zero-flux (y edges) values instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = get_logger(__name__)

# Stencil directions (di, dj): east, west, north, south
STENCIL_DIRECTIONS: tuple[tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass(frozen=True)
class DomainClassification:
    """
    Interior and interface index sets for one time step.

    Attributes:
        interior: Interior grid indices (i, j), shape (n, 2), row-major order
        interface: Interface-adjacent indices (i, j), shape (k, 2), subset of interior
        interior_mask: Boolean mask of the interior set, shape (Nx, Ny)
        interface_mask: Boolean mask of the interface set, shape (Nx, Ny)
        index_map: Position of each grid point in ``interior``, -1 outside, shape (Nx, Ny)
    """

    interior: NDArray[np.intp]
    interface: NDArray[np.intp]
    interior_mask: NDArray[np.bool_]
    interface_mask: NDArray[np.bool_]
    index_map: NDArray[np.intp]

    @property
    def n_interior(self) -> int:
        return int(self.interior.shape[0])

    @property
    def n_interface(self) -> int:
        return int(self.interface.shape[0])

    @property
    def is_exhausted(self) -> bool:
        """True when the front has left or filled the domain (no interior or no interface)."""
        return self.n_interior == 0 or self.n_interface == 0

    def interface_rows(self) -> NDArray[np.intp]:
        """Positions of the interface points within the interior ordering."""
        return self.index_map[self.interface[:, 0], self.interface[:, 1]]


def find_domain(phi: NDArray[np.float64]) -> NDArray[np.bool_]:
    """
    Interior mask: ϕ < 0 away from the physical boundary.

    Args:
        phi: Level-set array, shape (Nx, Ny), fully populated

    Returns:
        Boolean mask, shape (Nx, Ny)

    Raises:
        ValueError: If phi is not 2D or contains non-finite values
    """
    if phi.ndim != 2:
        raise ValueError(f"Level set must be 2D, got shape {phi.shape}")
    if not np.all(np.isfinite(phi)):
        raise ValueError("Level set contains non-finite values")

    mask = phi < 0
    mask[0, :] = False
    mask[-1, :] = False
    mask[:, 0] = False
    mask[:, -1] = False
    return mask


def find_interface(phi: NDArray[np.float64], interior_mask: NDArray[np.bool_]) -> NDArray[np.bool_]:
    """
    Interface mask: interior points with a stencil neighbour where ϕ ≥ 0.

    Interior points never touch the array edge, so every neighbour exists.
    """
    outside = phi >= 0
    crosses = np.zeros_like(interior_mask)
    crosses[1:-1, 1:-1] = (
        outside[2:, 1:-1] | outside[:-2, 1:-1] | outside[1:-1, 2:] | outside[1:-1, :-2]
    )
    return interior_mask & crosses


def classify(phi: NDArray[np.float64]) -> DomainClassification:
    """
    Partition the grid into interior and interface sets.

    Pure function of the level-set array: classifying an unchanged array
    again yields identical sets.

    Args:
        phi: Level-set array, shape (Nx, Ny); negative inside the region

    Returns:
        DomainClassification for the current sign pattern

    Example:
        >>> phi = X - 0.3  # planar front at x = 0.3
        >>> domain = classify(phi)
        >>> domain.n_interface == phi.shape[1] - 2  # one interface point per inner column
        True
    """
    interior_mask = find_domain(phi)
    interface_mask = find_interface(phi, interior_mask)

    interior = np.argwhere(interior_mask)
    interface = np.argwhere(interface_mask)

    index_map = np.full(phi.shape, -1, dtype=np.intp)
    index_map[interior_mask] = np.arange(interior.shape[0], dtype=np.intp)

    if interior.shape[0] == 0 or interface.shape[0] == 0:
        logger.debug(f"Domain classification exhausted: {interior.shape[0]} interior, {interface.shape[0]} interface")

    return DomainClassification(
        interior=interior,
        interface=interface,
        interior_mask=interior_mask,
        interface_mask=interface_mask,
        index_map=index_map,
    )
