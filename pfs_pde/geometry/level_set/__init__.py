"""
Level-set representation of the moving boundary.

The region Ω(t) = {ϕ(·, t) < 0} is carried by a level-set array on the fixed
grid. Each time step the engine:

1. classifies interior and interface points from the sign pattern (domain),
2. computes crossing fractions, normals and curvature (interface),
3. extends the interface speed off the contour (velocity_extension),
4. advects ϕ with the extended speed (advection),
5. restores the signed distance property (reinitialization).

Example:
    >>> from pfs_pde.geometry.level_set import classify, compute_interface_geometry
    >>> domain = classify(phi)
    >>> geometry = compute_interface_geometry(phi, domain, grid)
"""

from pfs_pde.geometry.level_set.advection import advect_level_set, advection_cfl
from pfs_pde.geometry.level_set.domain import (
    STENCIL_DIRECTIONS,
    DomainClassification,
    classify,
    find_domain,
    find_interface,
)
from pfs_pde.geometry.level_set.interface import (
    InterfaceGeometry,
    compute_interface_geometry,
    crossing_fraction,
    curvature_field,
    normal_field,
)
from pfs_pde.geometry.level_set.reinitialization import gradient_deviation, interface_adjacent, reinitialize
from pfs_pde.geometry.level_set.velocity_extension import extend_velocity

__all__ = [
    "STENCIL_DIRECTIONS",
    "DomainClassification",
    "InterfaceGeometry",
    "advect_level_set",
    "advection_cfl",
    "classify",
    "compute_interface_geometry",
    "crossing_fraction",
    "curvature_field",
    "extend_velocity",
    "find_domain",
    "find_interface",
    "gradient_deviation",
    "interface_adjacent",
    "normal_field",
    "reinitialize",
]
