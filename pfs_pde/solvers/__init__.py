"""Field and interface solvers of the Porous-Fisher-Stefan model."""

from pfs_pde.solvers.interface_density import interface_density
from pfs_pde.solvers.interface_speed import interface_speed
from pfs_pde.solvers.porous_fisher import (
    FieldStepResult,
    PorousFisherSolver,
    apply_boundary_values,
    transformed_density,
)

__all__ = [
    "FieldStepResult",
    "PorousFisherSolver",
    "apply_boundary_values",
    "interface_density",
    "interface_speed",
    "transformed_density",
]
