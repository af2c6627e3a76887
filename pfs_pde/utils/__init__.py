"""Utility modules: exceptions, logging, progress reporting."""

from pfs_pde.utils.exceptions import (
    ConvergenceWarning,
    DimensionMismatchError,
    InterfaceGeometryError,
    NumericalInstabilityError,
    PFSError,
    check_density_bounds,
    validate_array_dimensions,
)
from pfs_pde.utils.pfs_logging import configure_logging, get_logger
from pfs_pde.utils.progress import SolverTimer, StepProgress

__all__ = [
    "ConvergenceWarning",
    "DimensionMismatchError",
    "InterfaceGeometryError",
    "NumericalInstabilityError",
    "PFSError",
    "SolverTimer",
    "StepProgress",
    "check_density_bounds",
    "configure_logging",
    "get_logger",
    "validate_array_dimensions",
]
