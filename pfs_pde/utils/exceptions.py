"""
Exception classes for pfs_pde with helpful error messages and user guidance.

Error kinds raised by the free-boundary engine:
- InterfaceGeometryError: degenerate interface stencil (internal invariant violation, fatal)
- NumericalInstabilityError: field left its physical bound or became non-finite (fatal)
- DimensionMismatchError: supplied arrays do not match the grid
- ConvergenceWarning: an iterative solve stopped at its iteration budget (non-fatal)

Domain exhaustion (front has left or filled the domain) is a clean stop and
is reported through ``StopReason`` rather than an exception.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from pfs_pde.simulation.state import SimulationResult


class PFSError(Exception):
    """
    Base exception for pfs_pde errors with helpful context and suggestions.

    This exception class provides structured error information including:
    - Clear error description
    - Solver context information
    - Suggested actions for resolution
    - Optional diagnostic data

    The time-stepping driver attaches the partial run to ``result`` before
    re-raising, so callers always receive the last valid state.
    """

    def __init__(
        self,
        message: str,
        solver_name: str | None = None,
        suggested_action: str | None = None,
        error_code: str | None = None,
        diagnostic_data: dict[str, Any] | None = None,
    ):
        self.solver_name = solver_name or "Unknown Solver"
        self.suggested_action = suggested_action
        self.error_code = error_code
        self.diagnostic_data = diagnostic_data or {}
        self.result: SimulationResult | None = None

        full_message = f"[{self.solver_name}] {message}"

        if self.suggested_action:
            full_message += f"\nSuggestion: {self.suggested_action}"

        if self.error_code:
            full_message += f"\nError Code: {self.error_code}"

        if self.diagnostic_data:
            full_message += "\nDiagnostic Information:"
            for key, value in self.diagnostic_data.items():
                full_message += f"\n   - {key}: {value}"

        super().__init__(full_message)


class InterfaceGeometryError(PFSError):
    """Exception raised when an interface stencil does not bracket the zero level set."""

    def __init__(
        self,
        phi_values: tuple[float, float],
        location: tuple[int, int] | None = None,
        solver_name: str | None = None,
    ):
        diagnostic_data: dict[str, Any] = {
            "phi_pair": f"({phi_values[0]:.6e}, {phi_values[1]:.6e})",
        }
        if location is not None:
            diagnostic_data["grid_point"] = location

        super().__init__(
            message="Degenerate interface geometry: stencil neighbours lie on the same side of zero",
            solver_name=solver_name,
            suggested_action="Domain classification and interface geometry disagree; this indicates a logic bug",
            error_code="DEGENERATE_GEOMETRY",
            diagnostic_data=diagnostic_data,
        )


class DimensionMismatchError(PFSError):
    """Exception raised when array dimensions don't match expected values."""

    def __init__(
        self,
        array_name: str,
        provided_shape: tuple,
        expected_shape: tuple,
        solver_name: str | None = None,
        context: str | None = None,
    ):
        diagnostic_data = {
            "array_name": array_name,
            "provided_shape": str(provided_shape),
            "expected_shape": str(expected_shape),
            "dimension_mismatch": _describe_dimension_mismatch(provided_shape, expected_shape),
        }

        if context:
            diagnostic_data["context"] = context

        super().__init__(
            message=f"Dimension mismatch for {array_name}",
            solver_name=solver_name,
            suggested_action=f"Reshape {array_name} to match the grid: {expected_shape}",
            error_code="DIMENSION_MISMATCH",
            diagnostic_data=diagnostic_data,
        )


class NumericalInstabilityError(PFSError):
    """Exception raised when numerical instability is detected."""

    def __init__(
        self,
        instability_type: str,
        step_number: int | None = None,
        problematic_values: dict[str, Any] | None = None,
        solver_name: str | None = None,
    ):
        diagnostic_data: dict[str, Any] = {"instability_type": instability_type}

        if step_number is not None:
            diagnostic_data["time_step"] = step_number

        if problematic_values:
            diagnostic_data.update(problematic_values)

        super().__init__(
            message=f"Numerical instability detected: {instability_type}",
            solver_name=solver_name,
            suggested_action=_generate_stability_suggestions(instability_type),
            error_code="NUMERICAL_INSTABILITY",
            diagnostic_data=diagnostic_data,
        )


class ConvergenceWarning(UserWarning):
    """Issued when an iterative solve stops at its iteration budget without reaching tolerance."""


def _describe_dimension_mismatch(provided_shape: tuple, expected_shape: tuple) -> str:
    """Describe the specific nature of dimension mismatch."""

    if len(provided_shape) != len(expected_shape):
        return f"Wrong number of dimensions: got {len(provided_shape)}, expected {len(expected_shape)}"

    mismatches = []
    for i, (provided, expected) in enumerate(zip(provided_shape, expected_shape, strict=False)):
        if provided != expected:
            mismatches.append(f"axis {i}: got {provided}, expected {expected}")

    return " | ".join(mismatches)


def _generate_stability_suggestions(instability_type: str) -> str:
    """Generate suggestions for numerical stability issues."""

    if "nan" in instability_type.lower():
        return "Check for: 1) Division by zero, 2) Invalid initial conditions, 3) Too large time steps"
    elif "inf" in instability_type.lower():
        return "Reduce: 1) Time step size, 2) Parameter values, 3) Initial condition magnitudes"
    elif "bound" in instability_type.lower():
        return "Reduce the time step (dt = T/(Nt-1)) or refine the grid; the discretisation left [uf, 1]"
    else:
        return "Check numerical parameters and consider using more stable solver settings"


def validate_array_dimensions(
    array: np.ndarray, expected_shape: tuple, array_name: str, solver_name: str | None = None
):
    """Validate that array has expected dimensions."""
    if array.shape != expected_shape:
        raise DimensionMismatchError(
            array_name=array_name,
            provided_shape=array.shape,
            expected_shape=expected_shape,
            solver_name=solver_name,
        )


def check_density_bounds(
    density: np.ndarray,
    lower: float,
    upper: float = 1.0,
    mask: np.ndarray | None = None,
    step: int | None = None,
    tolerance: float = 1e-10,
    solver_name: str | None = None,
):
    """
    Check that a density field is finite and lies within [lower, upper].

    Args:
        density: Density array
        lower: Background density (lower physical bound)
        upper: Carrying capacity (upper physical bound)
        mask: Optional boolean mask restricting the check (e.g. the interior set)
        step: Time step index for the diagnostic message
        tolerance: Round-off allowance beyond the bounds

    Raises:
        NumericalInstabilityError: If values are non-finite or outside the bounds
    """
    values = density[mask] if mask is not None else density
    if values.size == 0:
        return

    problematic_values: dict[str, Any] = {}

    if np.any(np.isnan(values)):
        problematic_values["nan_count"] = int(np.sum(np.isnan(values)))
        instability_type = "NaN values detected"
    elif np.any(np.isinf(values)):
        problematic_values["inf_count"] = int(np.sum(np.isinf(values)))
        instability_type = "Infinite values detected"
    elif values.min() < lower - tolerance or values.max() > upper + tolerance:
        problematic_values["min_value"] = f"{values.min():.6e}"
        problematic_values["max_value"] = f"{values.max():.6e}"
        problematic_values["bounds"] = f"[{lower:.3e}, {upper:.3e}]"
        instability_type = "Density outside physical bounds"
    else:
        return

    raise NumericalInstabilityError(
        instability_type=instability_type,
        step_number=step,
        problematic_values=problematic_values,
        solver_name=solver_name,
    )
