"""
Simulation state, snapshots and run results.

``SimulationState`` holds the running arrays owned by the driver. Each
pipeline stage receives them and returns new arrays; the driver swaps them
in only after a step has fully completed, so the state is always that of the
last valid step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np

from pfs_pde.solvers import porous_fisher

if TYPE_CHECKING:
    from numpy.typing import NDArray


class StopReason(str, Enum):
    """Why a run ended."""

    COMPLETED = "completed"
    DOMAIN_EXHAUSTED = "domain_exhausted"
    FAILED = "failed"


@dataclass
class SimulationState:
    """
    Running fields after ``step`` time steps.

    Attributes:
        step: Number of completed time steps
        time: Physical time
        density: Density u, shape (Nx, Ny)
        phi: Level-set array ϕ, shape (Nx, Ny)
        velocity: Extended normal speed of the last step, shape (Nx, Ny)
    """

    step: int
    time: float
    density: NDArray[np.float64]
    phi: NDArray[np.float64]
    velocity: NDArray[np.float64]

    def transformed_density(self, exponent: float) -> NDArray[np.float64]:
        """Φ = u^{m+1}."""
        return porous_fisher.transformed_density(self.density, exponent)


@dataclass(frozen=True)
class Snapshot:
    """
    Complete, consistent view of the fields after a step.

    Attributes:
        step: Time-step index
        time: Physical time
        density: Density u
        Phi: Transformed density Φ = u^{m+1}
        phi: Level set ϕ
        velocity: Extended normal speed
        Phi_x_slice: Φ along x at the slice column
        Phi_y_slice: Φ along y at the middle x index
        front_position: Front position at the slice column
        amplitude: Perturbation amplitude of the front
    """

    step: int
    time: float
    density: NDArray[np.float64]
    Phi: NDArray[np.float64]
    phi: NDArray[np.float64]
    velocity: NDArray[np.float64]
    Phi_x_slice: NDArray[np.float64]
    Phi_y_slice: NDArray[np.float64]
    front_position: float
    amplitude: float

    @classmethod
    def from_state(
        cls, state: SimulationState, exponent: float, column: int, front_position: float, amplitude: float
    ) -> Snapshot:
        """Copy the arrays of ``state`` into a snapshot."""
        Phi = state.transformed_density(exponent)
        row = (Phi.shape[0] - 1) // 2
        return cls(
            step=state.step,
            time=state.time,
            density=state.density.copy(),
            Phi=Phi,
            phi=state.phi.copy(),
            velocity=state.velocity.copy(),
            Phi_x_slice=Phi[:, column].copy(),
            Phi_y_slice=Phi[row, :].copy(),
            front_position=front_position,
            amplitude=amplitude,
        )


@dataclass
class SimulationResult:
    """
    Outcome of a run: last valid state, stop reason and diagnostic time series.

    The diagnostic lists are append-only and start with the initial state
    (step 0).

    Attributes:
        state: State after the last completed step
        stop_reason: Why the run ended
        steps_completed: Number of completed time steps
        times: Time of each diagnostic record
        front_positions: Front position at the slice column per record
        amplitudes: Perturbation amplitude per record
        picard_iterations: Picard iterations of each field solve (one per step)
        snapshot_steps: Steps at which snapshots were emitted
        warnings: Non-fatal diagnostics (non-convergence, CFL)
        message: Error message of a failed run
        execution_time: Wall-clock time in seconds
        metadata: Additional information (configuration dump)
    """

    state: SimulationState
    stop_reason: StopReason = StopReason.COMPLETED
    steps_completed: int = 0
    times: list[float] = field(default_factory=list)
    front_positions: list[float] = field(default_factory=list)
    amplitudes: list[float] = field(default_factory=list)
    picard_iterations: list[int] = field(default_factory=list)
    snapshot_steps: list[int] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    message: str | None = None
    execution_time: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def final_time(self) -> float:
        return self.state.time

    @property
    def succeeded(self) -> bool:
        """True unless the run stopped on a fatal error."""
        return self.stop_reason is not StopReason.FAILED

    def record(self, time: float, front_position: float, amplitude: float) -> None:
        """Append one diagnostic record."""
        self.times.append(time)
        self.front_positions.append(front_position)
        self.amplitudes.append(amplitude)

    def summary(self) -> dict[str, Any]:
        """Scalar summary for display."""
        return {
            "stop_reason": self.stop_reason.value,
            "steps_completed": self.steps_completed,
            "final_time": self.final_time,
            "front_position": self.front_positions[-1] if self.front_positions else None,
            "amplitude": self.amplitudes[-1] if self.amplitudes else None,
            "warnings": len(self.warnings),
            "execution_time": self.execution_time,
        }

    def __repr__(self) -> str:
        return (
            f"SimulationResult(stop_reason={self.stop_reason.value}, steps={self.steps_completed}, "
            f"t={self.final_time:.4g}, warnings={len(self.warnings)})"
        )
