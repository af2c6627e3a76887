"""
Time-stepping driver of the Porous-Fisher-Stefan level-set model.

Each time step is a strict pipeline over the state of the previous step:

1. classify interior and interface points from ϕ (stop if either is empty),
2. interface geometry: crossing fractions, normals, curvature,
3. interface density u_I = u_f + γK,
4. implicit porous-Fisher step for u on Ω,
5. Stefan speed at the interface and its extension to the grid,
6. advection of ϕ by the extended speed,
7. reinitialisation of ϕ (every ``reinit_interval`` steps),
8. front diagnostics, and a snapshot at the configured cadence.

Stopping:
- COMPLETED after Nt - 1 steps;
- DOMAIN_EXHAUSTED when the front has left or filled the domain (clean stop);
- FAILED on a fatal error (degenerate geometry, density out of bounds). The
  last valid state is still emitted, the partial result is attached to the
  exception as ``exc.result``, and the exception is re-raised unless
  ``strict=False``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pfs_pde.geometry.grid import RectangularGrid
from pfs_pde.geometry.level_set import (
    advect_level_set,
    advection_cfl,
    classify,
    compute_interface_geometry,
    extend_velocity,
    reinitialize,
)
from pfs_pde.simulation.diagnostics import front_position
from pfs_pde.simulation.initial_conditions import step_initial_condition
from pfs_pde.simulation.state import SimulationResult, SimulationState, Snapshot, StopReason
from pfs_pde.solvers import PorousFisherSolver, interface_density, interface_speed
from pfs_pde.utils.exceptions import NumericalInstabilityError, PFSError, validate_array_dimensions
from pfs_pde.utils.pfs_logging import get_logger, log_run_end, log_run_start, log_run_step
from pfs_pde.utils.progress import SolverTimer, StepProgress

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pfs_pde.config.core import PorousFisherStefanConfig
    from pfs_pde.simulation.output import SnapshotSink

logger = get_logger(__name__)


class PorousFisherStefanSolver:
    """
    Coupled level-set / Stefan free-boundary solver.

    Example:
        >>> config = PorousFisherStefanConfig(Nx=101, Ny=11, Lx=5.0, Ly=1.0, T=0.2, Nt=21)
        >>> solver = PorousFisherStefanSolver(config)
        >>> result = solver.run()
        >>> result.stop_reason
        <StopReason.COMPLETED: 'completed'>
    """

    def __init__(self, config: PorousFisherStefanConfig, grid: RectangularGrid | None = None):
        """
        Initialize solver.

        Args:
            config: Immutable run configuration
            grid: Grid matching the configuration (built from it when omitted)
        """
        self.config = config
        self.grid = grid if grid is not None else RectangularGrid.from_config(config)
        if self.grid.shape != (config.Nx, config.Ny):
            raise ValueError(f"Grid shape {self.grid.shape} does not match configuration ({config.Nx}, {config.Ny})")

        self.field_solver = PorousFisherSolver(self.grid, config)
        self.dt = config.dt
        self.column = config.slice_column

        self._cfl_warned = False

    def initial_state(
        self,
        density: NDArray[np.float64] | None = None,
        phi: NDArray[np.float64] | None = None,
    ) -> SimulationState:
        """
        Build the step-0 state, defaulting to the step initial condition.

        Raises:
            DimensionMismatchError: If a supplied array does not have shape (Nx, Ny)
        """
        if density is None or phi is None:
            default_density, default_phi = step_initial_condition(self.grid, self.config)
            density = default_density if density is None else density
            phi = default_phi if phi is None else phi

        density = np.array(density, dtype=float)
        phi = np.array(phi, dtype=float)
        validate_array_dimensions(density, self.grid.shape, "density", type(self).__name__)
        validate_array_dimensions(phi, self.grid.shape, "phi", type(self).__name__)

        return SimulationState(step=0, time=0.0, density=density, phi=phi, velocity=np.zeros(self.grid.shape))

    def step(self, state: SimulationState, result: SimulationResult) -> SimulationState | None:
        """
        Advance one time step.

        Args:
            state: State after the previous step (not modified)
            result: Run result collecting non-fatal diagnostics

        Returns:
            New state, or None if the domain is exhausted (nothing was updated)

        Raises:
            InterfaceGeometryError: On inconsistent interface stencils
            NumericalInstabilityError: If the density leaves [uf, 1] or ϕ becomes non-finite
        """
        n = state.step + 1
        config = self.config

        domain = classify(state.phi)
        if domain.is_exhausted:
            logger.info(
                f"Domain exhausted at step {n}: {domain.n_interior} interior, {domain.n_interface} interface points"
            )
            return None

        geometry = compute_interface_geometry(state.phi, domain, self.grid)
        u_interface = interface_density(geometry, config)

        field = self.field_solver.solve_step(state.density, state.phi, domain, geometry, u_interface, self.dt, step=n)
        result.picard_iterations.append(field.iterations)
        if not field.converged:
            result.warnings.append(self.field_solver.warnings[-1])

        speed = interface_speed(field.density, geometry, u_interface, self.grid, config)
        velocity = extend_velocity(
            state.phi, geometry.points, speed, self.grid, config.velocity_iterations, config.extension_cfl
        )

        cfl = advection_cfl(velocity, self.grid, self.dt)
        if cfl > 1.0 and not self._cfl_warned:
            message = f"Advection CFL number {cfl:.2f} > 1 at step {n}; reduce dt or refine the time grid"
            logger.warning(message)
            result.warnings.append(message)
            self._cfl_warned = True

        phi = advect_level_set(state.phi, velocity, self.grid, self.dt)
        if not np.all(np.isfinite(phi)):
            raise NumericalInstabilityError(
                "Non-finite level set after advection",
                step_number=n,
                problematic_values={"max_speed": f"{np.max(np.abs(speed)):.3e}", "cfl": f"{cfl:.3e}"},
                solver_name=type(self).__name__,
            )

        if n % config.reinit_interval == 0:
            phi = reinitialize(phi, self.grid, config.reinit_iterations, config.reinit_cfl)

        time = float(self.grid.t[n]) if self.grid.t is not None else n * self.dt
        return SimulationState(step=n, time=time, density=field.density, phi=phi, velocity=velocity)

    def _snapshot(self, state: SimulationState, result: SimulationResult) -> Snapshot:
        return Snapshot.from_state(
            state,
            self.config.diffusion_exponent,
            self.column,
            front_position=result.front_positions[-1],
            amplitude=result.amplitudes[-1],
        )

    def run(
        self,
        density: NDArray[np.float64] | None = None,
        phi: NDArray[np.float64] | None = None,
        sink: SnapshotSink | None = None,
        strict: bool = True,
        progress: bool = False,
    ) -> SimulationResult:
        """
        Run to completion, domain exhaustion or failure.

        Args:
            density: Initial density (default: step initial condition)
            phi: Initial level set (default: perturbed line x = β + ε cos(q y))
            sink: Receiver of snapshots and of the final result
            strict: Re-raise fatal errors (with ``exc.result`` attached) instead
                of returning a FAILED result
            progress: Show a progress bar

        Returns:
            SimulationResult with the last valid state and the stop reason

        Raises:
            PFSError: On a fatal error when ``strict`` is True
        """
        config = self.config
        n_steps = config.Nt - 1
        solver_name = type(self).__name__

        log_run_start(logger, solver_name, config)
        self._cfl_warned = False

        state = self.initial_state(density, phi)
        result = SimulationResult(state=state, metadata={"config": config.model_dump()})

        diagnostics = front_position(self.grid.x, state.phi, self.column)
        result.record(state.time, diagnostics.position, diagnostics.amplitude)

        def emit(current: SimulationState) -> None:
            if sink is not None and (not result.snapshot_steps or result.snapshot_steps[-1] != current.step):
                sink.write_snapshot(self._snapshot(current, result))
                result.snapshot_steps.append(current.step)

        emit(state)
        error: PFSError | None = None

        with SolverTimer(solver_name) as timer, StepProgress(n_steps, "Porous-Fisher-Stefan", disable=not progress) as bar:
            for _ in range(n_steps):
                try:
                    new_state = self.step(state, result)
                except PFSError as exc:
                    logger.error(f"Run failed at step {state.step + 1}: {exc}")
                    result.stop_reason = StopReason.FAILED
                    result.message = str(exc)
                    error = exc
                    break

                if new_state is None:
                    result.stop_reason = StopReason.DOMAIN_EXHAUSTED
                    break

                state = new_state
                result.state = state
                result.steps_completed = state.step

                diagnostics = front_position(self.grid.x, state.phi, self.column)
                result.record(state.time, diagnostics.position, diagnostics.amplitude)

                if state.step % config.snapshot_interval == 0:
                    emit(state)

                log_run_step(logger, state.step, n_steps, diagnostics.position, diagnostics.amplitude)
                bar.update(front=f"{diagnostics.position:.3f}")

        emit(state)
        result.execution_time = timer.duration
        if sink is not None:
            sink.close(result)

        log_run_end(logger, solver_name, result)

        if error is not None:
            error.result = result
            if strict:
                raise error
        return result
