"""
Porous-Fisher field solver on the irregular region Ω = {ϕ < 0}.

Solves one time step of

    ∂u/∂t = ∇·(D uᵐ ∇u) + λ u (1 - u)

restricted to the interior set D, with

- u = u_I (interface density) on the moving boundary, imposed at the
  sub-cell crossing θ·h of each irregular stencil (Shortley-Weller),
- u = 1 at x = -Lx and u = u_f at x = +Lx,
- zero flux through the faces next to y = 0 and y = Ly.

Time discretisation is linearly implicit backward Euler:

    (1 + Δt λ uⁿ) u^{n+1} - Δt ∇·(D (u*)ᵐ ∇u^{n+1}) = uⁿ (1 + Δt λ)

with the diffusivity frozen at the Picard iterate u* and iterated to a
fixed point. Face diffusivities between interior points use u reconstructed
at the face with generalised-minmod limited slopes (parameter θ). The
system matrix is an M-matrix and the reaction splitting maps [u_f, 1] into
itself, so the discrete density stays within [u_f, 1] whenever its
boundary data do.

A grid point whose smallest crossing fraction is below the threshold θb is
treated as lying on the interface and takes the interface density directly.

References:
- Shortley & Weller (1938): The numerical solution of Laplace's equation
- Gibou, Fedkiw, Cheng & Kang (2002): A second-order-accurate symmetric
  discretization of the Poisson equation on irregular domains
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla

from pfs_pde.geometry.level_set.domain import STENCIL_DIRECTIONS
from pfs_pde.operators.limiters import limited_face_values
from pfs_pde.utils.exceptions import ConvergenceWarning, check_density_bounds
from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from pfs_pde.config.core import PorousFisherStefanConfig
    from pfs_pde.geometry.grid import RectangularGrid
    from pfs_pde.geometry.level_set.domain import DomainClassification
    from pfs_pde.geometry.level_set.interface import InterfaceGeometry

logger = get_logger(__name__)

# Floor on the crossing fraction of an interface arm
_MIN_ARM_FRACTION = 1e-12


@dataclass
class FieldStepResult:
    """
    Outcome of one field solve.

    Attributes:
        density: Updated density u, shape (Nx, Ny)
        iterations: Picard iterations performed
        converged: Whether the Picard increment fell below tolerance
        increment: Final Picard increment (max norm)
    """

    density: NDArray[np.float64]
    iterations: int
    converged: bool
    increment: float


def transformed_density(density: NDArray[np.float64], exponent: float) -> NDArray[np.float64]:
    """Φ = u^{m+1}."""
    return np.power(density, exponent + 1.0)


def apply_boundary_values(
    density: NDArray[np.float64],
    phi: NDArray[np.float64],
    background_density: float,
) -> NDArray[np.float64]:
    """
    Impose Dirichlet x edges and mirror the y edges inside Ω, in place.

    Returns:
        The same array, for chaining
    """
    density[0, :] = 1.0
    density[-1, :] = background_density

    inner = slice(1, -1)
    for edge, neighbour in ((0, 1), (-1, -2)):
        inside = phi[inner, edge] < 0
        density[inner, edge] = np.where(inside, density[inner, neighbour], density[inner, edge])
    return density


class PorousFisherSolver:
    """
    Linearly implicit finite-difference solver for the porous-Fisher equation on Ω.

    Examples
    --------
    >>> solver = PorousFisherSolver(grid, config)
    >>> domain = classify(phi)
    >>> geometry = compute_interface_geometry(phi, domain, grid)
    >>> u_I = interface_density(geometry, config)
    >>> step = solver.solve_step(U, phi, domain, geometry, u_I, dt=config.dt)
    >>> U = step.density
    """

    def __init__(self, grid: RectangularGrid, config: PorousFisherStefanConfig):
        """
        Initialize field solver.

        Parameters
        ----------
        grid : RectangularGrid
            Spatial grid.
        config : PorousFisherStefanConfig
            Physical constants (D, m, λ, uf), limiter θ, threshold θb and the
            Picard iteration budget.
        """
        self.grid = grid
        self.config = config

        self.D = config.diffusion_coefficient
        self.m = config.diffusion_exponent
        self.reaction_rate = config.reaction_rate
        self.uf = config.background_density
        self.limiter_theta = config.limiter_theta
        self.threshold = config.interface_threshold
        self.max_iterations = config.picard_max_iterations
        self.tolerance = config.picard_tolerance

        self.warnings: list[str] = []

    def solve_step(
        self,
        density: NDArray[np.float64],
        phi: NDArray[np.float64],
        domain: DomainClassification,
        geometry: InterfaceGeometry,
        u_interface: NDArray[np.float64],
        dt: float,
        step: int | None = None,
    ) -> FieldStepResult:
        """
        Advance the density one time step on the interior set.

        Parameters
        ----------
        density : np.ndarray
            Density uⁿ, shape (Nx, Ny). Not modified.
        phi : np.ndarray
            Level set used to build ``domain`` and ``geometry``.
        domain : DomainClassification
            Interior and interface sets.
        geometry : InterfaceGeometry
            Crossing fractions of the interface points.
        u_interface : np.ndarray
            Interface density per interface point, shape (k,).
        dt : float
            Time step.
        step : int, optional
            Time-step index for diagnostics.

        Returns
        -------
        FieldStepResult
            Updated density; points outside the interior set keep their values
            except for the boundary rows.

        Raises
        ------
        NumericalInstabilityError
            If the interior density leaves [uf, 1] or becomes non-finite.
        """
        u_old = apply_boundary_values(density.copy(), phi, self.uf)
        if domain.n_interior == 0:
            return FieldStepResult(density=u_old, iterations=0, converged=True, increment=0.0)

        pi, pj = domain.interior[:, 0], domain.interior[:, 1]
        shape = self.grid.shape

        theta_grid = geometry.to_grid(geometry.theta, shape)
        u_I_grid = geometry.to_grid(u_interface, shape)

        # Geometry points are the interface set, in the same order
        pinned = np.zeros(domain.n_interior, dtype=bool)
        if geometry.n_points:
            pinned[domain.interface_rows()] = geometry.min_theta() < self.threshold

        u_prev = u_old[pi, pj]
        iterate = u_prev.copy()
        increment = np.inf
        converged = False
        iterations = 0

        for iterations in range(1, self.max_iterations + 1):
            work = u_old.copy()
            work[pi, pj] = iterate

            matrix, rhs = self._assemble(work, u_prev, pi, pj, domain.index_map, theta_grid, u_I_grid, pinned, dt)
            solution = spla.spsolve(matrix, rhs)

            increment = float(np.max(np.abs(solution - iterate)))
            iterate = solution

            logger.debug(f"Picard iteration {iterations}: increment = {increment:.3e}")

            # Constant diffusivity: the system is linear and one solve is exact
            if self.m == 0 or increment < self.tolerance:
                converged = True
                break

        if not converged:
            message = (
                f"Field solve did not converge in {self.max_iterations} Picard iterations "
                f"(increment {increment:.3e} > tolerance {self.tolerance:.1e})"
                + (f" at step {step}" if step is not None else "")
            )
            logger.warning(message)
            warnings.warn(message, ConvergenceWarning, stacklevel=2)
            self.warnings.append(message)

        u_new = u_old.copy()
        u_new[pi, pj] = iterate
        apply_boundary_values(u_new, phi, self.uf)

        check_density_bounds(
            u_new, self.uf, 1.0, mask=domain.interior_mask, step=step, solver_name=type(self).__name__
        )

        return FieldStepResult(density=u_new, iterations=iterations, converged=converged, increment=increment)

    def _face_diffusivities(self, work: NDArray[np.float64]) -> tuple[NDArray, NDArray]:
        """Limited face diffusivities D·u_faceᵐ, shapes (Nx-1, Ny) and (Nx, Ny-1)."""
        face_x = limited_face_values(work, self.limiter_theta, axis=0)
        face_y = limited_face_values(work, self.limiter_theta, axis=1)
        return self.D * np.power(face_x, self.m), self.D * np.power(face_y, self.m)

    def _assemble(
        self,
        work: NDArray[np.float64],
        u_prev: NDArray[np.float64],
        pi: NDArray[np.intp],
        pj: NDArray[np.intp],
        index_map: NDArray[np.intp],
        theta_grid: NDArray[np.float64],
        u_I_grid: NDArray[np.float64],
        pinned: NDArray[np.bool_],
        dt: float,
    ) -> tuple[sp.csr_matrix, NDArray[np.float64]]:
        """
        Build the reduced system over the interior set for the current Picard iterate.

        Row r of the system reads

            (1 + Δt λ uⁿ_P + Δt Σ c_Q) u_P - Δt Σ_{Q ∈ D} c_Q u_Q
                = uⁿ_P (1 + Δt λ) + Δt Σ_{Q ∉ D} c_Q u_Q^{boundary}

        with c_Q = D_face / (h_Q · w), h_Q the distance to neighbour or
        interface along the stencil arm and w the local cell width.
        """
        n = pi.size
        nx = self.grid.shape[0]
        spacing = (self.grid.dx, self.grid.dx, self.grid.dy, self.grid.dy)

        diff_x, diff_y = self._face_diffusivities(work)
        u_P = work[pi, pj]

        arm_length = []
        arm_crossing = []
        arm_diffusivity = []
        for d, (di, dj) in enumerate(STENCIL_DIRECTIONS):
            theta = theta_grid[pi, pj, d]
            crossing = ~np.isnan(theta)
            # Zero-length arms only occur at pinned points, whose rows are replaced below
            fraction = np.maximum(np.nan_to_num(theta), _MIN_ARM_FRACTION)
            length = np.where(crossing, fraction * spacing[d], spacing[d])

            if di == 1:
                regular = diff_x[pi, pj]
            elif di == -1:
                regular = diff_x[pi - 1, pj]
            elif dj == 1:
                regular = diff_y[pi, pj]
            else:
                regular = diff_y[pi, pj - 1]

            u_I = np.nan_to_num(u_I_grid[pi, pj])
            interface_face = self.D * np.power(0.5 * (u_P + u_I), self.m)

            arm_length.append(length)
            arm_crossing.append(crossing)
            arm_diffusivity.append(np.where(crossing, interface_face, regular))

        width_x = 0.5 * (arm_length[0] + arm_length[1])
        width_y = 0.5 * (arm_length[2] + arm_length[3])
        widths = (width_x, width_x, width_y, width_y)

        diag = 1.0 + dt * self.reaction_rate * u_prev
        rhs = u_prev * (1.0 + dt * self.reaction_rate)
        rows: list[NDArray] = []
        cols: list[NDArray] = []
        vals: list[NDArray] = []
        row_index = np.arange(n)

        for d, (di, dj) in enumerate(STENCIL_DIRECTIONS):
            crossing = arm_crossing[d]
            coeff = dt * arm_diffusivity[d] / (arm_length[d] * widths[d])

            qi, qj = pi + di, pj + dj
            neighbour = index_map[qi, qj]
            on_x_edge = (qi == 0) | (qi == nx - 1)

            # Interface arm: Dirichlet value u_I at the crossing
            diag += np.where(crossing, coeff, 0.0)
            rhs += np.where(crossing, coeff * np.nan_to_num(u_I_grid[pi, pj]), 0.0)

            # Interior neighbour: matrix coupling
            coupled = ~crossing & (neighbour >= 0)
            diag += np.where(coupled, coeff, 0.0)
            rows.append(row_index[coupled])
            cols.append(neighbour[coupled])
            vals.append(-coeff[coupled])

            # Far-field Dirichlet rows at x = ±Lx
            dirichlet = ~crossing & (neighbour < 0) & on_x_edge
            diag += np.where(dirichlet, coeff, 0.0)
            rhs += np.where(dirichlet, coeff * work[qi, qj], 0.0)

            # Remaining arms end on a y edge: zero flux, no contribution

        # Points on the interface take the interface density directly
        if np.any(pinned):
            keep = []
            for r, c, v in zip(rows, cols, vals, strict=True):
                mask = ~pinned[r]
                keep.append((r[mask], c[mask], v[mask]))
            rows, cols, vals = (list(t) for t in zip(*keep, strict=True))
            diag = np.where(pinned, 1.0, diag)
            rhs = np.where(pinned, np.nan_to_num(u_I_grid[pi, pj]), rhs)

        rows.append(row_index)
        cols.append(row_index)
        vals.append(diag)

        matrix = sp.coo_matrix(
            (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))), shape=(n, n)
        ).tocsr()
        return matrix, rhs
