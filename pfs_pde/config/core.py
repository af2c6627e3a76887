"""
Parameter record for the Porous-Fisher-Stefan level-set model.

The configuration specifies both WHAT is solved (physical constants, domain,
initial interface) and HOW (grid resolution, time stepping, iteration budgets
of the extension and reinitialisation sweeps). It is immutable for the whole
run: every component receives the same frozen instance.

Model
-----
    ∂u/∂t = ∇·(D uᵐ ∇u) + λ u (1 - u)       in Ω(t) = {ϕ < 0}
    u = u_f + γ K                            on ∂Ω(t)
    V = -κ D/(m+1) ∂Φ/∂n,  Φ = u^{m+1}       on ∂Ω(t)

Symbols of the original formulation are given in each field description.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from pathlib import Path


class PorousFisherStefanConfig(BaseModel):
    """
    Immutable parameter record for a Porous-Fisher-Stefan run.

    Attributes
    ----------
    diffusion_coefficient : float
        D, scale of the nonlinear diffusivity D·uᵐ (default: 1.0)
    diffusion_exponent : float
        m, nonlinear diffusion exponent; m = 0 recovers Fisher-KPP (default: 1.0)
    reaction_rate : float
        λ, logistic reaction rate (default: 1.0)
    inverse_stefan : float
        κ, inverse Stefan number in the interface speed (default: 0.1)
    surface_tension : float
        γ, curvature coefficient of the interface density (default: 0.0)
    Nx, Ny, Nt : int
        Grid points in x, y and number of time levels (defaults: 401, 201, 1801)

    Examples
    --------
    >>> config = PorousFisherStefanConfig(Nx=101, Ny=51, Nt=201, T=10.0)
    >>> config.dt
    0.05
    >>> config.to_yaml("runs/baseline.yaml")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Physical parameters
    diffusion_coefficient: float = Field(1.0, gt=0.0, description="D: diffusion coefficient")
    diffusion_exponent: float = Field(1.0, ge=0.0, description="m: nonlinear diffusion exponent, D(u) = D u^m")
    reaction_rate: float = Field(1.0, ge=0.0, description="λ: reaction rate")
    inverse_stefan: float = Field(0.1, description="κ: inverse Stefan number")
    surface_tension: float = Field(0.0, description="γ: surface tension coefficient")
    interface_offset: float = Field(0.0, description="β: initial interface position")
    background_density: float = Field(1e-6, gt=0.0, lt=1.0, description="uf: background density at interface")

    # Discretisation parameters
    interface_threshold: float = Field(
        0.01, gt=0.0, lt=1.0, description="θb: crossing fraction below which a point is treated as on the interface"
    )
    limiter_theta: float = Field(1.99, ge=1.0, le=2.0, description="θ: generalised minmod flux-limiter parameter")
    Lx: float = Field(10.0, gt=0.0, description="Spatial domain limit (x), domain is (-Lx, Lx)")
    Ly: float = Field(10.0, gt=0.0, description="Spatial domain limit (y), domain is (0, Ly)")
    T: float = Field(90.0, gt=0.0, description="End time")
    Nx: int = Field(401, ge=3, description="Number of grid points (x)")
    Ny: int = Field(201, ge=3, description="Number of grid points (y)")
    Nt: int = Field(1801, ge=2, description="Number of time levels")
    velocity_iterations: int = Field(20, ge=0, description="V_Iterations: sweeps of the velocity extension PDE")
    reinit_iterations: int = Field(20, ge=0, description="ϕ_Iterations: sweeps of the reinitialisation PDE")
    reinit_interval: int = Field(1, ge=1, description="Reinitialise every reinit_interval time steps")
    extension_cfl: float = Field(0.5, gt=0.0, le=0.7, description="Pseudo-time step of the extension PDE / min(dx, dy)")
    reinit_cfl: float = Field(0.5, gt=0.0, le=0.7, description="Pseudo-time step of reinitialisation / min(dx, dy)")
    picard_max_iterations: int = Field(25, ge=1, description="Picard iterations on the nonlinear diffusivity")
    picard_tolerance: float = Field(1e-8, gt=0.0, description="Picard convergence tolerance (max norm)")

    # Initial perturbation
    perturbation_amplitude: float = Field(0.0, ge=0.0, description="ε: amplitude of interface perturbation")
    perturbation_wavenumber: float = Field(0.0, ge=0.0, description="q: wavenumber of interface perturbation")

    # Output cadence
    snapshot_interval: int = Field(600, ge=1, description="Emit a snapshot every snapshot_interval steps")
    slice_index_y: int | None = Field(None, ge=0, description="Column used for the front position (default: Ny // 2)")

    @model_validator(mode="after")
    def validate_consistency(self) -> PorousFisherStefanConfig:
        """Validate cross-field consistency and warn about dubious settings."""
        if self.slice_index_y is not None and self.slice_index_y >= self.Ny:
            raise ValueError(f"slice_index_y={self.slice_index_y} must be smaller than Ny={self.Ny}")

        if not -self.Lx < self.interface_offset < self.Lx:
            raise ValueError(f"interface_offset={self.interface_offset} must lie inside (-Lx, Lx)")

        if self.inverse_stefan < 0:
            warnings.warn(
                f"Negative inverse Stefan number (κ={self.inverse_stefan}) gives a receding front "
                "that can become unstable",
                UserWarning,
                stacklevel=2,
            )

        if self.perturbation_amplitude > 0 and self.perturbation_wavenumber == 0:
            warnings.warn(
                "perturbation_amplitude > 0 with zero wavenumber only shifts the interface",
                UserWarning,
                stacklevel=2,
            )

        return self

    @property
    def dx(self) -> float:
        """Grid spacing in x."""
        return 2.0 * self.Lx / (self.Nx - 1)

    @property
    def dy(self) -> float:
        """Grid spacing in y."""
        return self.Ly / (self.Ny - 1)

    @property
    def dt(self) -> float:
        """Time step."""
        return self.T / (self.Nt - 1)

    @property
    def slice_column(self) -> int:
        """Column index used for the front-position slice."""
        return self.slice_index_y if self.slice_index_y is not None else (self.Ny - 1) // 2

    def to_yaml(self, path: str | Path) -> None:
        """
        Save configuration to YAML file.

        Parameters
        ----------
        path : str | Path
            Output file path
        """
        from .io import save_config

        save_config(self, path)

    @classmethod
    def from_yaml(cls, path: str | Path) -> PorousFisherStefanConfig:
        """
        Load configuration from YAML file.

        Parameters
        ----------
        path : str | Path
            Path to YAML configuration file

        Returns
        -------
        PorousFisherStefanConfig
            Validated configuration
        """
        from .io import load_config

        return load_config(path)
