"""
Command-line interface for pfs_pde.

Runs Porous-Fisher-Stefan simulations from a YAML configuration with
optional parameter overrides, and prints the default configuration.
"""

import sys

import click
import yaml

from pfs_pde import __version__


def _build_config(config_path, overrides):
    """Load a configuration (or the defaults) and apply command-line overrides."""
    from pfs_pde.config import PorousFisherStefanConfig, load_config

    base = load_config(config_path) if config_path else PorousFisherStefanConfig()
    values = {key: value for key, value in overrides.items() if value is not None}
    if not values:
        return base
    return PorousFisherStefanConfig(**{**base.model_dump(), **values})


@click.group()
@click.version_option(version=__version__, prog_name="pfs_pde")
def main():
    """
    pfs_pde: Porous-Fisher-Stefan level-set solver

    Two-dimensional invasion fronts with nonlinear diffusion, logistic
    growth and a Stefan-type moving boundary.
    """


@main.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML configuration")
@click.option("--nx", type=int, default=None, help="Number of grid points (x)")
@click.option("--ny", type=int, default=None, help="Number of grid points (y)")
@click.option("--nt", type=int, default=None, help="Number of time levels")
@click.option("--final-time", "-T", type=float, default=None, help="End time")
@click.option("--kappa", type=float, default=None, help="Inverse Stefan number κ")
@click.option("--gamma", type=float, default=None, help="Surface tension coefficient γ")
@click.option("--exponent", "-m", type=float, default=None, help="Nonlinear diffusion exponent m")
@click.option("--epsilon", type=float, default=None, help="Interface perturbation amplitude ε")
@click.option("--wavenumber", "-q", type=float, default=None, help="Interface perturbation wavenumber q")
@click.option(
    "--profile",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Two-column CSV (xi, u) travelling-wave profile for the initial density",
)
@click.option("--output", "-o", type=click.Path(file_okay=False), default=None, help="Directory for CSV output")
@click.option("--progress/--no-progress", default=True, help="Show a progress bar")
@click.option(
    "--log-file", type=click.Path(dir_okay=False), default=None, help="Also write the log to this file (no colours)"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def run(
    config_path,
    nx,
    ny,
    nt,
    final_time,
    kappa,
    gamma,
    exponent,
    epsilon,
    wavenumber,
    profile,
    output,
    progress,
    log_file,
    verbose,
):
    """
    Run a Porous-Fisher-Stefan simulation.

    Examples:
        pfs-run run --nx 201 --ny 101 --nt 901 -T 45
        pfs-run run -c baseline.yaml --kappa 0.5 -o results/kappa05
        pfs-run run -T 5 --log-file runs/short.log
        pfs-run run --epsilon 0.1 -q 1.0 --profile twic.csv
    """
    from pfs_pde.simulation import (
        CSVSnapshotWriter,
        PorousFisherStefanSolver,
        load_travelling_wave_profile,
        travelling_wave_initial_condition,
    )
    from pfs_pde.utils import PFSError, configure_logging

    configure_logging(level="DEBUG" if verbose else "INFO", log_file=log_file)

    try:
        config = _build_config(
            config_path,
            {
                "Nx": nx,
                "Ny": ny,
                "Nt": nt,
                "T": final_time,
                "inverse_stefan": kappa,
                "surface_tension": gamma,
                "diffusion_exponent": exponent,
                "perturbation_amplitude": epsilon,
                "perturbation_wavenumber": wavenumber,
            },
        )
    except (ValueError, OSError, yaml.YAMLError) as e:
        click.echo(f"Error: invalid configuration - {e}", err=True)
        sys.exit(2)

    solver = PorousFisherStefanSolver(config)

    density = phi = None
    if profile:
        xi, u = load_travelling_wave_profile(profile)
        density, phi = travelling_wave_initial_condition(solver.grid, config, xi, u)

    sink = CSVSnapshotWriter(output, solver.grid) if output else None

    if verbose:
        click.echo(f"Grid: Nx={config.Nx}, Ny={config.Ny}, Nt={config.Nt}, dt={config.dt:.4g}")

    try:
        result = solver.run(density=density, phi=phi, sink=sink, strict=False, progress=progress)
    except PFSError as e:
        click.echo(f"Error during run: {e}", err=True)
        sys.exit(1)

    click.echo(f"\n{'=' * 50}")
    click.echo("Run Summary")
    click.echo(f"{'=' * 50}")
    for key, value in result.summary().items():
        click.echo(f"{key}: {value}")

    if output:
        click.echo(f"\nSaved output to: {output}")

    if not result.succeeded:
        click.echo(f"\nRun failed: {result.message}", err=True)
        sys.exit(1)


@main.command("show-config")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML configuration")
def show_config(config_path):
    """
    Print a configuration (the defaults unless --config is given) as YAML.

    Examples:
        pfs-run show-config > baseline.yaml
    """
    config = _build_config(config_path, {})
    click.echo(yaml.safe_dump(config.model_dump(mode="json", exclude_none=True), sort_keys=False, allow_unicode=True))


if __name__ == "__main__":
    main()
