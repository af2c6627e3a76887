"""Time stepping, initial conditions, diagnostics and snapshot output."""

from pfs_pde.simulation.diagnostics import FrontDiagnostics, column_front_positions, front_position
from pfs_pde.simulation.driver import PorousFisherStefanSolver
from pfs_pde.simulation.initial_conditions import (
    initial_level_set,
    load_travelling_wave_profile,
    step_initial_condition,
    travelling_wave_initial_condition,
)
from pfs_pde.simulation.output import CSVSnapshotWriter, SnapshotRecorder, SnapshotSink
from pfs_pde.simulation.state import SimulationResult, SimulationState, Snapshot, StopReason

__all__ = [
    "CSVSnapshotWriter",
    "FrontDiagnostics",
    "PorousFisherStefanSolver",
    "SimulationResult",
    "SimulationState",
    "Snapshot",
    "SnapshotRecorder",
    "SnapshotSink",
    "StopReason",
    "column_front_positions",
    "front_position",
    "initial_level_set",
    "load_travelling_wave_profile",
    "step_initial_condition",
    "travelling_wave_initial_condition",
]
