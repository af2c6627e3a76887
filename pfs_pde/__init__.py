from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pfs_pde")  # Matches the name in pyproject.toml
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0-dev"

from .config import PorousFisherStefanConfig, load_config, save_config
from .geometry import RectangularGrid
from .simulation import (
    CSVSnapshotWriter,
    PorousFisherStefanSolver,
    SimulationResult,
    SimulationState,
    Snapshot,
    SnapshotRecorder,
    StopReason,
    front_position,
    step_initial_condition,
    travelling_wave_initial_condition,
)
from .utils import (
    ConvergenceWarning,
    DimensionMismatchError,
    InterfaceGeometryError,
    NumericalInstabilityError,
    PFSError,
    configure_logging,
    get_logger,
)

__all__ = [
    "CSVSnapshotWriter",
    "ConvergenceWarning",
    "DimensionMismatchError",
    "InterfaceGeometryError",
    "NumericalInstabilityError",
    "PFSError",
    "PorousFisherStefanConfig",
    "PorousFisherStefanSolver",
    "RectangularGrid",
    "SimulationResult",
    "SimulationState",
    "Snapshot",
    "SnapshotRecorder",
    "StopReason",
    "__version__",
    "configure_logging",
    "front_position",
    "get_logger",
    "load_config",
    "save_config",
    "step_initial_condition",
    "travelling_wave_initial_condition",
]
