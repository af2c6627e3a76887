"""
Snapshot sinks.

A sink receives complete snapshots from the driver after a step has fully
completed, and the final result once the run stops. Sinks never feed
anything back into the computation.

- ``SnapshotRecorder`` keeps snapshots in memory.
- ``CSVSnapshotWriter`` writes the post-processing file set:

      x.csv, y.csv, t.csv                 coordinates and time levels
      U-<i>.csv                           Φ = u^{m+1} at step i
      Phi-<i>.csv                         level set ϕ at step i
      V-<i>.csv                           extended speed at step i
      ux-<i>.csv, uy-<i>.csv              x- and y-slices of Φ
      plot_times.csv                      steps with snapshots
      L.csv, Amp.csv                      front position and amplitude per step
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import numpy as np

from pfs_pde.utils.pfs_logging import get_logger

if TYPE_CHECKING:
    from pfs_pde.geometry.grid import RectangularGrid
    from pfs_pde.simulation.state import SimulationResult, Snapshot

logger = get_logger(__name__)


class SnapshotSink(Protocol):
    """Receiver of snapshots emitted by the driver."""

    def write_snapshot(self, snapshot: Snapshot) -> None: ...

    def close(self, result: SimulationResult) -> None: ...


class SnapshotRecorder:
    """In-memory sink."""

    def __init__(self):
        self.snapshots: list[Snapshot] = []
        self.result: SimulationResult | None = None

    def write_snapshot(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)

    def close(self, result: SimulationResult) -> None:
        self.result = result

    @property
    def steps(self) -> list[int]:
        return [s.step for s in self.snapshots]

    def __len__(self) -> int:
        return len(self.snapshots)


class CSVSnapshotWriter:
    """
    Write snapshots and diagnostic series as comma-separated text files.

    Example:
        >>> writer = CSVSnapshotWriter("results/run1", grid)
        >>> result = solver.run(sink=writer)
    """

    def __init__(self, output_dir: str | Path, grid: RectangularGrid, fmt: str = "%.10e"):
        self.output_dir = Path(output_dir)
        self.grid = grid
        self.fmt = fmt
        self.plot_times: list[int] = []

        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._save("x.csv", grid.x)
        self._save("y.csv", grid.y)
        if grid.t is not None:
            self._save("t.csv", grid.t)

    def _save(self, name: str, values) -> Path:
        path = self.output_dir / name
        np.savetxt(path, np.atleast_1d(values), delimiter=",", fmt=self.fmt)
        return path

    def write_snapshot(self, snapshot: Snapshot) -> None:
        i = snapshot.step
        self._save(f"U-{i}.csv", snapshot.Phi)
        self._save(f"Phi-{i}.csv", snapshot.phi)
        self._save(f"V-{i}.csv", snapshot.velocity)
        self._save(f"ux-{i}.csv", snapshot.Phi_x_slice)
        self._save(f"uy-{i}.csv", snapshot.Phi_y_slice)

        self.plot_times.append(i)
        np.savetxt(self.output_dir / "plot_times.csv", np.asarray(self.plot_times, dtype=int), fmt="%d")
        logger.debug(f"Wrote snapshot {i} to {self.output_dir}")

    def close(self, result: SimulationResult) -> None:
        self._save("L.csv", np.asarray(result.front_positions, dtype=float))
        self._save("Amp.csv", np.asarray(result.amplitudes, dtype=float))
        logger.info(f"Saved {len(self.plot_times)} snapshots and diagnostics to {self.output_dir}")
