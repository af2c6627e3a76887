"""
Unit tests for snapshots, run results and snapshot sinks.
"""

import pytest

import numpy as np

from pfs_pde.simulation import (
    CSVSnapshotWriter,
    SimulationResult,
    SimulationState,
    Snapshot,
    SnapshotRecorder,
    StopReason,
)


@pytest.fixture
def state(small_grid, planar_phi):
    density = np.full(small_grid.shape, 0.5)
    return SimulationState(step=3, time=0.03, density=density, phi=planar_phi.copy(), velocity=np.zeros(small_grid.shape))


class TestSnapshot:
    def test_from_state(self, state):
        snapshot = Snapshot.from_state(state, exponent=1.0, column=5, front_position=0.05, amplitude=0.0)

        assert snapshot.step == 3
        assert snapshot.time == pytest.approx(0.03)
        np.testing.assert_allclose(snapshot.Phi, 0.25)
        assert snapshot.Phi_x_slice.shape == (101,)
        assert snapshot.Phi_y_slice.shape == (11,)

    def test_arrays_are_copies(self, state):
        snapshot = Snapshot.from_state(state, exponent=1.0, column=5, front_position=0.05, amplitude=0.0)
        state.density[:] = 1.0
        state.phi[:] = 1.0
        assert snapshot.density[0, 0] == 0.5
        assert snapshot.phi[0, 0] == pytest.approx(-5.05)

    def test_frozen(self, state):
        snapshot = Snapshot.from_state(state, exponent=1.0, column=5, front_position=0.05, amplitude=0.0)
        with pytest.raises(AttributeError):
            snapshot.step = 4


class TestSimulationResult:
    def test_record_and_summary(self, state):
        result = SimulationResult(state=state)
        result.record(0.0, 0.05, 0.0)
        result.record(0.01, 0.06, 0.001)

        summary = result.summary()
        assert summary["stop_reason"] == "completed"
        assert summary["front_position"] == pytest.approx(0.06)
        assert summary["final_time"] == pytest.approx(0.03)
        assert result.succeeded

    def test_failed(self, state):
        result = SimulationResult(state=state, stop_reason=StopReason.FAILED, message="boom")
        assert not result.succeeded
        assert "failed" in repr(result)


class TestSnapshotRecorder:
    def test_records_in_order(self, state):
        recorder = SnapshotRecorder()
        for step in (0, 10, 20):
            state.step = step
            recorder.write_snapshot(Snapshot.from_state(state, 1.0, 5, 0.05, 0.0))
        recorder.close(SimulationResult(state=state))

        assert recorder.steps == [0, 10, 20]
        assert len(recorder) == 3
        assert recorder.result is not None


class TestCSVSnapshotWriter:
    def test_file_set(self, tmp_path, small_grid, state):
        writer = CSVSnapshotWriter(tmp_path / "run", small_grid)
        writer.write_snapshot(Snapshot.from_state(state, 1.0, 5, 0.05, 0.0))

        result = SimulationResult(state=state)
        result.record(0.0, 0.05, 0.0)
        result.record(0.01, 0.06, 0.0)
        writer.close(result)

        out = tmp_path / "run"
        for name in ("x.csv", "y.csv", "t.csv", "U-3.csv", "Phi-3.csv", "V-3.csv", "ux-3.csv", "uy-3.csv"):
            assert (out / name).exists(), name
        for name in ("plot_times.csv", "L.csv", "Amp.csv"):
            assert (out / name).exists(), name

    def test_contents(self, tmp_path, small_grid, state):
        writer = CSVSnapshotWriter(tmp_path, small_grid)
        writer.write_snapshot(Snapshot.from_state(state, 1.0, 5, 0.05, 0.0))
        state.step = 7
        writer.write_snapshot(Snapshot.from_state(state, 1.0, 5, 0.05, 0.0))

        np.testing.assert_allclose(np.loadtxt(tmp_path / "x.csv", delimiter=","), small_grid.x)
        np.testing.assert_allclose(np.loadtxt(tmp_path / "U-3.csv", delimiter=","), 0.25)
        np.testing.assert_array_equal(np.loadtxt(tmp_path / "plot_times.csv", dtype=int), [3, 7])
