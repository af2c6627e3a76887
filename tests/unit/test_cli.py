"""
Unit tests for the pfs-run command-line interface.
"""

import pytest

import yaml
from click.testing import CliRunner

from pfs_pde.cli import main
from pfs_pde.utils.pfs_logging import configure_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """The run command reconfigures logging onto the runner's stdout; restore it afterwards."""
    yield
    configure_logging()


@pytest.fixture
def runner():
    return CliRunner()


class TestShowConfig:
    def test_prints_defaults_as_yaml(self, runner):
        result = runner.invoke(main, ["show-config"])
        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data["inverse_stefan"] == 0.1
        assert data["Nx"] == 401

    def test_reads_config_file(self, runner, tmp_path, config_factory):
        path = tmp_path / "run.yaml"
        config_factory(inverse_stefan=0.5).to_yaml(path)

        result = runner.invoke(main, ["show-config", "-c", str(path)])
        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["inverse_stefan"] == 0.5


class TestRun:
    def test_small_run_writes_output(self, runner, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(
            main,
            ["run", "--nx", "21", "--ny", "5", "--nt", "3", "-T", "0.02", "--no-progress", "-o", str(out)],
        )

        assert result.exit_code == 0, result.output
        assert "Run Summary" in result.output
        assert "stop_reason: completed" in result.output
        for name in ("x.csv", "y.csv", "U-0.csv", "U-2.csv", "L.csv", "Amp.csv", "plot_times.csv"):
            assert (out / name).exists(), name

    def test_log_file(self, runner, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        result = runner.invoke(
            main,
            ["run", "--nx", "21", "--ny", "5", "--nt", "3", "-T", "0.02", "--no-progress", "--log-file", str(log_file)],
        )

        assert result.exit_code == 0, result.output
        text = log_file.read_text(encoding="utf-8")
        assert "21x5 grid, 2 steps" in text
        assert "stopped (completed) after 2 steps" in text
        assert "\x1b[" not in text

    def test_invalid_override_exits_with_usage_code(self, runner):
        result = runner.invoke(main, ["run", "--nx", "2", "--no-progress"])
        assert result.exit_code == 2
        assert "invalid configuration" in result.output

    def test_missing_config_file(self, runner, tmp_path):
        result = runner.invoke(main, ["run", "-c", str(tmp_path / "missing.yaml")])
        assert result.exit_code != 0


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "pfs_pde" in result.output
