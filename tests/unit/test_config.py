"""
Unit tests for the Porous-Fisher-Stefan configuration and its YAML I/O.
"""

import warnings

import pytest
from pydantic import ValidationError

from pfs_pde.config import PorousFisherStefanConfig, load_config, save_config


class TestPorousFisherStefanConfig:
    """Test parameter record defaults and validation."""

    def test_default_values(self):
        config = PorousFisherStefanConfig()
        assert config.diffusion_coefficient == 1.0
        assert config.diffusion_exponent == 1.0
        assert config.reaction_rate == 1.0
        assert config.inverse_stefan == 0.1
        assert config.surface_tension == 0.0
        assert config.background_density == 1e-6
        assert config.interface_threshold == 0.01
        assert config.limiter_theta == 1.99
        assert (config.Nx, config.Ny, config.Nt) == (401, 201, 1801)
        assert config.velocity_iterations == 20
        assert config.reinit_iterations == 20

    def test_derived_spacings(self):
        config = PorousFisherStefanConfig()
        assert config.dx == pytest.approx(0.05)
        assert config.dy == pytest.approx(0.05)
        assert config.dt == pytest.approx(0.05)
        assert config.slice_column == 100

    def test_slice_column_override(self):
        config = PorousFisherStefanConfig(Ny=11, slice_index_y=3)
        assert config.slice_column == 3

    def test_immutable(self):
        config = PorousFisherStefanConfig()
        with pytest.raises(ValidationError):
            config.Nx = 11

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            PorousFisherStefanConfig(kappa=0.1)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("Nx", 2),
            ("Nt", 1),
            ("background_density", 0.0),
            ("background_density", 1.0),
            ("limiter_theta", 2.5),
            ("interface_threshold", 0.0),
            ("diffusion_coefficient", -1.0),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            PorousFisherStefanConfig(**{field: value})

    def test_slice_index_out_of_range(self):
        with pytest.raises(ValidationError, match="slice_index_y"):
            PorousFisherStefanConfig(Ny=11, slice_index_y=11)

    def test_offset_outside_domain(self):
        with pytest.raises(ValidationError, match="interface_offset"):
            PorousFisherStefanConfig(Lx=5.0, interface_offset=5.0)

    def test_negative_stefan_number_warns(self):
        with pytest.warns(UserWarning, match="Negative inverse Stefan number"):
            PorousFisherStefanConfig(inverse_stefan=-0.1)

    def test_amplitude_without_wavenumber_warns(self):
        with pytest.warns(UserWarning, match="zero wavenumber"):
            PorousFisherStefanConfig(perturbation_amplitude=0.1)

    def test_defaults_do_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            PorousFisherStefanConfig()


class TestConfigIO:
    """Test YAML round trip."""

    def test_yaml_round_trip(self, tmp_path):
        config = PorousFisherStefanConfig(Nx=51, Ny=21, inverse_stefan=0.5, surface_tension=0.01, slice_index_y=4)
        path = tmp_path / "runs" / "config.yaml"

        config.to_yaml(path)
        loaded = PorousFisherStefanConfig.from_yaml(path)

        assert path.exists()
        assert loaded == config

    def test_partial_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("inverse_stefan: 0.25\nNx: 101\n")

        config = load_config(path)

        assert config.inverse_stefan == 0.25
        assert config.Nx == 101
        assert config.Ny == 201

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == PorousFisherStefanConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_values_in_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("limiter_theta: 3.0\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_none_fields_omitted(self, tmp_path):
        path = tmp_path / "config.yaml"
        save_config(PorousFisherStefanConfig(), path)
        assert "slice_index_y" not in path.read_text()
