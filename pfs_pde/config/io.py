"""
YAML I/O for Porous-Fisher-Stefan configurations.

This module provides functions to load and save the parameter record from/to
YAML files with pydantic validation.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import yaml

if TYPE_CHECKING:
    from .core import PorousFisherStefanConfig


def load_config(path: str | Path) -> PorousFisherStefanConfig:
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

    Raises
    ------
    FileNotFoundError
        If configuration file doesn't exist
    ValidationError
        If configuration is invalid
    yaml.YAMLError
        If YAML syntax is invalid

    YAML Format
    -----------
    inverse_stefan: 0.1
    diffusion_exponent: 1.0
    Nx: 401
    Ny: 201
    Nt: 1801
    """
    from .core import PorousFisherStefanConfig

    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {path}\nPlease create a YAML configuration file or use programmatic config."
        )

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML syntax in {path}: {e}") from e

    if data is None:
        data = {}

    return PorousFisherStefanConfig(**data)


def save_config(config: PorousFisherStefanConfig, path: str | Path) -> None:
    """
    Save configuration to YAML file.

    Parameters
    ----------
    config : PorousFisherStefanConfig
        Configuration to save
    path : str | Path
        Output file path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_none=True)

    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
