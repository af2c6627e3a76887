"""Configuration for Porous-Fisher-Stefan runs."""

from pfs_pde.config.core import PorousFisherStefanConfig
from pfs_pde.config.io import load_config, save_config

__all__ = ["PorousFisherStefanConfig", "load_config", "save_config"]
