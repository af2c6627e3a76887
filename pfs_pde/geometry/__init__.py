"""Grid and level-set geometry."""

from pfs_pde.geometry.grid import RectangularGrid

__all__ = ["RectangularGrid"]
