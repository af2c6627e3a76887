"""Stencil operators: flux limiters and upwind level-set differences."""

from pfs_pde.operators.limiters import generalized_minmod, limited_face_values, minmod
from pfs_pde.operators.upwind import (
    central_gradient,
    eno2_one_sided,
    godunov_gradient_norm,
    pad_level_set,
    smoothed_sign,
)

__all__ = [
    "central_gradient",
    "eno2_one_sided",
    "generalized_minmod",
    "godunov_gradient_norm",
    "limited_face_values",
    "minmod",
    "pad_level_set",
    "smoothed_sign",
]
