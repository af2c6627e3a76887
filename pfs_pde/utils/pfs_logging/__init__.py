"""
Logging utilities for pfs_pde.

Usage:
    >>> from pfs_pde.utils.pfs_logging import configure_logging, get_logger
    >>> logger = get_logger(__name__)
    >>> configure_logging(level="DEBUG", log_file="runs/planar/run.log")
    >>> logger.info("Starting computation...")
"""

from __future__ import annotations

from .logger import (
    PFSFormatter,
    PFSLogger,
    configure_logging,
    get_logger,
    log_run_end,
    log_run_start,
    log_run_step,
)

__all__ = [
    "PFSFormatter",
    "PFSLogger",
    "configure_logging",
    "get_logger",
    "log_run_end",
    "log_run_start",
    "log_run_step",
]
