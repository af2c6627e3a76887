"""
Logging for pfs_pde.

Every module asks for its logger with ``get_logger(__name__)``. Handlers are
attached per logger by ``PFSLogger`` so that ``configure_logging`` can change
level, colours or the log file of loggers that already exist.

The ``log_run_*`` helpers write the few messages every run produces (start,
per-step progress, end) in one place.
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

import colorlog

if TYPE_CHECKING:
    from pfs_pde.config.core import PorousFisherStefanConfig
    from pfs_pde.simulation.state import SimulationResult

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class PFSFormatter(colorlog.ColoredFormatter):
    """Console/file formatter with optional colours and source location."""

    def __init__(self, use_colors: bool = False, include_location: bool = False):
        fmt = LOG_FORMAT + (" [%(filename)s:%(lineno)d]" if include_location else "")
        super().__init__(
            "%(log_color)s" + fmt,
            datefmt=DATE_FORMAT,
            log_colors=LOG_COLORS,
            no_color=not use_colors,
        )
        self.use_colors = use_colors
        self.include_location = include_location


class PFSLogger:
    """
    Registry of pfs_pde loggers and their shared settings.

    Settings are class attributes; ``configure`` rebuilds the handlers of
    every logger handed out so far. The lock keeps concurrent first calls to
    ``get_logger`` from attaching handlers twice.
    """

    _lock: ClassVar[threading.Lock] = threading.Lock()
    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _level: ClassVar[int] = logging.INFO
    _log_file: ClassVar[Path | None] = None
    _use_colors: ClassVar[bool] = True
    _include_location: ClassVar[bool] = False

    @classmethod
    def configure(
        cls,
        level: str | int = "INFO",
        log_file: str | Path | None = None,
        use_colors: bool = True,
        include_location: bool = False,
    ) -> None:
        with cls._lock:
            cls._level = getattr(logging, level.upper()) if isinstance(level, str) else level
            cls._use_colors = use_colors
            cls._include_location = include_location

            cls._log_file = None
            if log_file is not None:
                cls._log_file = Path(log_file)
                cls._log_file.parent.mkdir(parents=True, exist_ok=True)

            for logger in cls._loggers.values():
                cls._attach_handlers(logger)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if name in cls._loggers:
            return cls._loggers[name]

        with cls._lock:
            if name not in cls._loggers:
                logger = logging.getLogger(name)
                cls._attach_handlers(logger)
                cls._loggers[name] = logger

        return cls._loggers[name]

    @classmethod
    def _attach_handlers(cls, logger: logging.Logger) -> None:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(cls._level)

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(PFSFormatter(use_colors=cls._use_colors, include_location=cls._include_location))
        logger.addHandler(console)

        if cls._log_file is not None:
            file_handler = logging.FileHandler(cls._log_file, encoding="utf-8")
            file_handler.setFormatter(PFSFormatter(use_colors=False, include_location=cls._include_location))
            logger.addHandler(file_handler)

        # pytest's caplog and host applications listen on the root logger
        logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Logger for a pfs_pde module, normally ``get_logger(__name__)``."""
    return PFSLogger.get_logger(name)


def configure_logging(
    level: str | int = "INFO",
    log_file: str | Path | None = None,
    use_colors: bool = True,
    include_location: bool = False,
) -> None:
    """
    Configure all pfs_pde loggers.

    Args:
        level: Logging level name or number
        log_file: Also write uncoloured records to this file (parents are created)
        use_colors: Colour console output
        include_location: Append ``[file:line]`` to every record
    """
    PFSLogger.configure(level=level, log_file=log_file, use_colors=use_colors, include_location=include_location)


def log_run_start(logger: logging.Logger, solver_name: str, config: PorousFisherStefanConfig) -> None:
    logger.info(
        f"{solver_name}: {config.Nx}x{config.Ny} grid, {config.Nt - 1} steps of dt={config.dt:.4g} "
        f"(dx={config.dx:.4g}, dy={config.dy:.4g})"
    )
    logger.info(
        f"  m={config.diffusion_exponent}, λ={config.reaction_rate}, κ={config.inverse_stefan}, "
        f"γ={config.surface_tension}, front at x={config.interface_offset}"
    )
    logger.debug(f"Configuration: {config.model_dump()}")


def log_run_step(logger: logging.Logger, step: int, n_steps: int, front: float, amplitude: float) -> None:
    logger.debug(f"Step {step}/{n_steps}: front {front:.4f}, amplitude {amplitude:.3e}")


def log_run_end(logger: logging.Logger, solver_name: str, result: SimulationResult) -> None:
    """Summary line of a finished run; failed runs are logged as errors."""
    front = result.front_positions[-1] if result.front_positions else float("nan")
    elapsed = f"{result.execution_time:.3f}s" if result.execution_time is not None else "n/a"
    message = (
        f"{solver_name} stopped ({result.stop_reason.value}) after {result.steps_completed} steps, "
        f"t={result.final_time:.4g}, front {front:.4f}, {elapsed}"
    )
    if result.succeeded:
        logger.info(message)
    else:
        logger.error(message)
    if result.warnings:
        logger.info(f"  {len(result.warnings)} warning(s), first: {result.warnings[0]}")
