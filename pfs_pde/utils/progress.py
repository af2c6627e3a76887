#!/usr/bin/env python3
"""
Progress Monitoring Utilities for pfs_pde

Progress bars and timing for long time-stepping runs, built on rich.
"""

from __future__ import annotations

import time
from typing import Any

from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn, TimeRemainingColumn

console = Console()


class SolverTimer:
    """
    Context manager for timing solver operations.
    """

    def __init__(self, description: str = "Operation", verbose: bool = False):
        self.description = description
        self.verbose = verbose
        self.start_time: float | None = None
        self.end_time: float | None = None
        self.duration: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        if self.verbose:
            console.print(f"Starting {self.description}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()
        self.duration = self.end_time - (self.start_time or 0)

        if self.verbose:
            if exc_type is None:
                console.print(f"SUCCESS: {self.description} completed in {self.format_duration()}")
            else:
                console.print(f"ERROR: {self.description} failed after {self.format_duration()}")

    def format_duration(self) -> str:
        """Format duration in human-readable form."""
        if self.duration is None:
            return "Unknown"

        if self.duration < 1:
            return f"{self.duration * 1000:.1f}ms"
        elif self.duration < 60:
            return f"{self.duration:.2f}s"
        elif self.duration < 3600:
            minutes = int(self.duration // 60)
            seconds = self.duration % 60
            return f"{minutes}m {seconds:.1f}s"
        else:
            hours = int(self.duration // 3600)
            minutes = int((self.duration % 3600) // 60)
            seconds = self.duration % 60
            return f"{hours}h {minutes}m {seconds:.1f}s"


class StepProgress:
    """
    Progress bar for the time-stepping loop with per-step diagnostics.

    Example:
        >>> with StepProgress(total=1800, description="Porous-Fisher-Stefan") as progress:
        ...     for step in range(1800):
        ...         progress.update(front=f"{L:.3f}")
    """

    def __init__(self, total: int, description: str = "Time steps", disable: bool = False):
        self.total = total
        self.description = description
        self.disable = disable
        self.completed = 0
        self._progress: Progress | None = None
        self._task_id = None

    def __enter__(self):
        if self.disable:
            return self

        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=console,
        )
        self._progress.__enter__()
        self._task_id = self._progress.add_task(self.description, total=self.total)
        return self

    def __exit__(self, *args):
        if self._progress is not None:
            self._progress.__exit__(*args)

    def update(self, n: int = 1, **postfix: Any):
        """Advance the bar and show postfix values next to the description."""
        self.completed += n
        if self.disable or self._progress is None:
            return

        description = self.description
        if postfix:
            postfix_str = ", ".join(f"{k}={v}" for k, v in postfix.items())
            description = f"{self.description} [{postfix_str}]"
        self._progress.update(self._task_id, advance=n, description=description)
