# pages_deploy/cli/utils/progress.py
"""Progress display utilities"""

from contextlib import contextmanager
from typing import Generator, Optional

from rich.console import Console
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TimeElapsedColumn,
    TaskID,
)

from ...models import DeploymentStatus


class ProgressManager:
    """Centralized progress management"""

    def __init__(self, console: Console = None):
        self.console = console or Console()

    @contextmanager
    def basic_progress(self, description: str = "Processing...") -> Generator[Progress, None, None]:
        """Simple spinner progress"""
        with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=self.console,
                transient=True,
        ) as progress:
            progress.add_task(description)
            yield progress

    @contextmanager
    def deployment_progress(self, label: str) -> Generator['DeploymentProgress', None, None]:
        """Progress bar following a deployment's coarse state"""
        with Progress(
                SpinnerColumn(),
                TextColumn("[bold]{task.description}"),
                BarColumn(),
                "[progress.percentage]{task.percentage:>3.0f}%",
                TimeElapsedColumn(),
                console=self.console,
        ) as progress:
            yield DeploymentProgress(progress, progress.add_task(label, total=100))


class DeploymentProgress:
    """Status callback that drives a progress bar

    New stage log lines are printed above the bar as they appear.
    """

    def __init__(self, progress: Progress, task_id: TaskID):
        self.progress = progress
        self.task_id = task_id
        self._seen = set()
        self.last: Optional[DeploymentStatus] = None

    def __call__(self, status: DeploymentStatus) -> None:
        self.last = status
        self.progress.update(
            self.task_id,
            completed=status.progress,
            description=status.status.value,
        )

        for line in status.logs:
            if line not in self._seen:
                self._seen.add(line)
                self.progress.console.print(f"[dim]  {line}[/dim]")
