"""Shared progress bar utilities for Rich console displays."""

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.text import Text


class BlockRateColumn(ProgressColumn):
    """Renders the processing speed of a task in blocks per second."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        if speed is None:
            return Text("-.-- blocks/s", style="progress.data.speed")
        return Text(f"{speed:.2f} blocks/s", style="progress.data.speed")


def create_block_progress(
    console: Console | None = None,
    *,
    expand: bool = False,
    show_time_remaining: bool = True,
) -> Progress:
    """Create a progress bar for block range processing.

    Args:
        console: Rich console instance (optional)
        expand: Whether to expand the progress bar to full width
        show_time_remaining: Whether to add the time remaining estimate

    Returns:
        Configured Progress instance with:
        - Spinner
        - Task description
        - Progress bar
        - M of N counter
        - Blocks per second
        - Time elapsed
        - Time remaining (optional)

    Example:
        ```python
        from rich.console import Console
        from src.helpers.progress import create_block_progress

        progress = create_block_progress(Console())

        with progress:
            task_id = progress.add_task("Downloading blocks", total=500)
            progress.update(task_id, advance=1)
        ```
    """
    columns: list[ProgressColumn] = [
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("•"),
        BlockRateColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
    ]
    if show_time_remaining:
        columns.extend([TextColumn("•"), TimeRemainingColumn()])

    return Progress(*columns, console=console, expand=expand)


@contextmanager
def track_progress(
    description: str,
    total: int,
    console: Console | None = None,
    *,
    show_time_remaining: bool = True,
) -> Iterator[tuple[Progress, TaskID]]:
    """Context manager for tracking progress with automatic cleanup.

    Args:
        description: Task description to display
        total: Total number of items to process
        console: Rich console instance (optional)
        show_time_remaining: Whether to show time remaining estimate

    Yields:
        Tuple of (Progress instance, TaskID) for updating progress

    Example:
        ```python
        from src.helpers.progress import track_progress

        blocks = range(100, 200)
        with track_progress("Downloading", total=len(blocks)) as (progress, task):
            for number in blocks:
                progress.update(task, advance=1, description=f"Block {number}")
        ```
    """
    progress = create_block_progress(
        console, show_time_remaining=show_time_remaining
    )

    with progress:
        task_id = progress.add_task(description, total=total)
        yield progress, task_id


__all__ = [
    "BlockRateColumn",
    "create_block_progress",
    "track_progress",
]
