"""Progress bar and spinner wrappers for the Legend Studio CLI."""

from collections.abc import Generator
from contextlib import contextmanager

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .console import BRAND_COLOR, console


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a spinner with a message while a block executes.

    Usage::

        with spinner("Removing background..."):
            await generator.remove_background(draft)
    """
    with console.status(f"[{BRAND_COLOR}]{message}[/{BRAND_COLOR}]"):
        yield


def create_progress() -> Progress:
    """Create a Rich progress bar for tracking a scene batch.

    Scenes are dispatched one at a time, so the bar shows completed/total
    and elapsed time rather than an estimate.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )
