import os
import sys

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn


def is_ci_environment():
    return (
        os.getenv('CI') is not None or
        os.getenv('GITHUB_ACTIONS') is not None or
        not sys.stdout.isatty()
    )


def get_console() -> Console:
    """Detect environment and create console."""
    if is_ci_environment():
        # CI/automated environment - no colors, no interactive elements
        return Console(force_terminal=False, no_color=True)

    # Interactive terminal - full Rich capabilities
    return Console()


def create_upload_progress(console: Console) -> Progress:
    """Progress display for a single upload reported in percent."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        disable=is_ci_environment(),
    )
