"""
CLI entry point using Typer.

Provides commands for local workout analytics and backend sync:
- log-session: Analyze a session file and persist updated patterns
- cheer: Pick the cheer for the set about to start
- patterns / stats: Show learned exercise patterns and user stats
- predict: Next weight and rest prediction for an exercise
- exercise-id / catalog: Inspect the exercise catalog and ID mapping
- sync: Save a session to the backend, analyzing it locally as well
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from . import views
from .app import app
from .commands import analysis, catalog, sessions  # noqa: F401  (registers commands)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    ShareGym workout analytics.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=views.err_console, rich_tracebacks=True)],
        force=True,
    )


if __name__ == "__main__":
    app()
