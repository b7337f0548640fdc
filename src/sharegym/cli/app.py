"""Shared Typer app object, shared option types, and store utilities."""

from dataclasses import replace
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.settings import Settings, load_settings
from ..io.analytics_store import AnalyticsStore

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Directory holding local state (default: ~/.sharegym)"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="sharegym",
    help="Workout analytics, smart cheers, and backend sync for ShareGym.",
    no_args_is_help=True,
)


def get_settings(data_dir: Path | None = None) -> Settings:
    """Load settings, letting an explicit --data-dir win over config and env."""
    settings = load_settings()
    if data_dir is not None:
        settings = replace(settings, data_dir=data_dir)
    return settings


def get_store(data_dir: Path | None) -> AnalyticsStore:
    """Get the analytics store from an explicit directory or the configured one."""
    return AnalyticsStore(get_settings(data_dir).data_dir)
