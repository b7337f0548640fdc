"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of analytics state.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.exercises.base import ExerciseType
from ..core.exercises.registry import display_name
from ..core.id_mapping import DEFAULT_MAPPER
from ..core.models import ExercisePattern, PersonalizedCheer, UserStats

console = Console()
err_console = Console(stderr=True)


def _kg(value: float) -> str:
    return f"{value:g} kg" if value else "-"


def format_patterns_table(patterns: dict[str, ExercisePattern]) -> Table:
    """
    Format exercise patterns as a Rich table.

    Args:
        patterns: Patterns keyed by exercise id

    Returns:
        Rich Table object
    """
    table = Table(title="Exercise Patterns", show_header=True, header_style="bold")

    table.add_column("Exercise", style="cyan")
    table.add_column("Workouts", justify="right")
    table.add_column("Typical", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Last", justify="right")
    table.add_column("PR", justify="right", style="bold green")
    table.add_column("Volume", justify="right")
    table.add_column("Rest", justify="right", style="dim")

    for exercise_id, p in sorted(patterns.items()):
        table.add_row(
            f"{display_name(exercise_id)} [dim]({exercise_id})[/dim]",
            str(p.workout_count),
            _kg(p.typical_weight),
            f"{p.typical_reps:.1f}",
            _kg(p.last_workout_weight),
            _kg(p.personal_record),
            f"{p.total_volume:g}",
            f"{p.average_rest_time:.0f}s",
        )

    return table


def print_patterns(patterns: dict[str, ExercisePattern]) -> None:
    if not patterns:
        console.print("[yellow]No exercise patterns recorded yet.[/yellow]")
        return
    console.print(format_patterns_table(patterns))


def print_user_stats(stats: UserStats, days_since: int) -> None:
    """
    Print user statistics panel.

    Args:
        stats: Current user stats
        days_since: Days since the last workout (sentinel when never)
    """
    last = stats.last_workout_date.strftime("%Y-%m-%d %H:%M") if stats.last_workout_date else "never"
    lines = [
        f"[bold]Total workouts:[/bold] {stats.total_workouts}",
        f"[bold]Streak:[/bold] {stats.workout_streak} day(s)",
        f"[bold]Last workout:[/bold] {last}",
        f"[bold]Average duration:[/bold] {stats.average_workout_duration / 60:.1f} min",
        f"[bold]Preferred time:[/bold] {stats.preferred_workout_time}",
    ]
    if stats.last_workout_date is not None:
        lines.append(f"[bold]Days since last workout:[/bold] {days_since}")

    console.print(Panel("\n".join(lines), title="User Stats", expand=False))


def print_cheer(cheer: PersonalizedCheer | None) -> None:
    if cheer is None:
        console.print("[dim]No cheer for this set.[/dim]")
        return
    console.print(f"{cheer.emoji} [bold magenta]{cheer.message}[/bold magenta] [dim]({cheer.trigger})[/dim]")


def format_catalog_table(exercises: list[ExerciseType]) -> Table:
    table = Table(title="Exercise Catalog", show_header=True, header_style="bold")

    table.add_column("ID", justify="right", style="dim")
    table.add_column("Exercise ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Muscles", style="dim")

    for ex in exercises:
        table.add_row(
            str(DEFAULT_MAPPER.to_backend_id(ex.id)),
            ex.id,
            ex.name,
            ex.category or "-",
            ", ".join(ex.muscle_groups),
        )

    return table


def print_catalog(exercises: list[ExerciseType]) -> None:
    if not exercises:
        console.print("[yellow]No exercises match.[/yellow]")
        return
    console.print(format_catalog_table(exercises))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
