"""Shared CLI app objects and project helpers."""

import tempfile
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from penpard.config import is_global_config_dir
from penpard.errors import PenpardError

app = typer.Typer(
    name="penpard",
    help="Scan lifecycle tracking and penetration-test report generation",
    no_args_is_help=True,
)
console = Console()

DB_FILENAME = "penpard.db"


def get_project_dir() -> Path | None:
    """Find the project directory by looking for a .penpard marker.

    Stops walking at the system temp root (e.g. ``/tmp``) to avoid
    matching stale ``.penpard`` dirs left by test runs or throwaway work.
    """
    current = Path.cwd()
    try:
        temp_root = Path(tempfile.gettempdir()).resolve()
    except OSError:
        temp_root = None
    while current != current.parent:
        if temp_root and current.resolve() == temp_root:
            return None
        marker = current / ".penpard"
        if marker.exists():
            if (
                marker.is_dir()
                and is_global_config_dir(marker)
                and not (marker / DB_FILENAME).exists()
            ):
                current = current.parent
                continue
            return current
        current = current.parent
    return None


def require_project() -> Path:
    """Ensure the current directory is inside a PenPard project."""
    project_dir = get_project_dir()
    if project_dir:
        return project_dir

    home_marker = Path.home() / ".penpard"
    if (
        home_marker.is_dir()
        and is_global_config_dir(home_marker)
        and not (home_marker / DB_FILENAME).exists()
    ):
        console.print(
            "[yellow]Note:[/yellow] ~/.penpard is a global config folder, not a project marker."
        )
    console.print("[red]Error: Not in a penpard project. Run 'penpard init' first.[/red]")
    raise typer.Exit(1)


def exit_with_error(exc: PenpardError) -> typer.Exit:
    """Print a classified error and return the exit to raise."""
    console.print(f"[red]Error ({exc.code}):[/red] {escape(exc.message)}")
    return typer.Exit(1)
