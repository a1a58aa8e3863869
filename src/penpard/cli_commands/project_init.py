"""Project initialization CLI command."""

from pathlib import Path

import typer
from rich.panel import Panel

from .deps import cli_module
from .shared import DB_FILENAME, app, console


@app.command()
def init() -> None:
    """Initialize a PenPard project in the current directory."""
    project_dir = Path.cwd()
    marker = project_dir / ".penpard"

    if marker.exists():
        console.print(f"[yellow]Project already initialized at {project_dir}[/yellow]")
        return

    cli = cli_module()
    try:
        storage_dir = cli.ensure_project_storage_dir(project_dir)
        write_test = storage_dir / ".write_test"
        write_test.write_text("ok")
        write_test.unlink()
    except PermissionError as exc:
        console.print(
            "[red]Error: Project directory is not writable.[/red]\n"
            "[dim]Choose a writable location (e.g., under your workspace or /tmp) and "
            "run 'penpard init' again.[/dim]"
        )
        raise typer.Exit(1) from exc
    except (OSError, ValueError) as exc:
        console.print(f"[red]Error initializing project storage: {exc}[/red]")
        raise typer.Exit(1) from exc

    cli.init_db(storage_dir / DB_FILENAME)
    reports_dir = cli.get_reports_dir(project_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)
    env_path = cli.create_project_config_template(project_dir)

    if storage_dir == marker:
        storage_text = "  .penpard/        - Config, database & reports\n"
    else:
        storage_text = (
            "  .penpard         - Project marker\n"
            f"  data/            - Config, database & reports ({storage_dir})\n"
        )

    console.print(
        Panel(
            f"[green]Initialized PenPard project at[/green]\n{project_dir}\n\n"
            f"[dim]Structure:[/dim]\n"
            f"{storage_text}\n"
            f"[yellow]Next steps:[/yellow]\n"
            f"  1. Configure an LLM provider (optional, for enhanced reports):\n"
            f"     Edit: {env_path}\n"
            f"  2. List scans: penpard scans\n"
            f"  3. Download a report: penpard download <scan-id> --format pdf",
            title="Project Created",
            border_style="green",
        )
    )
