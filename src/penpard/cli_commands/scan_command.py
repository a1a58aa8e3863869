"""Scan listing and stop CLI commands."""

import typer
from rich.table import Table

from penpard.errors import PenpardError

from .deps import cli_module
from .service_helpers import LOCAL_ROLE, build_service, make_caller, open_store
from .shared import app, console, exit_with_error

STATUS_STYLES = {
    "queued": "dim",
    "running": "cyan",
    "completed": "green",
    "stopped": "yellow",
    "failed": "red",
}


@app.command()
def scans(
    user_id: int | None = typer.Option(None, "--user-id", help="Only list scans of this owner"),
    limit: int = typer.Option(50, "--limit", help="Maximum number of scans to show"),
) -> None:
    """List scans in the project, newest first."""
    cli = cli_module()
    project_dir = cli.require_project()
    store = open_store(project_dir)
    try:
        rows = store.list_scans(user_id=user_id, limit=max(1, limit))
        if not rows:
            console.print("[dim]No scans recorded yet.[/dim]")
            return

        table = Table(title="Scans")
        table.add_column("ID", style="bold")
        table.add_column("Target")
        table.add_column("Type")
        table.add_column("Status")
        table.add_column("Findings", justify="right")
        table.add_column("Created")
        for scan in rows:
            status = scan.status
            if scan.phase:
                status = f"{status} ({scan.phase})"
            style = STATUS_STYLES.get(scan.status, "white")
            created = scan.created_at.strftime("%Y-%m-%d %H:%M") if scan.created_at else "-"
            table.add_row(
                scan.id,
                scan.target,
                scan.type,
                f"[{style}]{status}[/{style}]",
                str(len(scan.findings)),
                created,
            )
        console.print(table)
    finally:
        store.close()


@app.command()
def stop(
    scan_id: str = typer.Argument(..., help="Scan to stop"),
    user_id: int = typer.Option(0, "--user-id", help="Acting user id"),
    role: str = typer.Option(LOCAL_ROLE, "--role", help="Acting user role"),
) -> None:
    """Stop a queued or running scan; its findings stay report-eligible."""
    cli = cli_module()
    project_dir = cli.require_project()
    store = open_store(project_dir)
    try:
        service = build_service(project_dir, store)
        scan = service.stop_scan(scan_id, make_caller(user_id, role))
        console.print(f"[yellow]Scan {scan.id} stopped.[/yellow]")
    except PenpardError as exc:
        raise exit_with_error(exc) from exc
    finally:
        store.close()
