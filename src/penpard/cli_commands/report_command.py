"""Report generation, download and capability CLI commands."""

from pathlib import Path

import typer
from rich.table import Table

from penpard.errors import PenpardError

from .deps import cli_module
from .service_helpers import LOCAL_ROLE, build_service, make_caller, open_store
from .shared import app, console, exit_with_error


@app.command()
def report(
    scan_id: str = typer.Argument(..., help="Completed or stopped scan"),
    user_id: int = typer.Option(0, "--user-id", help="Acting user id"),
    role: str = typer.Option(LOCAL_ROLE, "--role", help="Acting user role"),
) -> None:
    """Get the scan's standard PDF report, generating it on first request."""
    cli = cli_module()
    project_dir = cli.require_project()
    store = open_store(project_dir)
    try:
        service = build_service(project_dir, store)
        artifact = cli.safe_async_run(
            service.get_or_create_report(scan_id, make_caller(user_id, role))
        )
    except PenpardError as exc:
        raise exit_with_error(exc) from exc
    finally:
        store.close()

    label = "Cached report" if artifact.cached else "Report generated"
    console.print(f"[green]{label}:[/green] {artifact.path}")


@app.command()
def download(
    scan_id: str = typer.Argument(..., help="Completed or stopped scan"),
    format: str = typer.Option("pdf", "--format", "-f", help="pdf, docx, pptx, json or md"),
    mode: str = typer.Option(
        "baseline", "--mode", "-m", help="baseline (alias: static) or llm"
    ),
    image_processing: bool = typer.Option(
        False,
        "--image-processing/--no-image-processing",
        help="Ask a vision-capable provider to mark up finding screenshots",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file or directory (default: current directory)"
    ),
    user_id: int = typer.Option(0, "--user-id", help="Acting user id"),
    role: str = typer.Option(LOCAL_ROLE, "--role", help="Acting user role"),
) -> None:
    """Download a report in the requested format and generation mode."""
    cli = cli_module()
    project_dir = cli.require_project()
    store = open_store(project_dir)
    try:
        service = build_service(project_dir, store)
        with console.status(f"[blue]Preparing {format.upper()} report...[/blue]"):
            artifact = cli.safe_async_run(
                service.download_report(
                    scan_id,
                    make_caller(user_id, role),
                    format=format,
                    mode=mode,
                    image_processing=image_processing,
                )
            )
    except PenpardError as exc:
        raise exit_with_error(exc) from exc
    finally:
        store.close()

    target = output or Path.cwd()
    if target.is_dir():
        target = target / artifact.filename
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(artifact.content)
    except OSError as exc:
        console.print(f"[red]Could not write report to {target}: {exc}[/red]")
        raise typer.Exit(1) from exc

    source = "cache" if artifact.cached else f"{artifact.mode.value} generation"
    console.print(
        f"[green]Saved {artifact.format.value.upper()} report:[/green] {target} "
        f"[dim]({len(artifact.content)} bytes, {artifact.content_type}, from {source})[/dim]"
    )


@app.command()
def capabilities() -> None:
    """Show which report enhancements the configured provider supports."""
    cli = cli_module()
    project_dir = cli.require_project()
    store = open_store(project_dir)
    try:
        snapshot = build_service(project_dir, store).check_capabilities()
    finally:
        store.close()

    table = Table(title="Report Capabilities")
    table.add_column("Capability", style="cyan")
    table.add_column("Value")
    table.add_row("Provider", snapshot.provider_name)
    table.add_row("Model", snapshot.model_name)
    table.add_row("LLM enhancement", _yes_no(snapshot.provider_configured))
    table.add_row("Screenshot analysis", _yes_no(snapshot.vision_supported))
    console.print(table)


def _yes_no(value: bool) -> str:
    return "[green]yes[/green]" if value else "[dim]no[/dim]"
