"""Analysis tracking CLI command."""

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from penpard.errors import PenpardError
from penpard.modules.poller import HttpStatusSource, PollUpdate, TrackingSession

from .deps import cli_module
from .service_helpers import LOCAL_ROLE, build_service, make_caller, open_store
from .shared import app, console, exit_with_error


async def _follow(session: TrackingSession) -> PollUpdate | None:
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
        transient=False,
    ) as progress:
        task = progress.add_task(f"Scan {session.scan_id}", total=100)
        async for update in session:
            progress.update(
                task,
                completed=update.progress,
                description=f"{update.status} (attempt {update.attempt})",
            )
    return await session.wait()


async def _track(service, scan_id, caller, interval, max_attempts, engine_url):
    source = HttpStatusSource(engine_url) if engine_url else None
    try:
        session = service.start_tracking(
            scan_id,
            caller,
            interval=interval,
            max_attempts=max_attempts,
            source=source,
        )
        return await _follow(session)
    finally:
        if source is not None:
            await source.aclose()


@app.command()
def track(
    scan_id: str = typer.Argument(..., help="Scan to follow"),
    interval: float | None = typer.Option(
        None, "--interval", help="Seconds between status queries"
    ),
    max_attempts: int | None = typer.Option(
        None, "--max-attempts", help="Status queries before giving up"
    ),
    engine_url: str | None = typer.Option(
        None, "--engine-url", help="Query a remote analysis engine instead of the project store"
    ),
    user_id: int = typer.Option(0, "--user-id", help="Acting user id"),
    role: str = typer.Option(LOCAL_ROLE, "--role", help="Acting user role"),
) -> None:
    """Follow an analysis job until it finishes, fails or times out."""
    cli = cli_module()
    project_dir = cli.require_project()
    store = open_store(project_dir)
    try:
        service = build_service(project_dir, store)
        final = cli.safe_async_run(
            _track(
                service,
                scan_id,
                make_caller(user_id, role),
                interval if interval and interval > 0 else cli.get_poll_interval(project_dir),
                max_attempts
                if max_attempts and max_attempts > 0
                else cli.get_poll_max_attempts(project_dir),
                engine_url,
            )
        )
    except PenpardError as exc:
        raise exit_with_error(exc) from exc
    except KeyboardInterrupt:
        console.print("[yellow]Tracking cancelled.[/yellow]")
        raise typer.Exit(130)
    finally:
        store.close()

    if final is None:
        console.print("[yellow]Tracking ended without a final status.[/yellow]")
        raise typer.Exit(1)
    if final.succeeded:
        console.print(f"[green]Scan {scan_id} {final.outcome.value}.[/green]")
        return
    if final.error is not None:
        raise exit_with_error(final.error)
    console.print(f"[yellow]Tracking {final.outcome.value}.[/yellow]")
    raise typer.Exit(1)
