"""Helpers that open project storage and build the report service for commands."""

from pathlib import Path

import typer

from penpard.modules.report import Caller, ReportService
from penpard.modules.store import FindingStore

from .deps import cli_module
from .shared import console

LOCAL_ROLE = "admin"


def open_store(project_dir: Path) -> FindingStore:
    """Open the project's finding store, failing when the project has no database."""
    cli = cli_module()
    db_path = cli.get_project_db_path(project_dir)
    if db_path is None or not db_path.exists():
        console.print("[red]Project storage not found. Run 'penpard init' first.[/red]")
        raise typer.Exit(1)
    return cli.FindingStore(db_path)


def build_service(project_dir: Path, store: FindingStore) -> ReportService:
    cli = cli_module()
    return cli.ReportService(
        store,
        cli.ArtifactStorage(cli.get_reports_dir(project_dir)),
        provider_config=cli.resolve_provider_config(store, project_dir),
        concurrency=cli.get_enhance_concurrency(project_dir),
    )


def make_caller(user_id: int, role: str) -> Caller:
    """Commands run as the local operator unless a user and role are given."""
    return Caller(user_id=user_id, role=(role or LOCAL_ROLE).strip().lower())
